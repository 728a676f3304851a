"""
Scheduling and preference errors.
"""


class ScheduleError(Exception):
    """Base class for schedule service errors."""


class InvalidTimeRangeError(ScheduleError, ValueError):
    """A start/end time is malformed or the range is empty or inverted."""


class InvalidTemplateError(ScheduleError, ValueError):
    """A weekly template names an unknown day."""


class InvalidWeekStartError(ScheduleError, ValueError):
    """A template week was given a start date that isn't a Sunday."""


class PastWeekError(ScheduleError):
    """The requested week starts before the current calendar week."""

    def __init__(self, message: str = "Cannot create schedules for past weeks. "
                                      "Please select a current or future week."):
        super().__init__(message)


class ScheduleConflictError(ScheduleError):
    """A proposed entry overlaps an existing entry for the same staff member and date."""

    def __init__(self, message: str, conflicts: list | None = None):
        super().__init__(message)
        self.conflicts = conflicts or []


class ScheduleNotFoundError(ScheduleError, LookupError):
    """No schedule entry or request with the given id."""


class BatchAbortedError(ScheduleError):
    """
    A persistence call failed partway through a batch.

    Entries created before the failure stay persisted; `result` holds the
    per-item outcomes up to and including the failed item.
    """

    def __init__(self, message: str, result):
        super().__init__(message)
        self.result = result


class PreferenceValidationError(ValueError):
    """Preference update has unknown keys or wrongly typed values."""

    def __init__(self, message: str, details: list[str] | None = None):
        super().__init__(message)
        self.details = details or []
