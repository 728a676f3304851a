"""
Data models for schedule entries, staff requests and weekly templates.

Records travel through the services as plain dicts; these TypedDicts
describe their shape.
"""

from typing import TypedDict

StaffId = int | str


class ScheduleCandidate(TypedDict, total=False):
    """Proposed entry before it is persisted."""
    staff_id: StaffId
    date: str  # YYYY-MM-DD
    start_time: str  # HH:MM
    end_time: str  # HH:MM
    notes: str | None


class ScheduleEntry(TypedDict):
    """Persisted staff schedule entry, half-open [start_time, end_time)."""
    id: str
    staff_id: StaffId
    date: str
    start_time: str
    end_time: str
    status: str  # scheduled | active | completed | absent | cancelled
    notes: str | None
    created_at: str
    updated_at: str


class ScheduleRequest(TypedDict):
    """Schedule submitted by a staff member for owner approval."""
    id: str
    staff_id: StaffId
    staff_name: str | None
    date: str
    start_time: str
    end_time: str
    notes: str | None
    status: str  # pending | approved | rejected | modified
    requested_at: str
    approved_at: str | None


class DayTemplate(TypedDict):
    """One day of a weekly template."""
    is_working: bool
    start_time: str
    end_time: str


# Keyed by lowercase day name, 'sunday' .. 'saturday'
WeekTemplate = dict[str, DayTemplate]
