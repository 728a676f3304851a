"""
Schedule time validation and conflict detection.
"""

import re

from core.errors import InvalidTimeRangeError

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def time_to_minutes(hhmm: str) -> int:
    """Convert 'HH:MM' to minutes since midnight. No format checking."""
    hours, minutes = hhmm.split(":")
    return int(hours) * 60 + int(minutes)


def intervals_overlap(start1: int, end1: int, start2: int, end2: int) -> bool:
    """Half-open overlap: [start1, end1) and [start2, end2) share at least one minute."""
    return start1 < end2 and end1 > start2


def entries_overlap(candidate: dict, existing: dict) -> bool:
    """True if both entries belong to the same staff member and date and their times overlap."""
    if existing["staff_id"] != candidate["staff_id"] or existing["date"] != candidate["date"]:
        return False

    return intervals_overlap(
        time_to_minutes(candidate["start_time"]),
        time_to_minutes(candidate["end_time"]),
        time_to_minutes(existing["start_time"]),
        time_to_minutes(existing["end_time"]),
    )


def has_schedule_conflict(candidate: dict, existing_entries: list[dict]) -> bool:
    """
    Check whether a proposed entry collides with any existing entry.

    Only entries for the same staff_id on the same date are considered;
    other staff and other dates are ignored regardless of time. Back-to-back
    shifts (one ends exactly when the other starts) do not conflict.
    """
    return any(entries_overlap(candidate, existing) for existing in existing_entries)


def find_conflicting_entries(candidate: dict, existing_entries: list[dict]) -> list[dict]:
    """Return the existing entries that collide with the candidate."""
    return [e for e in existing_entries if entries_overlap(candidate, e)]


def validate_time(value: str, field_name: str = "time") -> str:
    """Raise InvalidTimeRangeError unless value is a 24-hour 'HH:MM' string."""
    if not isinstance(value, str) or not TIME_PATTERN.match(value):
        raise InvalidTimeRangeError(f"Invalid {field_name} '{value}', expected HH:MM (00:00-23:59)")
    return value


def validate_time_range(start_time: str, end_time: str):
    """
    Validate a shift's start and end times.

    Checks:
    1. Both times are well-formed 'HH:MM'
    2. Start is strictly before end (no zero-length or overnight shifts)
    """
    validate_time(start_time, "start time")
    validate_time(end_time, "end time")

    if time_to_minutes(start_time) >= time_to_minutes(end_time):
        raise InvalidTimeRangeError(
            f"Start time {start_time} must be before end time {end_time}"
        )
