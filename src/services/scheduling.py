"""
Owner-side staff scheduling: weekly batches, week copies, single entries
and approval of staff schedule requests.

All operations are best-effort and sequential. Each fetch or write is one
awaited call to the store; nothing is wrapped in a transaction, so entries
created before a failure stay persisted.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from core.config import DAY_NAMES
from core.database import utc_now
from core.errors import (
    BatchAbortedError,
    InvalidTemplateError,
    InvalidWeekStartError,
    PastWeekError,
    ScheduleConflictError,
    ScheduleNotFoundError,
)
from core.log import get_logger
from core.validation import (
    find_conflicting_entries,
    has_schedule_conflict,
    validate_time_range,
)
from models.schedules import ScheduleCandidate, ScheduleEntry, StaffId, WeekTemplate
from services.schedule_store import ScheduleStore

logger = get_logger(__name__)

CREATED = "created"
SKIPPED = "skipped"
FAILED = "failed"


@dataclass
class ItemOutcome:
    """What happened to one candidate entry in a batch."""

    candidate: dict
    status: str  # created | skipped | failed
    entry: dict | None = None
    error: str | None = None


@dataclass
class BatchResult:
    """Per-item outcomes of a batch create or week copy."""

    weeks: int = 1
    outcomes: list[ItemOutcome] = field(default_factory=list)

    @property
    def created(self) -> list[dict]:
        return [o.entry for o in self.outcomes if o.status == CREATED]

    @property
    def created_count(self) -> int:
        return sum(1 for o in self.outcomes if o.status == CREATED)

    @property
    def skipped_count(self) -> int:
        return sum(1 for o in self.outcomes if o.status == SKIPPED)

    @property
    def failed_count(self) -> int:
        return sum(1 for o in self.outcomes if o.status == FAILED)

    def summary(self) -> str:
        """Message shown to the owner, e.g. 'Schedule created for 10 day(s) across 2 week(s)'."""
        message = f"Schedule created for {self.created_count} day(s)"
        if self.weeks > 1:
            message += f" across {self.weeks} week(s)"
        return message


# =============================================================================
# DATE UTILITIES
# =============================================================================


def parse_date(value: str | date) -> date:
    if isinstance(value, date):
        return value
    return datetime.strptime(value, "%Y-%m-%d").date()


def format_date(value: date) -> str:
    return value.strftime("%Y-%m-%d")


def start_of_week(day: date) -> date:
    """Sunday on or before the given day."""
    # date.weekday(): Monday=0 .. Sunday=6
    return day - timedelta(days=(day.weekday() + 1) % 7)


def week_dates(week_start: date) -> list[str]:
    """The seven ISO dates beginning at week_start."""
    return [format_date(week_start + timedelta(days=i)) for i in range(7)]


def is_week_in_past(week_start: date, today: date | None = None) -> bool:
    """True if week_start falls before the start of the current calendar week."""
    today = today or date.today()
    return week_start < start_of_week(today)


def day_label(date_str: str) -> str:
    """'2024-06-10' -> 'Monday'."""
    return parse_date(date_str).strftime("%A")


# =============================================================================
# TEMPLATE EXPANSION
# =============================================================================


def check_week_start(week_start: date):
    """Template days are dated by offset from week_start, so it must be a Sunday."""
    if week_start != start_of_week(week_start):
        raise InvalidWeekStartError(
            f"Week start {format_date(week_start)} is a {week_start.strftime('%A')}; "
            "weeks start on Sunday"
        )


def validate_template(template: WeekTemplate):
    """Check day names and the time range of every working day."""
    unknown = set(template) - set(DAY_NAMES)
    if unknown:
        raise InvalidTemplateError(f"Unknown day name(s) in template: {', '.join(sorted(unknown))}")

    for day_name, day in template.items():
        if day.get("is_working"):
            validate_time_range(day["start_time"], day["end_time"])


def expand_template(
    staff_id: StaffId, template: WeekTemplate, week_start: date, notes: str | None = None
) -> list[ScheduleCandidate]:
    """Build one candidate per working day, dated by the day's offset from week_start."""
    candidates = []
    for offset, day_name in enumerate(DAY_NAMES):
        day = template.get(day_name)
        if not day or not day.get("is_working"):
            continue
        candidates.append(
            {
                "staff_id": staff_id,
                "date": format_date(week_start + timedelta(days=offset)),
                "start_time": day["start_time"],
                "end_time": day["end_time"],
                "notes": notes,
            }
        )
    return candidates


async def fetch_week_entries(store: ScheduleStore, week_start: date) -> list[ScheduleEntry]:
    """Fetch existing entries for all seven days of a week, one date at a time."""
    entries = []
    for date_str in week_dates(week_start):
        entries.extend(await store.fetch_entries_for_date(date_str))
    return entries


# =============================================================================
# BATCH OPERATIONS
# =============================================================================


async def _create_non_conflicting(
    store: ScheduleStore, candidates: list[dict], existing: list[dict], result: BatchResult
):
    """
    Create each candidate that doesn't collide with `existing`, skip the rest.

    A store failure marks the item failed and raises BatchAbortedError;
    remaining candidates are not attempted.
    """
    for candidate in candidates:
        if has_schedule_conflict(candidate, existing):
            logger.info(
                "Skipping staff %s on %s %s-%s: conflicts with existing schedule",
                candidate["staff_id"], candidate["date"],
                candidate["start_time"], candidate["end_time"],
            )
            result.outcomes.append(ItemOutcome(candidate=candidate, status=SKIPPED))
            continue

        try:
            entry = await store.create_entry(candidate)
        except Exception as e:
            logger.error(
                "Failed to create entry for staff %s on %s after %d created: %s",
                candidate["staff_id"], candidate["date"], result.created_count, e,
            )
            result.outcomes.append(ItemOutcome(candidate=candidate, status=FAILED, error=str(e)))
            raise BatchAbortedError("Failed to create schedule", result) from e

        existing.append(entry)
        result.outcomes.append(ItemOutcome(candidate=candidate, status=CREATED, entry=entry))


async def find_week_conflicts(
    store: ScheduleStore,
    staff_id: StaffId,
    template: WeekTemplate,
    week_start: str | date,
    today: date | None = None,
) -> list[str]:
    """
    Check a single week's template against existing entries.

    Returns labels like 'Monday (09:00 - 18:00)' for each working day that
    conflicts. Used by the non-repeating submission path, which blocks the
    whole submission when anything conflicts.
    """
    week_start = parse_date(week_start)
    if is_week_in_past(week_start, today):
        raise PastWeekError()
    check_week_start(week_start)
    validate_template(template)

    candidates = expand_template(staff_id, template, week_start)
    existing = await fetch_week_entries(store, week_start)

    return [
        f"{day_label(c['date'])} ({c['start_time']} - {c['end_time']})"
        for c in candidates
        if has_schedule_conflict(c, existing)
    ]


async def create_weekly_schedule(
    store: ScheduleStore,
    staff_id: StaffId,
    template: WeekTemplate,
    week_start: str | date,
    repeat_weeks: int = 1,
    notes: str | None = None,
    today: date | None = None,
) -> BatchResult:
    """
    Expand a weekly template into entries and create the non-conflicting ones.

    For each week, existing entries across its seven dates are fetched before
    any candidate of that week is checked. Conflicting candidates are skipped.
    Rejected with PastWeekError before any store call if week_start is before
    the current calendar week, and with InvalidWeekStartError if it isn't a
    Sunday.
    """
    week_start = parse_date(week_start)
    if is_week_in_past(week_start, today):
        raise PastWeekError()
    check_week_start(week_start)
    if repeat_weeks < 1:
        raise ValueError("repeat_weeks must be at least 1")
    validate_template(template)

    notes = notes.strip() if notes else None
    result = BatchResult(weeks=repeat_weeks)

    for week_offset in range(repeat_weeks):
        current_week_start = week_start + timedelta(weeks=week_offset)
        existing = await fetch_week_entries(store, current_week_start)
        candidates = expand_template(staff_id, template, current_week_start, notes or None)
        await _create_non_conflicting(store, candidates, existing, result)

    logger.info(
        "Weekly schedule for staff %s from %s: %d created, %d skipped over %d week(s)",
        staff_id, format_date(week_start), result.created_count, result.skipped_count, repeat_weeks,
    )
    return result


async def copy_week_to_next(
    store: ScheduleStore,
    staff_id: StaffId,
    week_start: str | date,
    today: date | None = None,
) -> BatchResult:
    """
    Copy a staff member's entries in one week to the following week.

    Entries that would collide with something already in the target week are
    skipped. An empty source week returns an empty result.
    """
    week_start = parse_date(week_start)
    next_week_start = week_start + timedelta(weeks=1)

    source_entries = [
        e for e in await fetch_week_entries(store, week_start) if e["staff_id"] == staff_id
    ]
    result = BatchResult(weeks=1)
    if not source_entries:
        logger.info("No schedules for staff %s in week of %s to copy", staff_id, format_date(week_start))
        return result

    if is_week_in_past(next_week_start, today):
        raise PastWeekError("Cannot copy to past weeks")

    existing = await fetch_week_entries(store, next_week_start)
    candidates = [
        {
            "staff_id": e["staff_id"],
            "date": format_date(parse_date(e["date"]) + timedelta(weeks=1)),
            "start_time": e["start_time"],
            "end_time": e["end_time"],
            "notes": e.get("notes") or None,
        }
        for e in source_entries
    ]
    await _create_non_conflicting(store, candidates, existing, result)

    logger.info("Copied %d schedule(s) for staff %s to next week", result.created_count, staff_id)
    return result


# =============================================================================
# SINGLE ENTRIES
# =============================================================================


async def create_single_entry(store: ScheduleStore, candidate: ScheduleCandidate) -> ScheduleEntry:
    """Create one entry, refusing it if it overlaps the staff member's other entries that day."""
    parse_date(candidate["date"])
    validate_time_range(candidate["start_time"], candidate["end_time"])

    existing = await store.fetch_entries_for_date(candidate["date"])
    conflicts = find_conflicting_entries(candidate, existing)
    if conflicts:
        raise ScheduleConflictError(
            f"Staff {candidate['staff_id']} already has a schedule on {candidate['date']}",
            conflicts,
        )
    return await store.create_entry(candidate)


async def update_entry(store: ScheduleStore, entry_id: str, fields: dict) -> ScheduleEntry:
    """
    Edit an existing entry's date, times, notes or status.

    The merged times are validated and conflict-checked against the staff
    member's other entries on the (possibly new) date.
    """
    current = await store.get_entry(entry_id)
    if current is None:
        raise ScheduleNotFoundError(f"Schedule {entry_id} not found")

    merged = {**current, **fields}
    parse_date(merged["date"])
    validate_time_range(merged["start_time"], merged["end_time"])

    if {"date", "start_time", "end_time"} & set(fields):
        others = [e for e in await store.fetch_entries_for_date(merged["date"]) if e["id"] != entry_id]
        conflicts = find_conflicting_entries(merged, others)
        if conflicts:
            raise ScheduleConflictError(
                f"Staff {merged['staff_id']} already has a schedule on {merged['date']}",
                conflicts,
            )

    updated = await store.update_entry(entry_id, fields)
    if updated is None:
        raise ScheduleNotFoundError(f"Schedule {entry_id} not found")
    return updated


async def delete_entry(store: ScheduleStore, entry_id: str):
    if not await store.delete_entry(entry_id):
        raise ScheduleNotFoundError(f"Schedule {entry_id} not found")
    logger.info("Deleted schedule %s", entry_id)


# =============================================================================
# STAFF SCHEDULE REQUESTS
# =============================================================================


async def approve_schedule_request(
    store: ScheduleStore, request_id: str, modifications: dict | None = None
) -> dict:
    """
    Approve a pending staff request, optionally with modified date/times/notes.

    Creates the entry first, then marks the request 'approved' (or
    'modified' when modifications were given).
    """
    request = await store.get_request(request_id)
    if request is None:
        raise ScheduleNotFoundError("Schedule request not found")

    modifications = {k: v for k, v in (modifications or {}).items() if v is not None}
    candidate = {
        "staff_id": request["staff_id"],
        "date": modifications.get("date") or request["date"],
        "start_time": modifications.get("start_time") or request["start_time"],
        "end_time": modifications.get("end_time") or request["end_time"],
        "notes": modifications.get("notes") or request.get("notes"),
    }
    entry = await create_single_entry(store, candidate)

    await store.update_request(
        request_id,
        {
            "status": "modified" if modifications else "approved",
            "approved_at": utc_now(),
        },
    )
    return entry


async def reject_schedule_request(store: ScheduleStore, request_id: str, reason: str | None = None) -> dict:
    fields = {"status": "rejected"}
    if reason:
        fields["notes"] = reason
    updated = await store.update_request(request_id, fields)
    if updated is None:
        raise ScheduleNotFoundError("Schedule request not found")
    return updated
