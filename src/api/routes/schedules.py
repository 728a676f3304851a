"""Staff schedule endpoints."""

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from api.dependencies import get_schedule_store, verify_api_key
from api.models.requests import (
    CopyWeekRequest,
    ScheduleCreateRequest,
    ScheduleUpdateRequest,
    WeeklyScheduleRequest,
)
from api.models.responses import (
    BatchResponse,
    ErrorCodes,
    ItemOutcomeResponse,
    ScheduleEntryResponse,
)
from core.config import ENTRY_STATUSES
from services import scheduling
from services.schedule_store import ScheduleStore

router = APIRouter(prefix="/v1/schedules", dependencies=[Depends(verify_api_key)])


def parse_date_param(date_str: str, field_name: str = "date") -> str:
    """Reject anything that isn't a YYYY-MM-DD date."""
    try:
        datetime.strptime(date_str, "%Y-%m-%d")
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": f"Invalid {field_name} format",
                "code": ErrorCodes.INVALID_REQUEST,
                "details": ["Expected format: YYYY-MM-DD"],
            },
        )
    return date_str


def batch_response(request: Request, result: scheduling.BatchResult, message: str) -> BatchResponse:
    """Build the batch response and record counts for the request log."""
    request.state.entries_created = result.created_count
    request.state.entries_skipped = result.skipped_count
    return BatchResponse(
        message=message,
        weeks=result.weeks,
        created_count=result.created_count,
        skipped_count=result.skipped_count,
        failed_count=result.failed_count,
        outcomes=[
            ItemOutcomeResponse(
                date=o.candidate["date"],
                start_time=o.candidate["start_time"],
                end_time=o.candidate["end_time"],
                status=o.status,
                entry_id=o.entry["id"] if o.entry else None,
                error=o.error,
            )
            for o in result.outcomes
        ],
    )


@router.get("", response_model=list[ScheduleEntryResponse])
async def list_schedules(
    date: str = Query(..., description="Date to list (YYYY-MM-DD)"),
    staff_id: str | None = Query(None),
    store: ScheduleStore = Depends(get_schedule_store),
):
    """Schedules on one date, optionally for one staff member."""
    entries = await store.fetch_entries_for_date(parse_date_param(date))
    if staff_id is not None:
        entries = [e for e in entries if str(e["staff_id"]) == staff_id]
    return entries


@router.post("", response_model=ScheduleEntryResponse, status_code=status.HTTP_201_CREATED)
async def create_schedule(
    body: ScheduleCreateRequest,
    store: ScheduleStore = Depends(get_schedule_store),
):
    """Create one entry. Returns 409 if it overlaps the staff member's schedule that day."""
    parse_date_param(body.date)
    return await scheduling.create_single_entry(store, body.model_dump())


@router.patch("/{entry_id}", response_model=ScheduleEntryResponse)
async def update_schedule(
    entry_id: str,
    body: ScheduleUpdateRequest,
    store: ScheduleStore = Depends(get_schedule_store),
):
    fields = body.model_dump(exclude_unset=True)
    if fields.get("date") is not None:
        parse_date_param(fields["date"])
    if "status" in fields and fields["status"] not in ENTRY_STATUSES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": f"Invalid status '{fields['status']}'",
                "code": ErrorCodes.INVALID_REQUEST,
                "details": [f"Expected one of: {', '.join(sorted(ENTRY_STATUSES))}"],
            },
        )
    # Only notes may be cleared; the other columns are required
    fields = {k: v for k, v in fields.items() if v is not None or k == "notes"}
    return await scheduling.update_entry(store, entry_id, fields)


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_schedule(
    entry_id: str,
    store: ScheduleStore = Depends(get_schedule_store),
):
    await scheduling.delete_entry(store, entry_id)


@router.post("/weekly", response_model=BatchResponse, status_code=status.HTTP_201_CREATED)
async def create_weekly_schedule(
    request: Request,
    body: WeeklyScheduleRequest,
    store: ScheduleStore = Depends(get_schedule_store),
):
    """
    Create a week of working hours for one staff member.

    Without repetition, any conflict blocks the whole submission (409 with
    the conflicting days). With repetition, conflicting days are skipped and
    the rest are created.
    """
    week_start = parse_date_param(body.week_start, "week_start")
    template = {day: t.model_dump() for day, t in body.template.items()}

    if body.repeat_weeks == 1:
        conflicts = await scheduling.find_week_conflicts(
            store, body.staff_id, template, week_start
        )
        if conflicts:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail={
                    "error": "This employee already has a schedule for the selected days",
                    "code": ErrorCodes.SCHEDULE_CONFLICT,
                    "details": conflicts,
                },
            )

    result = await scheduling.create_weekly_schedule(
        store,
        body.staff_id,
        template,
        week_start,
        repeat_weeks=body.repeat_weeks,
        notes=body.notes,
    )
    return batch_response(request, result, result.summary())


@router.post("/copy-week", response_model=BatchResponse)
async def copy_week(
    request: Request,
    body: CopyWeekRequest,
    store: ScheduleStore = Depends(get_schedule_store),
):
    """Copy a staff member's week to the following week, skipping conflicts."""
    week_start = parse_date_param(body.week_start, "week_start")
    result = await scheduling.copy_week_to_next(store, body.staff_id, week_start)
    if not result.outcomes:
        message = "No schedules found for this week to copy"
    else:
        message = f"Copied {result.created_count} schedule(s) to next week"
    return batch_response(request, result, message)
