"""Staff schedule request endpoints (submit, list, approve, reject)."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from api.dependencies import get_schedule_store, verify_api_key
from api.models.requests import ApproveRequestBody, RejectRequestBody, ScheduleRequestSubmit
from api.models.responses import ErrorCodes, ScheduleEntryResponse, ScheduleRequestResponse
from api.routes.schedules import parse_date_param
from core.config import REQUEST_STATUSES
from core.validation import validate_time_range
from services import scheduling
from services.schedule_store import ScheduleStore

router = APIRouter(prefix="/v1/schedule-requests", dependencies=[Depends(verify_api_key)])


@router.get("", response_model=list[ScheduleRequestResponse])
async def list_schedule_requests(
    status_filter: str | None = Query(None, alias="status"),
    store: ScheduleStore = Depends(get_schedule_store),
):
    if status_filter is not None and status_filter not in REQUEST_STATUSES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": f"Invalid status '{status_filter}'",
                "code": ErrorCodes.INVALID_REQUEST,
                "details": [f"Expected one of: {', '.join(sorted(REQUEST_STATUSES))}"],
            },
        )
    return await store.list_requests(status_filter)


@router.post("", response_model=ScheduleRequestResponse, status_code=status.HTTP_201_CREATED)
async def submit_schedule_request(
    body: ScheduleRequestSubmit,
    store: ScheduleStore = Depends(get_schedule_store),
):
    """Staff member proposes a schedule for owner approval."""
    parse_date_param(body.date)
    validate_time_range(body.start_time, body.end_time)
    return await store.create_request(body.model_dump())


@router.post("/{request_id}/approve", response_model=ScheduleEntryResponse)
async def approve_schedule_request(
    request_id: str,
    body: ApproveRequestBody | None = None,
    store: ScheduleStore = Depends(get_schedule_store),
):
    """Approve a request as submitted, or with the modifications in the body."""
    modifications = body.model_dump(exclude_none=True) if body else None
    if modifications and modifications.get("date"):
        parse_date_param(modifications["date"])
    return await scheduling.approve_schedule_request(store, request_id, modifications or None)


@router.post("/{request_id}/reject", response_model=ScheduleRequestResponse)
async def reject_schedule_request(
    request_id: str,
    body: RejectRequestBody | None = None,
    store: ScheduleStore = Depends(get_schedule_store),
):
    reason = body.reason if body else None
    return await scheduling.reject_schedule_request(store, request_id, reason)
