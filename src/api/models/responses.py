"""Pydantic response models for API endpoints."""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Health check response."""

    status: str  # "healthy" or "unhealthy"
    version: str
    database_available: bool
    timestamp: str  # ISO 8601 UTC
    error: str | None = None


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str
    code: str
    details: list[str] = []


class ScheduleEntryResponse(BaseModel):
    """Stored staff schedule entry."""

    id: str
    staff_id: int | str
    date: str
    start_time: str
    end_time: str
    status: str
    notes: str | None = None
    created_at: str
    updated_at: str


class ScheduleRequestResponse(BaseModel):
    """Staff-submitted schedule request."""

    id: str
    staff_id: int | str
    staff_name: str | None = None
    date: str
    start_time: str
    end_time: str
    notes: str | None = None
    status: str
    requested_at: str
    approved_at: str | None = None


class ItemOutcomeResponse(BaseModel):
    """Outcome of one candidate in a batch."""

    date: str
    start_time: str
    end_time: str
    status: str  # created | skipped | failed
    entry_id: str | None = None
    error: str | None = None


class BatchResponse(BaseModel):
    """Result of a weekly create or week copy."""

    message: str
    weeks: int
    created_count: int
    skipped_count: int
    failed_count: int
    outcomes: list[ItemOutcomeResponse]


class ErrorCodes:
    """Error code constants."""

    INVALID_REQUEST = "INVALID_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    PAST_WEEK = "PAST_WEEK"
    SCHEDULE_CONFLICT = "SCHEDULE_CONFLICT"
    NOT_FOUND = "NOT_FOUND"
    PERSISTENCE_ERROR = "PERSISTENCE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
