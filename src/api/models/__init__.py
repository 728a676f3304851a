"""API Pydantic models."""

from .responses import (
    BatchResponse,
    ErrorCodes,
    ErrorResponse,
    HealthResponse,
    ItemOutcomeResponse,
    ScheduleEntryResponse,
    ScheduleRequestResponse,
)

__all__ = [
    "HealthResponse",
    "ErrorResponse",
    "ErrorCodes",
    "ScheduleEntryResponse",
    "ScheduleRequestResponse",
    "ItemOutcomeResponse",
    "BatchResponse",
]
