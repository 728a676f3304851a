"""API route modules."""

from .health import router as health_router
from .preferences import router as preferences_router
from .schedule_requests import router as schedule_requests_router
from .schedules import router as schedules_router

__all__ = [
    "health_router",
    "schedules_router",
    "schedule_requests_router",
    "preferences_router",
]
