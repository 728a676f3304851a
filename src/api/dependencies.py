"""FastAPI dependencies for authentication and shared resources."""

import secrets

from fastapi import Header, HTTPException, status

from core.config import SCHEDULE_API_KEY
from services.preferences import PreferenceStore, create_backend
from services.schedule_store import SqliteScheduleStore

_schedule_store: SqliteScheduleStore | None = None
_preference_store: PreferenceStore | None = None


async def verify_api_key(x_api_key: str = Header(..., alias="X-API-Key")) -> str:
    """
    Verify API key from X-API-Key header.

    Raises:
        HTTPException: 401 if key is missing or invalid
    """
    if not SCHEDULE_API_KEY:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "API key not configured on server",
                "code": "INTERNAL_ERROR",
                "details": [],
            },
        )

    # Use constant-time comparison to prevent timing attacks
    if not secrets.compare_digest(x_api_key, SCHEDULE_API_KEY):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error": "Invalid or missing API key",
                "code": "UNAUTHORIZED",
                "details": [],
            },
        )

    return x_api_key


def get_schedule_store() -> SqliteScheduleStore:
    """Get or create the schedule store (lazy initialization)."""
    global _schedule_store
    if _schedule_store is None:
        _schedule_store = SqliteScheduleStore()
    return _schedule_store


def get_preference_store() -> PreferenceStore:
    """Get or create the preference store with the configured backend."""
    global _preference_store
    if _preference_store is None:
        _preference_store = PreferenceStore(create_backend())
    return _preference_store
