"""Customer, employee and booking preference endpoints."""

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, status

from api.dependencies import get_preference_store, verify_api_key
from api.models.responses import ErrorCodes
from services.preferences import PREFERENCE_SCHEMAS, PreferenceStore

router = APIRouter(prefix="/v1/preferences", dependencies=[Depends(verify_api_key)])


def check_namespace(namespace: str) -> str:
    if namespace not in PREFERENCE_SCHEMAS:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={
                "error": f"Unknown preference namespace '{namespace}'",
                "code": ErrorCodes.NOT_FOUND,
                "details": [f"Expected one of: {', '.join(sorted(PREFERENCE_SCHEMAS))}"],
            },
        )
    return namespace


@router.get("/{namespace}")
async def get_preferences(
    namespace: str,
    store: PreferenceStore = Depends(get_preference_store),
) -> dict[str, Any]:
    return store.get(check_namespace(namespace)).model_dump()


@router.patch("/{namespace}")
async def update_preferences(
    namespace: str,
    changes: dict[str, Any] = Body(...),
    store: PreferenceStore = Depends(get_preference_store),
) -> dict[str, Any]:
    """Partial update; unspecified preferences keep their current values."""
    return store.update(check_namespace(namespace), changes).model_dump()
