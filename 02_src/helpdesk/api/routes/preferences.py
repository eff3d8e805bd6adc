"""Key-value preference API routes (agents, documents pages)."""

from typing import Any

from pydantic import BaseModel
from fastapi import APIRouter, HTTPException

from ...app import Application


class PreferenceRequest(BaseModel):
    """Request model for storing a value."""

    value: Any


class PreferenceResponse(BaseModel):
    """Response model for a stored value."""

    key: str
    value: Any


def create_preferences_router(app: Application) -> APIRouter:
    """Create preferences router."""
    router = APIRouter(prefix="/api/preferences", tags=["preferences"])

    @router.get("", response_model=list[str])
    async def list_keys() -> list[str]:
        return await app.storage.keys()

    @router.get("/{key}", response_model=PreferenceResponse)
    async def get_preference(key: str) -> dict:
        missing = object()
        value = await app.storage.get(key, missing)
        if value is missing:
            raise HTTPException(status_code=404, detail=f"No value for {key}")
        return {"key": key, "value": value}

    @router.put("/{key}", response_model=PreferenceResponse)
    async def put_preference(key: str, request: PreferenceRequest) -> dict:
        await app.storage.set(key, request.value)
        return {"key": key, "value": request.value}

    @router.delete("/{key}", response_model=PreferenceResponse)
    async def delete_preference(key: str) -> dict:
        value = await app.storage.get(key)
        if not await app.storage.delete(key):
            raise HTTPException(status_code=404, detail=f"No value for {key}")
        return {"key": key, "value": value}

    return router
