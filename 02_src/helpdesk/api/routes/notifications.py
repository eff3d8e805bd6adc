"""Notification API routes."""

from datetime import datetime

from pydantic import BaseModel
from fastapi import APIRouter, Query

from ...app import Application


class NotificationResponse(BaseModel):
    """Response model for a toast."""

    level: str
    text: str
    created_at: datetime


def create_notifications_router(app: Application) -> APIRouter:
    """Create notifications router."""
    router = APIRouter(prefix="/api/notifications", tags=["notifications"])

    @router.get("", response_model=list[NotificationResponse])
    async def get_notifications(
        drain: bool = Query(False, description="Clear after reading"),
    ) -> list[dict]:
        """Pending toasts, oldest first."""
        items = app.notifier.drain() if drain else app.notifier.recent()
        return [
            {
                "level": n.level.value,
                "text": n.text,
                "created_at": n.created_at,
            }
            for n in items
        ]

    return router
