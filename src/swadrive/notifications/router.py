"""Notification API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from swadrive.auth.access import Identity
from swadrive.auth.dependencies import require_identity
from swadrive.database import get_session
from swadrive.db.models import MAX_ID
from swadrive.notifications.schemas import NotificationResponse
from swadrive.notifications.service import list_notifications, mark_read

router = APIRouter(prefix="/api", tags=["Notifications"])


@router.get("/notifications", response_model=list[NotificationResponse])
async def list_notifications_endpoint(
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_session),
):
    """List the caller's notifications, most recent first."""
    notifications = await list_notifications(db, identity.user_id)
    return [
        NotificationResponse(
            notification_id=n.id,
            user_id=n.user_id,
            task_id=n.task_id,
            type=n.type,
            title=n.title,
            message=n.message,
            is_read=n.is_read,
            created_at=n.created_at,
        )
        for n in notifications
    ]


@router.put("/notifications/{notification_id}/read")
async def mark_notification_read(
    notification_id: int = Path(ge=1, le=MAX_ID),
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_session),
) -> dict[str, str]:
    """Mark a notification as read."""
    await mark_read(db, notification_id)
    await db.commit()
    return {"message": "Notification marked as read"}
