"""Notification sink.

Notifications are append-only messages to a user, written as a side effect of
task lifecycle transitions and chat messages. Writing one is best-effort: it
runs inside a SAVEPOINT and a failure is logged, never raised, so the
triggering operation still commits.

Types: accepted, completed, message
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from swadrive.db.models import Notification

logger = logging.getLogger(__name__)

TASK_ACCEPTED = "accepted"
TASK_COMPLETED = "completed"
CHAT_MESSAGE = "message"


async def notify(
    db: AsyncSession,
    user_id: int,
    task_id: int | None,
    type_: str,
    title: str,
    message: str | None = None,
) -> Notification | None:
    """Append a notification for a user. Returns None if the write failed."""
    notification = Notification(
        user_id=user_id,
        task_id=task_id,
        type=type_,
        title=title,
        message=message,
        is_read=False,
        created_at=datetime.now(timezone.utc),
    )
    try:
        async with db.begin_nested():
            db.add(notification)
    except SQLAlchemyError:
        logger.warning(
            "Failed to write %s notification for user %d (task=%s)",
            type_, user_id, task_id,
            exc_info=True,
        )
        return None
    return notification


async def list_notifications(db: AsyncSession, user_id: int) -> list[Notification]:
    """Get a user's notifications, most recent first."""
    result = await db.execute(
        select(Notification)
        .where(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
    )
    return list(result.scalars().all())


async def mark_read(db: AsyncSession, notification_id: int) -> None:
    """Flag a notification as read.

    Unconditional: neither existence nor ownership of the id is checked.
    """
    await db.execute(
        update(Notification)
        .where(Notification.id == notification_id)
        .values(is_read=True)
    )
    await db.flush()
