"""Pydantic schemas for notification endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class NotificationResponse(BaseModel):
    notification_id: int
    user_id: int
    task_id: int | None = None
    type: str
    title: str
    message: str | None = None
    is_read: bool
    created_at: datetime | None = None
