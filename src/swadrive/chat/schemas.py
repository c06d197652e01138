"""Pydantic schemas for chat endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from swadrive.db.enums import Role
from swadrive.db.models import MAX_ID


class StartChatRequest(BaseModel):
    task_id: int = Field(..., ge=1, le=MAX_ID)


class SendMessageRequest(BaseModel):
    message: str


class ChatResponse(BaseModel):
    chat_id: int
    task_id: int
    customer_id: int
    helper_id: int
    task_title: str | None = None
    created_at: datetime | None = None


class ChatMessageResponse(BaseModel):
    message_id: int
    chat_id: int
    sender_id: int
    sender_role: Role
    message: str
    created_at: datetime | None = None
