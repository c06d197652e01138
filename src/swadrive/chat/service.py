"""Chat channel business logic.

Rules:
- A chat belongs to one task and its two parties: the task's customer and
  the helper assigned to it
- No chat can exist before the task has an assignment
- start_chat is idempotent per (task, customer, helper)
- Only the two participants may read or post; posting notifies the other one
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from swadrive.auth.access import Identity
from swadrive.db.enums import Role
from swadrive.db.models import Chat, ChatMessage, Task, TaskAssignment
from swadrive.notifications.service import CHAT_MESSAGE, notify

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 100


class ChatNotFoundError(LookupError):
    """No chat with this id exists."""


class ChatForbiddenError(PermissionError):
    """The caller is not a participant (or the task has no helper yet)."""


class EmptyMessageError(ValueError):
    """Message text is blank after trimming."""


def message_preview(text: str, limit: int = PREVIEW_LENGTH) -> str:
    """Shorten text to at most `limit` characters for a notification."""
    if len(text) <= limit:
        return text
    return text[: limit - 3].rstrip() + "..."


def _is_participant(identity: Identity, customer_id: int, helper_id: int) -> bool:
    if identity.role is Role.CUSTOMER:
        return identity.user_id == customer_id
    if identity.role is Role.HELPER:
        return identity.user_id == helper_id
    return False


async def _find_chat(db: AsyncSession, task_id: int, customer_id: int, helper_id: int) -> Chat | None:
    result = await db.execute(
        select(Chat).where(
            Chat.task_id == task_id,
            Chat.customer_id == customer_id,
            Chat.helper_id == helper_id,
        )
    )
    return result.scalar_one_or_none()


async def start_chat(db: AsyncSession, identity: Identity, task_id: int) -> Chat:
    """Return the chat for this task's customer and helper, creating it if needed."""
    result = await db.execute(
        select(Task.owner_id, TaskAssignment.helper_id)
        .join(TaskAssignment, TaskAssignment.task_id == Task.id)
        .where(Task.id == task_id)
    )
    row = result.first()
    if row is None:
        raise ChatForbiddenError("Task has no assigned helper yet")
    customer_id, helper_id = row
    if not _is_participant(identity, customer_id, helper_id):
        raise ChatForbiddenError("You are not part of this task")

    chat = await _find_chat(db, task_id, customer_id, helper_id)
    if chat is not None:
        return chat

    chat = Chat(
        task_id=task_id,
        customer_id=customer_id,
        helper_id=helper_id,
        created_at=datetime.now(timezone.utc),
    )
    try:
        async with db.begin_nested():
            db.add(chat)
    except IntegrityError:
        # Lost a race with the other participant; theirs is the chat.
        existing = await _find_chat(db, task_id, customer_id, helper_id)
        if existing is None:
            raise
        return existing

    logger.info("Chat started: chat=%d task=%d by user=%d", chat.id, task_id, identity.user_id)
    return chat


async def list_chats(db: AsyncSession, user_id: int) -> list[tuple[Chat, str]]:
    """Chats the user takes part in, newest first, with their task titles."""
    result = await db.execute(
        select(Chat, Task.title)
        .join(Task, Task.id == Chat.task_id)
        .where(or_(Chat.customer_id == user_id, Chat.helper_id == user_id))
        .order_by(Chat.created_at.desc(), Chat.id.desc())
    )
    return [(chat, title) for chat, title in result.all()]


async def get_participant_chat(db: AsyncSession, identity: Identity, chat_id: int) -> Chat:
    """Load a chat the caller takes part in."""
    result = await db.execute(select(Chat).where(Chat.id == chat_id))
    chat = result.scalar_one_or_none()
    if chat is None:
        raise ChatNotFoundError(f"Chat {chat_id} not found")
    if not _is_participant(identity, chat.customer_id, chat.helper_id):
        raise ChatForbiddenError("You are not part of this chat")
    return chat


async def get_messages(db: AsyncSession, identity: Identity, chat_id: int) -> list[ChatMessage]:
    """Messages of a chat in the order they were sent."""
    await get_participant_chat(db, identity, chat_id)
    result = await db.execute(
        select(ChatMessage)
        .where(ChatMessage.chat_id == chat_id)
        .order_by(ChatMessage.created_at.asc(), ChatMessage.id.asc())
    )
    return list(result.scalars().all())


async def send_message(
    db: AsyncSession,
    identity: Identity,
    chat_id: int,
    text: str,
) -> ChatMessage:
    """Append a message and notify the other participant."""
    text = (text or "").strip()
    if not text:
        raise EmptyMessageError("Message cannot be empty")

    chat = await get_participant_chat(db, identity, chat_id)
    message = ChatMessage(
        chat_id=chat.id,
        sender_id=identity.user_id,
        sender_role=identity.role,
        message=text,
        created_at=datetime.now(timezone.utc),
    )
    db.add(message)
    await db.flush()

    recipient_id = chat.helper_id if identity.user_id == chat.customer_id else chat.customer_id
    await notify(
        db,
        recipient_id,
        chat.task_id,
        CHAT_MESSAGE,
        title="New message",
        message=message_preview(text),
    )
    logger.info("Chat message sent: chat=%d sender=%d", chat.id, identity.user_id)
    return message
