"""Chat API endpoints. Open to both roles, gated on chat participation."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Path
from sqlalchemy.ext.asyncio import AsyncSession

from swadrive.auth.access import Identity
from swadrive.auth.dependencies import require_identity
from swadrive.chat.schemas import (
    ChatMessageResponse,
    ChatResponse,
    SendMessageRequest,
    StartChatRequest,
)
from swadrive.chat.service import (
    ChatForbiddenError,
    ChatNotFoundError,
    EmptyMessageError,
    get_messages,
    list_chats,
    send_message,
    start_chat,
)
from swadrive.database import get_session
from swadrive.db.models import MAX_ID, Chat, ChatMessage

router = APIRouter(prefix="/api", tags=["Chat"])


def _chat_response(chat: Chat, task_title: str | None = None) -> ChatResponse:
    return ChatResponse(
        chat_id=chat.id,
        task_id=chat.task_id,
        customer_id=chat.customer_id,
        helper_id=chat.helper_id,
        task_title=task_title,
        created_at=chat.created_at,
    )


def _message_response(message: ChatMessage) -> ChatMessageResponse:
    return ChatMessageResponse(
        message_id=message.id,
        chat_id=message.chat_id,
        sender_id=message.sender_id,
        sender_role=message.sender_role,
        message=message.message,
        created_at=message.created_at,
    )


@router.post("/chats/start", response_model=ChatResponse)
async def start_chat_endpoint(
    body: StartChatRequest,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_session),
):
    """Open (or reopen) the chat between a task's customer and its helper."""
    try:
        chat = await start_chat(db, identity, body.task_id)
    except ChatForbiddenError as e:
        raise HTTPException(status_code=403, detail=str(e)) from e
    await db.commit()
    return _chat_response(chat)


@router.get("/chats", response_model=list[ChatResponse])
async def list_chats_endpoint(
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_session),
):
    """Chats the caller takes part in, newest first."""
    return [_chat_response(chat, title) for chat, title in await list_chats(db, identity.user_id)]


@router.get("/chats/{chat_id}/messages", response_model=list[ChatMessageResponse])
async def get_messages_endpoint(
    chat_id: int = Path(ge=1, le=MAX_ID),
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_session),
):
    """Messages in a chat, oldest first."""
    try:
        messages = await get_messages(db, identity, chat_id)
    except ChatNotFoundError as e:
        raise HTTPException(status_code=404, detail="Chat not found") from e
    except ChatForbiddenError as e:
        raise HTTPException(status_code=403, detail=str(e)) from e
    return [_message_response(m) for m in messages]


@router.post("/chats/{chat_id}/messages", response_model=ChatMessageResponse)
async def send_message_endpoint(
    body: SendMessageRequest,
    chat_id: int = Path(ge=1, le=MAX_ID),
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_session),
):
    """Post a message to a chat."""
    try:
        message = await send_message(db, identity, chat_id, body.message)
    except EmptyMessageError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except ChatNotFoundError as e:
        raise HTTPException(status_code=404, detail="Chat not found") from e
    except ChatForbiddenError as e:
        raise HTTPException(status_code=403, detail=str(e)) from e
    await db.commit()
    return _message_response(message)
