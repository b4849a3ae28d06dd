"""REST API for chat sessions: send a message, read a session's history."""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field

from chatbot.api.deps import get_conversation_service, get_current_account
from chatbot.core.config import settings
from chatbot.core.errors import PersistenceError
from chatbot.models.account import Account
from chatbot.models.chat import ChatMessage
from chatbot.services.conversation import ConversationService, build_context

router = APIRouter()
logger = logging.getLogger(__name__)


class ChatSubmit(BaseModel):
    # Blank input trims down to "" and fails min_length
    model_config = {"str_strip_whitespace": True}

    message: str = Field(..., min_length=1, max_length=settings.max_message_length)
    session_id: str = Field(..., min_length=1)


def message_to_dict(m: ChatMessage) -> dict[str, Any]:
    return {
        "id": m.id,
        "session_id": m.session_id,
        "message": m.message,
        "type": m.type.value,
        "metadata": m.context,
        "user_id": m.user_id,
        "user": {"id": m.user.id, "name": m.user.name} if m.user else None,
        "created_at": m.created_at.isoformat(),
        "updated_at": m.updated_at.isoformat(),
    }


def _history(service: ConversationService, session_id: str) -> list[dict[str, Any]]:
    try:
        return [message_to_dict(m) for m in service.history(session_id)]
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.get("")
async def chat_index(
    session_id: str | None = None,
    service: ConversationService = Depends(get_conversation_service),
):
    history = _history(service, session_id) if session_id else []
    return {"session_id": session_id, "chat_history": history}


@router.post("")
async def send_message(
    payload: ChatSubmit,
    request: Request,
    account: Account | None = Depends(get_current_account),
    service: ConversationService = Depends(get_conversation_service),
):
    context = build_context(
        request.client.host if request.client else None,
        request.headers.get("user-agent"),
    )
    try:
        exchange = service.process(
            payload.session_id,
            payload.message,
            context,
            user_id=account.id if account else None,
        )
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))

    return {
        "session_id": payload.session_id,
        "user_message": message_to_dict(exchange.user_message),
        "bot_message": message_to_dict(exchange.bot_message),
        "chat_history": _history(service, payload.session_id),
    }


@router.get("/{session_id}")
async def show_session(
    session_id: str,
    service: ConversationService = Depends(get_conversation_service),
):
    return {"session_id": session_id, "chat_history": _history(service, session_id)}
