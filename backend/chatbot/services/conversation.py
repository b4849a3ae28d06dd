"""Conversation orchestration: store the user's message, generate a reply, store the reply."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from chatbot.core.errors import PersistenceError
from chatbot.models.chat import ChatMessage, MessageType
from chatbot.services.message_store import MessageStore, utcnow
from chatbot.services.responder import ResponseGenerator

logger = logging.getLogger(__name__)


@dataclass
class Exchange:
    user_message: ChatMessage
    bot_message: ChatMessage


def build_context(
    client_host: str | None, user_agent: str | None, now: datetime | None = None
) -> dict[str, Any]:
    """Request details recorded alongside both messages of an exchange."""
    return {
        "ip_address": client_host,
        "user_agent": user_agent,
        "session_start": (now or utcnow()).isoformat(),
    }


class ConversationService:
    def __init__(self, store: MessageStore, responder: ResponseGenerator) -> None:
        self.store = store
        self.responder = responder

    def process(
        self,
        session_id: str,
        text: str,
        context: dict[str, Any],
        user_id: int | None = None,
    ) -> Exchange:
        """Run one exchange. Callers validate text and session_id beforehand.

        The two writes are separate commits. If the reply cannot be stored the
        user's message stays persisted and the PersistenceError propagates.
        """
        snapshot = dict(context)

        user_message = self.store.append(
            session_id, text, MessageType.user, snapshot, user_id=user_id
        )

        category, reply = self.responder.respond(text)
        logger.debug(
            f"Session {session_id}: matched category {category.name if category else 'default'}"
        )

        try:
            bot_message = self.store.append(session_id, reply, MessageType.bot, snapshot)
        except PersistenceError:
            logger.warning(
                f"Session {session_id}: user message {user_message.id} stored without a reply"
            )
            raise

        return Exchange(user_message=user_message, bot_message=bot_message)

    def history(self, session_id: str) -> list[ChatMessage]:
        return self.store.by_session(session_id)
