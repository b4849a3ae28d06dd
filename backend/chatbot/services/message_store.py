"""Append-only persistence for chat messages, keyed by session."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload
from sqlmodel import Session, select

from chatbot.core.errors import PersistenceError
from chatbot.models.chat import ChatMessage, MessageType

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands datetimes back without tzinfo; everything is stored as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class MessageStore:
    def __init__(self, session: Session, clock: Clock = utcnow) -> None:
        self.session = session
        self._clock = clock

    def append(
        self,
        session_id: str,
        text: str,
        kind: MessageType,
        context: dict[str, Any],
        user_id: int | None = None,
    ) -> ChatMessage:
        """Insert one message and commit it.

        created_at never goes backwards within a session: when the clock has not
        advanced past the newest stored message, the new row is placed one
        microsecond after it so ordering by created_at follows insertion order.
        """
        try:
            created_at = self._next_timestamp(session_id)
            msg = ChatMessage(
                user_id=user_id,
                session_id=session_id,
                message=text,
                type=kind,
                context=dict(context),
                created_at=created_at,
                updated_at=created_at,
            )
            self.session.add(msg)
            self.session.commit()
            self.session.refresh(msg)
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Failed to store {kind.value} message for session {session_id}: {e}")
            raise PersistenceError(f"Could not store {kind.value} message") from e

        logger.debug(f"Stored {kind.value} message {msg.id} in session {session_id}")
        return msg

    def by_session(self, session_id: str) -> list[ChatMessage]:
        """All messages of a session, oldest first, with their author loaded."""
        stmt = (
            select(ChatMessage)
            .where(ChatMessage.session_id == session_id)
            .options(selectinload(ChatMessage.user))  # type: ignore[arg-type]
            .order_by(ChatMessage.created_at, ChatMessage.id)  # type: ignore[arg-type]
        )
        return self._fetch(stmt)

    def latest_for_account(self, user_id: int, limit: int) -> list[ChatMessage]:
        stmt = (
            select(ChatMessage)
            .where(ChatMessage.user_id == user_id)
            .options(selectinload(ChatMessage.user))  # type: ignore[arg-type]
            .order_by(ChatMessage.created_at.desc(), ChatMessage.id.desc())  # type: ignore[union-attr]
            .limit(limit)
        )
        return self._fetch(stmt)

    def _fetch(self, stmt) -> list[ChatMessage]:
        try:
            return list(self.session.exec(stmt).all())
        except SQLAlchemyError as e:
            logger.error(f"Failed to read chat messages: {e}")
            raise PersistenceError("Could not read chat messages") from e

    def _next_timestamp(self, session_id: str) -> datetime:
        now = self._clock()
        latest = self.session.exec(
            select(func.max(ChatMessage.created_at)).where(ChatMessage.session_id == session_id)
        ).one()
        if latest is not None:
            latest = _as_utc(latest)
            if now <= latest:
                return latest + timedelta(microseconds=1)
        return now
