"""Dashboard statistics computed from stored chat messages."""

import logging
from datetime import datetime, time, timedelta
from typing import Any, Iterable

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from chatbot.core.config import settings
from chatbot.core.errors import PersistenceError
from chatbot.models.chat import ChatMessage, MessageType
from chatbot.services.message_store import Clock, MessageStore, utcnow

logger = logging.getLogger(__name__)

# Separate from the responder's categories on purpose: fewer topics, fewer
# keywords, and a message may count towards several topics.
TOPIC_KEYWORDS: dict[str, tuple[str, ...]] = {
    "humor": ("joke", "funny"),
    "cooking": ("cook", "recipe"),
    "assistance": ("help", "assist"),
    "weather": ("weather", "temperature"),
    "technology": ("technology", "computer"),
}


def count_topics(
    texts: Iterable[str],
    limit: int = 5,
    topics: dict[str, tuple[str, ...]] = TOPIC_KEYWORDS,
) -> dict[str, int]:
    """Count messages per topic and keep the `limit` most frequent, highest first.

    Topics with no matching message are left out.
    """
    counts: dict[str, int] = {}
    for text in texts:
        normalized = text.lower()
        for topic, keywords in topics.items():
            if any(keyword in normalized for keyword in keywords):
                counts[topic] = counts.get(topic, 0) + 1

    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return dict(ranked[:limit])


class StatisticsAggregator:
    def __init__(self, session: Session, clock: Clock = utcnow) -> None:
        self.session = session
        self._clock = clock

    # -------- Per account --------

    def topic_counts(self, user_id: int, limit: int | None = None) -> dict[str, int]:
        texts = self._scalars(
            select(ChatMessage.message).where(
                ChatMessage.user_id == user_id, ChatMessage.type == MessageType.user
            )
        )
        return count_topics(texts, limit or settings.popular_topics_limit)

    def total_conversations(self, user_id: int) -> int:
        return self._count(
            select(func.count(func.distinct(ChatMessage.session_id))).where(
                ChatMessage.user_id == user_id
            )
        )

    def total_messages(self, user_id: int) -> int:
        return self._count(
            select(func.count(ChatMessage.id)).where(
                ChatMessage.user_id == user_id, ChatMessage.type == MessageType.user
            )
        )

    def recent_chats(self, user_id: int, limit: int | None = None) -> list[ChatMessage]:
        store = MessageStore(self.session)
        return store.latest_for_account(user_id, limit or settings.recent_chats_limit)

    # -------- Platform wide --------

    def total_users_chatting(self) -> int:
        # COUNT(DISTINCT ...) skips NULL, so anonymous and bot rows are ignored
        return self._count(select(func.count(func.distinct(ChatMessage.user_id))))

    def total_messages_today(self) -> int:
        now = self._clock()
        start = datetime.combine(now.date(), time.min, tzinfo=now.tzinfo)
        return self._count(
            select(func.count(ChatMessage.id)).where(
                ChatMessage.created_at >= start,
                ChatMessage.created_at < start + timedelta(days=1),
            )
        )

    def active_sessions(self, hours: int | None = None) -> int:
        window = timedelta(hours=hours or settings.active_session_hours)
        cutoff = self._clock() - window
        return self._count(
            select(func.count(func.distinct(ChatMessage.session_id))).where(
                ChatMessage.created_at >= cutoff
            )
        )

    # -------- Bundles --------

    def user_stats(self, user_id: int) -> dict[str, Any]:
        return {
            "total_conversations": self.total_conversations(user_id),
            "total_messages": self.total_messages(user_id),
            "recent_chats": self.recent_chats(user_id),
            "popular_topics": self.topic_counts(user_id),
        }

    def global_stats(self) -> dict[str, int]:
        return {
            "total_users_chatting": self.total_users_chatting(),
            "total_messages_today": self.total_messages_today(),
            "active_sessions": self.active_sessions(),
        }

    def _count(self, stmt) -> int:
        try:
            return self.session.exec(stmt).one() or 0
        except SQLAlchemyError as e:
            logger.error(f"Statistics query failed: {e}")
            raise PersistenceError("Could not compute chat statistics") from e

    def _scalars(self, stmt) -> list[Any]:
        try:
            return list(self.session.exec(stmt).all())
        except SQLAlchemyError as e:
            logger.error(f"Statistics query failed: {e}")
            raise PersistenceError("Could not compute chat statistics") from e
