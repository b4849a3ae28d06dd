"""Chat message model. One row per user message or bot reply, grouped by session."""

from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import JSON, Column, Index, Text
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from chatbot.models.account import Account


class MessageType(str, Enum):
    user = "user"
    bot = "bot"


class ChatMessage(SQLModel, table=True):
    __tablename__ = "chats"  # type: ignore[assignment]
    __table_args__ = (
        Index("ix_chats_user_id_created_at", "user_id", "created_at"),
        Index("ix_chats_session_id_created_at", "session_id", "created_at"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: Optional[int] = Field(default=None, foreign_key="account.id")
    session_id: str = Field(index=True)
    message: str = Field(sa_column=Column(Text, nullable=False))
    type: MessageType = Field(index=True)
    # Stored as "metadata", which SQLModel reserves as an attribute name
    context: dict[str, Any] = Field(default_factory=dict, sa_column=Column("metadata", JSON))
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    user: Optional["Account"] = Relationship()
