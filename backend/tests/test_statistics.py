"""Tests for dashboard statistics."""

from datetime import timedelta

import pytest
from sqlalchemy.exc import OperationalError

from chatbot.core.errors import PersistenceError
from chatbot.models.account import Account
from chatbot.models.chat import ChatMessage, MessageType
from chatbot.services.statistics import StatisticsAggregator, count_topics


@pytest.fixture
def seed(db_session, fixed_clock):
    """Insert a message directly, `age` before the fixed clock."""

    def _seed(session_id, text, kind=MessageType.user, user_id=None, age=timedelta()):
        created = fixed_clock.now - age
        msg = ChatMessage(
            session_id=session_id,
            message=text,
            type=kind,
            user_id=user_id,
            created_at=created,
            updated_at=created,
        )
        db_session.add(msg)
        db_session.commit()
        return msg

    return _seed


@pytest.fixture
def stats(db_session, fixed_clock):
    return StatisticsAggregator(db_session, clock=fixed_clock)


# -------- Topic counting --------

def test_count_topics_humor_and_cooking():
    counts = count_topics(["Tell me a joke", "another JOKE please", "How do I cook rice?"])
    assert counts == {"humor": 2, "cooking": 1}
    assert list(counts) == ["humor", "cooking"]


def test_count_topics_message_can_hit_several_topics():
    counts = count_topics(["help me cook something funny"])
    assert counts == {"humor": 1, "cooking": 1, "assistance": 1}


def test_count_topics_ignores_generator_only_keywords():
    # "hello" and "rain" drive replies but are not statistics topics
    assert count_topics(["hello", "rain again"]) == {}


def test_count_topics_limit():
    texts = ["joke"] * 3 + ["recipe"] * 2 + ["computer"]
    assert count_topics(texts, limit=2) == {"humor": 3, "cooking": 2}


def test_topic_counts_only_scans_own_user_messages(stats, seed, account):
    seed("s1", "Tell me a joke", user_id=account.id)
    seed("s2", "something funny", user_id=account.id)
    seed("s2", "any recipe for cookies?", user_id=account.id)
    seed("s2", "joke about cooking", kind=MessageType.bot)
    seed("s3", "joke", user_id=None)

    counts = stats.topic_counts(account.id)
    assert counts == {"humor": 2, "cooking": 1}
    assert list(counts) == ["humor", "cooking"]


# -------- Per account rollups --------

def test_total_conversations_and_messages(stats, seed, account):
    seed("s1", "hello", user_id=account.id)
    seed("s1", "Hello!", kind=MessageType.bot)
    seed("s1", "thanks", user_id=account.id)
    seed("s2", "bye", user_id=account.id)
    seed("s3", "someone else")

    assert stats.total_conversations(account.id) == 2
    assert stats.total_messages(account.id) == 3


def test_rollups_for_account_without_messages(stats, account):
    assert stats.total_conversations(account.id) == 0
    assert stats.total_messages(account.id) == 0
    assert stats.topic_counts(account.id) == {}
    assert stats.recent_chats(account.id) == []


def test_recent_chats_limit(stats, seed, account):
    for i in range(7):
        seed(f"s{i}", f"message {i}", user_id=account.id, age=timedelta(minutes=10 - i))

    recent = stats.recent_chats(account.id)
    assert len(recent) == 5
    assert recent[0].message == "message 6"


# -------- Platform wide --------

def test_total_users_chatting(stats, seed, account, db_session):
    other = Account(name="Grace Hopper")
    db_session.add(other)
    db_session.commit()

    seed("s1", "hi", user_id=account.id)
    seed("s2", "hi again", user_id=account.id)
    seed("s3", "hello", user_id=other.id)
    seed("s4", "anonymous")
    seed("s4", "reply", kind=MessageType.bot)

    assert stats.total_users_chatting() == 2


def test_total_messages_today(stats, seed):
    seed("s1", "now")
    seed("s1", "reply", kind=MessageType.bot)
    seed("s2", "this morning", age=timedelta(hours=11))
    seed("s3", "yesterday", age=timedelta(hours=13))

    assert stats.total_messages_today() == 3


def test_active_sessions(stats, seed):
    seed("s1", "recent")
    seed("s1", "recent reply", kind=MessageType.bot)
    seed("s2", "earlier today", age=timedelta(hours=23))
    seed("s3", "two days ago", age=timedelta(days=2))

    assert stats.active_sessions() == 2
    assert stats.active_sessions(hours=1) == 1


def test_bundles(stats, seed, account):
    seed("s1", "tell me a joke", user_id=account.id)
    seed("s1", "Why don't scientists trust atoms?", kind=MessageType.bot)

    user_stats = stats.user_stats(account.id)
    assert user_stats["total_conversations"] == 1
    assert user_stats["total_messages"] == 1
    assert user_stats["popular_topics"] == {"humor": 1}
    assert len(user_stats["recent_chats"]) == 1

    assert stats.global_stats() == {
        "total_users_chatting": 1,
        "total_messages_today": 2,
        "active_sessions": 1,
    }


def test_query_failure_raises_persistence_error(stats, db_session, monkeypatch, account):
    def broken_exec(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr(db_session, "exec", broken_exec)

    with pytest.raises(PersistenceError):
        stats.total_messages(account.id)
    with pytest.raises(PersistenceError):
        stats.topic_counts(account.id)
    with pytest.raises(PersistenceError):
        stats.global_stats()
