"""Shared test fixtures for backend tests."""

from datetime import datetime, timezone
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from chatbot.api.deps import get_responder
from chatbot.core.database import get_session
from chatbot.models.account import Account
from chatbot.services.responder import ResponseGenerator

# In-memory SQLite with StaticPool so all connections (including threads) share one DB
test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


def get_test_session():
    with Session(test_engine) as session:
        yield session


class FirstChoice:
    """Deterministic stand-in for random.Random: always picks the first entry."""

    def choice(self, seq):
        return seq[0]


class FixedClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture(autouse=True)
def setup_test_db():
    """Create all tables before each test, drop after."""
    import chatbot.models  # noqa: F401 - register models
    SQLModel.metadata.create_all(test_engine)
    yield
    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture
def db_session():
    with Session(test_engine) as session:
        yield session


@pytest.fixture
def fixed_clock():
    return FixedClock(datetime(2025, 3, 14, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def account():
    """A registered account, detached from any session."""
    with Session(test_engine) as session:
        acc = Account(name="Ada Lovelace", email="ada@example.com")
        session.add(acc)
        session.commit()
        session.refresh(acc)
        session.expunge(acc)
        return acc


@pytest.fixture
def client():
    """FastAPI TestClient on the in-memory DB with a deterministic responder."""
    with patch("chatbot.core.database.engine", test_engine):
        from chatbot.main import app

        # Use FastAPI's dependency override for get_session
        app.dependency_overrides[get_session] = get_test_session
        app.dependency_overrides[get_responder] = lambda: ResponseGenerator(rng=FirstChoice())

        with TestClient(app) as c:
            yield c

        app.dependency_overrides.clear()


@pytest.fixture
def first_choice():
    return FirstChoice()
