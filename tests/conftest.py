# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("PYTEST_RUNNING", "true")
os.environ.setdefault("SECRET_KEY", "test-jwt-secret")
os.environ.setdefault("MESSAGE_SECRET_KEY", "test-message-secret")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from penpal_relay.api.v1 import dependencies  # noqa: E402
from penpal_relay.core.security import create_access_token  # noqa: E402
from penpal_relay.db.session import Base  # noqa: E402
from penpal_relay.db.session import get_db as app_get_session  # noqa: E402
from penpal_relay.main import app as fastapi_app  # noqa: E402
from penpal_relay.repositories.chat_repo import ChatRepository  # noqa: E402
from penpal_relay.schemas.chat import Participant  # noqa: E402
from penpal_relay.services import (  # noqa: E402
    ChatDirectory,
    ChatFeed,
    ChatLifecycle,
    MessageCipher,
    MessageLedger,
)

TEST_DB_URL = "sqlite://"
START_MS = 1_700_000_000_000


class FakeClock:
    """Controllable epoch-millisecond clock."""

    def __init__(self, start_ms: int = START_MS) -> None:
        self.now_ms = start_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, seconds: float = 0, ms: int = 0) -> int:
        self.now_ms += int(seconds * 1000) + ms
        return self.now_ms


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        # Ensure each test sees a clean database; services commit for real.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(scope="session")
def cipher() -> MessageCipher:
    return MessageCipher("test-message-secret")


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_dependencies(
    app: FastAPI,
    db_session: Session,
    clock: FakeClock,
    cipher: MessageCipher,
) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    overrides: dict[Callable[..., object], Callable[..., object]] = {
        app_get_session: _get_session_override,
        dependencies.get_clock: lambda: clock,
        dependencies.get_cipher: lambda: cipher,
    }
    app.dependency_overrides.update(overrides)
    try:
        yield
    finally:
        for dependency in overrides:
            app.dependency_overrides.pop(dependency, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def auth_headers() -> Callable[[str], dict[str, str]]:
    """Return a factory building bearer headers for a uid."""

    def _headers(uid: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(uid)}"}

    return _headers


@pytest.fixture()
def repo(db_session: Session) -> ChatRepository:
    return ChatRepository(db_session)


@pytest.fixture()
def directory(repo: ChatRepository, clock: FakeClock) -> ChatDirectory:
    return ChatDirectory(repo, clock=clock)


@pytest.fixture()
def ledger(repo: ChatRepository, cipher: MessageCipher, clock: FakeClock) -> MessageLedger:
    return MessageLedger(repo, cipher, clock=clock)


@pytest.fixture()
def feed(
    repo: ChatRepository,
    cipher: MessageCipher,
    ledger: MessageLedger,
    clock: FakeClock,
) -> ChatFeed:
    return ChatFeed(repo, cipher, ledger, clock=clock)


@pytest.fixture()
def lifecycle(repo: ChatRepository) -> ChatLifecycle:
    return ChatLifecycle(repo)


def make_participants(*uids: str) -> list[Participant]:
    return [Participant(uid=uid, display_name=uid.title()) for uid in uids]


@pytest.fixture()
def penpal_chat(directory: ChatDirectory):
    """A penpal chat between alice and bob."""
    return directory.create_or_get_chat(make_participants("alice", "bob")).chat


@pytest.fixture()
def onetime_chat(directory: ChatDirectory):
    """A one-time chat between alice and bob."""
    return directory.create_or_get_chat(make_participants("alice", "bob"), "onetime").chat
