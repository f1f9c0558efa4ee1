"""Engine and session factory for the chat store."""

from __future__ import annotations

from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from penpal_relay.core.settings import settings


class Base(DeclarativeBase):
    """Declarative base for the chat, chat_member and chat_message tables."""


# Model modules register their tables on Base.metadata.
import penpal_relay.models  # noqa: E402,F401


def engine_options(url: str) -> dict[str, Any]:
    """Return engine keyword arguments suited to ``url``.

    SQLite connections are opened on request threads other than the one
    that created them, so the same-thread check is disabled there.
    """
    options: dict[str, Any] = {"pool_pre_ping": True, "echo": settings.sql_debug}
    if url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False}
    return options


engine = create_engine(
    settings.effective_database_url,
    **engine_options(settings.effective_database_url),
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Yield a session bound to the chat store, closed after the request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables() -> None:
    """Create the chat tables when they do not exist yet."""
    Base.metadata.create_all(bind=engine)
