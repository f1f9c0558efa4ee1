"""Page cursors for newest-first listings.

A cursor names the last row of a page by its ordering key
``(timestamp_ms, id)``. The next page starts strictly after that key in
descending order. Tokens are rendered as ``"<millis>:<id>"``; a bare
``"<millis>"`` token is also accepted and means "strictly older than this
millisecond".
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, TypeVar

from penpal_relay.core.errors import InvalidArgumentError

T = TypeVar("T")


@dataclass(frozen=True)
class PageCursor:
    """Position in a ``(timestamp desc, id desc)`` ordering."""

    timestamp_ms: int
    doc_id: str | None = None

    def encode(self) -> str:
        if self.doc_id is None:
            return str(self.timestamp_ms)
        return f"{self.timestamp_ms}:{self.doc_id}"

    @classmethod
    def decode(cls, token: str | None) -> PageCursor | None:
        """Parse a page token; ``None`` or an empty token means the first page."""
        if not token:
            return None
        millis, _, doc_id = token.partition(":")
        try:
            timestamp_ms = int(millis)
        except ValueError as exc:
            raise InvalidArgumentError("Malformed page token") from exc
        return cls(timestamp_ms=timestamp_ms, doc_id=doc_id or None)


@dataclass
class Page(Generic[T]):
    """One page of results plus the token for the following page."""

    items: list[T] = field(default_factory=list)
    next_page_token: str | None = None
