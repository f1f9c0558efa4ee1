# src/penpal_relay/services/chat_feed.py
"""Read path for chats: message visibility and cursor pagination.

Messages from the other participant are embargoed for a fixed delay after
they are sent; a sender always sees their own messages immediately. The
embargo is applied to each fetched batch *after* the store query and *before*
the next-page decision, so a page can hold fewer than ``page_size`` messages
while older ones remain. Pages are never backfilled.

Chat summaries are not embargoed: the last message text is shown to both
participants as soon as it is written.
"""

from __future__ import annotations

import logging

from penpal_relay.core.errors import InvalidArgumentError
from penpal_relay.core.pagination import Page, PageCursor
from penpal_relay.db.time import Clock, now_ms
from penpal_relay.models.chat import Chat
from penpal_relay.models.chat_message import ChatMessage
from penpal_relay.repositories.chat_repo import ChatRepository
from penpal_relay.schemas.chat import ChatResponse, LastMessageSummary, Participant
from penpal_relay.schemas.message import MessageResponse
from penpal_relay.services.cipher import MessageCipher
from penpal_relay.services.message_ledger import MessageLedger

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
PENPAL_DELAY_MS = 60 * 1000


def is_visible(message: MessageResponse, requester: str, now: int, delay_ms: int) -> bool:
    """Return True when ``requester`` may see ``message`` at time ``now``."""
    return message.sender_id == requester or now - message.timestamp >= delay_ms


def _display_text(cipher: MessageCipher, ciphertext: str | None) -> str | None:
    if not ciphertext:
        return None
    return cipher.decrypt(ciphertext) or None


def to_message_response(message: ChatMessage, cipher: MessageCipher) -> MessageResponse:
    """Convert a stored message to its decrypted API form."""
    return MessageResponse(
        id=message.id,
        sender_id=message.sender_id,
        text=_display_text(cipher, message.text),
        timestamp=message.timestamp_ms,
    )


def to_chat_response(chat: Chat, cipher: MessageCipher) -> ChatResponse:
    """Convert a stored chat to its API form with the summary text decrypted."""
    last_message = None
    if chat.has_last_message:
        last_message = LastMessageSummary(
            sender_id=chat.last_message_sender_id or "",
            text=_display_text(cipher, chat.last_message_text),
            timestamp=chat.last_message_ms,
            status=chat.last_message_status or "",
        )
    return ChatResponse(
        chat_id=chat.id,
        participants=[Participant.model_validate(p) for p in chat.participants],
        participant_uids=chat.participant_uids,
        type=chat.type,
        last_updated=chat.last_updated_ms,
        last_message=last_message,
    )


class ChatFeed:
    """Paginated, visibility-filtered reads over chats and messages."""

    def __init__(
        self,
        repo: ChatRepository,
        cipher: MessageCipher,
        ledger: MessageLedger,
        *,
        clock: Clock = now_ms,
        delay_ms: int = PENPAL_DELAY_MS,
        mark_read_on_fetch: bool = True,
    ) -> None:
        self.repo = repo
        self.cipher = cipher
        self.ledger = ledger
        self.clock = clock
        self.delay_ms = delay_ms
        self.mark_read_on_fetch = mark_read_on_fetch

    @staticmethod
    def _check_page_size(page_size: int) -> None:
        if page_size < 1:
            raise InvalidArgumentError("page_size must be a positive integer")

    def fetch_messages(
        self,
        chat_id: str,
        requester: str,
        page_size: int = DEFAULT_PAGE_SIZE,
        page_token: str | None = None,
    ) -> Page[MessageResponse]:
        """Return one page of messages visible to ``requester``, oldest first.

        A missing chat yields an empty page rather than an error. Reading also
        marks the chat's last message as read when it came from the other
        participant.
        """
        self._check_page_size(page_size)
        cursor = PageCursor.decode(page_token)

        chat = self.repo.get_chat(chat_id)
        if chat is None:
            return Page(items=[], next_page_token=None)

        if self.mark_read_on_fetch:
            self.ledger.mark_last_message_read(chat, requester)

        rows = self.repo.list_messages(chat_id, limit=page_size + 1, cursor=cursor)
        now = self.clock()
        visible: list[MessageResponse] = []
        for row in rows:
            message = to_message_response(row, self.cipher)
            if is_visible(message, requester, now, self.delay_ms):
                visible.append(message)

        next_page_token = None
        if len(visible) > page_size:
            boundary = visible[page_size - 1]
            next_page_token = PageCursor(boundary.timestamp, boundary.id).encode()
            visible = visible[:page_size]

        logger.debug(
            "Chat %s: returning %d of %d fetched messages to %s",
            chat_id,
            len(visible),
            len(rows),
            requester,
        )
        # Stored order is newest first; callers read oldest first.
        visible.reverse()
        return Page(items=visible, next_page_token=next_page_token)

    def fetch_latest_chats(
        self,
        requester: str,
        page_size: int = DEFAULT_PAGE_SIZE,
        page_token: str | None = None,
    ) -> Page[ChatResponse]:
        """Return chats of ``requester`` ordered by most recent activity."""
        self._check_page_size(page_size)
        cursor = PageCursor.decode(page_token)

        chats = self.repo.list_chats_for(requester, limit=page_size + 1, cursor=cursor)
        next_page_token = None
        if len(chats) > page_size:
            boundary = chats[page_size - 1]
            next_page_token = PageCursor(boundary.last_updated_ms, boundary.id).encode()
            chats = chats[:page_size]

        return Page(
            items=[to_chat_response(chat, self.cipher) for chat in chats],
            next_page_token=next_page_token,
        )
