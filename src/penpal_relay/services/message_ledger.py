"""Append messages to chats and maintain the last-message summary."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from penpal_relay.core.errors import (
    DependencyFailureError,
    ForbiddenError,
    InvalidArgumentError,
    NotFoundError,
)
from penpal_relay.db.time import Clock, now_ms
from penpal_relay.models.chat import CHAT_TYPE_ONETIME, MESSAGE_STATUS_UNREAD, Chat
from penpal_relay.repositories.chat_repo import ChatRepository
from penpal_relay.services.cipher import MessageCipher

logger = logging.getLogger(__name__)


@dataclass
class SentMessage:
    """A freshly stored message, carrying plaintext for the sender."""

    id: str
    chat_id: str
    chat_type: str
    sender_id: str
    text: str
    timestamp_ms: int


class MessageLedger:
    """Write path for chat messages."""

    def __init__(
        self,
        repo: ChatRepository,
        cipher: MessageCipher,
        *,
        clock: Clock = now_ms,
    ) -> None:
        self.repo = repo
        self.cipher = cipher
        self.clock = clock

    def send_message(self, chat_id: str, sender_id: str, text: str | None) -> SentMessage:
        """Encrypt and append a message, then refresh the chat summary.

        The message row and the summary are written in one commit.

        Raises:
            InvalidArgumentError: If ``text`` is missing or empty.
            NotFoundError: If the chat does not exist.
            ForbiddenError: If a one-time chat already holds a message.
        """
        if not text:
            raise InvalidArgumentError("Text is required")

        chat = self.repo.get_chat(chat_id)
        if chat is None:
            raise NotFoundError("Chat not found")

        # Check-then-act: concurrent senders may both pass this probe.
        if chat.type == CHAT_TYPE_ONETIME and self.repo.has_messages(chat_id):
            raise ForbiddenError("Can't send multiple messages to a one-time chat.")

        try:
            ciphertext = self.cipher.encrypt(text)
        except (TypeError, ValueError) as exc:
            logger.error("Failed to encrypt message for chat %s: %s", chat_id, exc)
            raise DependencyFailureError("Failed to encrypt message") from exc

        timestamp = self.clock()
        message = self.repo.append_message(
            chat,
            sender_id=sender_id,
            ciphertext=ciphertext,
            now_ms=timestamp,
        )
        return SentMessage(
            id=message.id,
            chat_id=chat.id,
            chat_type=chat.type,
            sender_id=sender_id,
            text=text,
            timestamp_ms=timestamp,
        )

    def mark_last_message_read(self, chat: Chat, reader_id: str) -> bool:
        """Flip the chat's last message to read on behalf of ``reader_id``.

        Does nothing when there is no last message, when it is already read, or
        when the reader sent it. A store failure is logged and swallowed.

        Returns:
            True when the status was changed.
        """
        if not chat.has_last_message or chat.last_message_status != MESSAGE_STATUS_UNREAD:
            return False
        if not chat.last_message_sender_id or chat.last_message_sender_id == reader_id:
            return False
        try:
            return self.repo.set_last_message_read(chat.id)
        except DependencyFailureError as exc:
            logger.warning("Failed to mark last message of chat %s as read: %s", chat.id, exc)
            return False
