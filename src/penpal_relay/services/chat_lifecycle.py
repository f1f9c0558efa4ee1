"""Fetch and delete whole chats."""
from __future__ import annotations

import logging

from penpal_relay.core.errors import NotFoundError
from penpal_relay.models.chat import Chat
from penpal_relay.repositories.chat_repo import ChatRepository

logger = logging.getLogger(__name__)


class ChatLifecycle:
    """Single-chat lookups and cascade deletion."""

    def __init__(self, repo: ChatRepository) -> None:
        self.repo = repo

    def get_chat(self, chat_id: str) -> Chat:
        """Return a chat or raise :class:`NotFoundError`."""
        chat = self.repo.get_chat(chat_id)
        if chat is None:
            raise NotFoundError("Chat not found")
        return chat

    def delete_chat(self, chat_id: str) -> None:
        """Delete a chat and all of its messages in one transaction."""
        chat = self.get_chat(chat_id)
        removed = self.repo.delete_chat(chat)
        logger.info("Deleted chat %s with %d messages", chat_id, removed)
