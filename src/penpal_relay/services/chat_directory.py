"""Resolve a pair of participants to their canonical chat."""
from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from penpal_relay.core.errors import InvalidArgumentError
from penpal_relay.db.time import Clock, now_ms
from penpal_relay.models.chat import DEFAULT_CHAT_TYPE, Chat
from penpal_relay.repositories.chat_repo import ChatRepository
from penpal_relay.schemas.chat import Participant

logger = logging.getLogger(__name__)

PAIR_SIZE = 2


def pair_key(uid_a: str, uid_b: str) -> tuple[str, str]:
    """Return the unordered pair key for two participant uids."""
    first, second = sorted((uid_a, uid_b))
    return first, second


@dataclass
class ChatResolution:
    """Outcome of a create-or-get call."""

    chat: Chat
    created: bool


class ChatDirectory:
    """Create-or-get for two-party chats.

    At most one chat exists per unordered participant pair under sequential
    calls. The lookup and the insert are not serialized, so two concurrent
    creators for the same pair can both miss the lookup and insert twice.
    """

    def __init__(self, repo: ChatRepository, *, clock: Clock = now_ms) -> None:
        self.repo = repo
        self.clock = clock

    def find_chat(self, uid_a: str, uid_b: str) -> Chat | None:
        """Return the chat for an unordered pair, if one exists."""
        key = pair_key(uid_a, uid_b)
        # The membership index only answers "contains uid", so narrow by the
        # smaller uid and match the exact pair in memory.
        for chat in self.repo.list_chats_containing(key[0]):
            uids = chat.participant_uids
            if len(uids) == PAIR_SIZE and pair_key(*uids) == key:
                return chat
        return None

    def create_or_get_chat(
        self,
        participants: Sequence[Participant],
        chat_type: str | None = None,
    ) -> ChatResolution:
        """Return the existing chat for the pair or create a new one.

        Raises:
            InvalidArgumentError: If the request does not name exactly two participants.
        """
        if len(participants) != PAIR_SIZE:
            raise InvalidArgumentError("Exactly two participants required")

        uids = [participant.uid for participant in participants]
        existing = self.find_chat(uids[0], uids[1])
        if existing is not None:
            return ChatResolution(chat=existing, created=False)

        chat = self.repo.insert_chat(
            participants=[participant.to_document() for participant in participants],
            participant_uids=uids,
            chat_type=chat_type or DEFAULT_CHAT_TYPE,
            now_ms=self.clock(),
        )
        logger.info("Created %s chat %s", chat.type, chat.id)
        return ChatResolution(chat=chat, created=True)
