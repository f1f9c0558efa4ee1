"""Data access helpers for chats and their messages."""
from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import and_, delete, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import InstrumentedAttribute, Session

from penpal_relay.core.errors import DependencyFailureError
from penpal_relay.core.pagination import PageCursor
from penpal_relay.models.chat import (
    MESSAGE_STATUS_READ,
    MESSAGE_STATUS_UNREAD,
    Chat,
    ChatMember,
)
from penpal_relay.models.chat_message import ChatMessage

__all__ = ["ChatRepository"]

logger = logging.getLogger(__name__)


def _after_cursor(
    order_col: InstrumentedAttribute[int],
    id_col: InstrumentedAttribute[str],
    cursor: PageCursor,
) -> Any:
    """Build the "strictly after" predicate for a descending ordering."""
    if cursor.doc_id is None:
        return order_col < cursor.timestamp_ms
    return or_(
        order_col < cursor.timestamp_ms,
        and_(order_col == cursor.timestamp_ms, id_col < cursor.doc_id),
    )


class ChatRepository:
    """Thin wrapper around database access for chat documents.

    Every method either completes or raises :class:`DependencyFailureError`;
    the session is rolled back before the error propagates.
    """

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    @contextmanager
    def _store_call(self, action: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Store call failed while trying to %s: %s", action, exc)
            raise DependencyFailureError(f"Failed to {action}") from exc

    def get_chat(self, chat_id: str) -> Chat | None:
        """Return a chat by identifier."""
        with self._store_call("get chat"):
            return self.session.get(Chat, chat_id)

    def list_chats_containing(self, uid: str) -> list[Chat]:
        """Return every chat whose membership index contains ``uid``."""
        member_of = select(ChatMember.chat_id).where(ChatMember.uid == uid)
        with self._store_call("look up chats"):
            result = self.session.execute(select(Chat).where(Chat.id.in_(member_of)))
            return list(result.scalars())

    def insert_chat(
        self,
        *,
        participants: list[dict[str, Any]],
        participant_uids: list[str],
        chat_type: str,
        now_ms: int,
    ) -> Chat:
        """Insert a new chat and return the persisted row.

        Args:
            participants: Participant descriptors in creation order.
            participant_uids: Uids in the same order, used for membership queries.
            chat_type: Chat type recorded immutably on the row.
            now_ms: Creation time in epoch milliseconds.
        """
        chat = Chat(
            participants=participants,
            type=chat_type,
            last_updated_ms=now_ms,
        )
        chat.members = [
            ChatMember(position=position, uid=uid)
            for position, uid in enumerate(participant_uids)
        ]
        with self._store_call("create chat"):
            self.session.add(chat)
            self.session.commit()
            self.session.refresh(chat)
        return chat

    def has_messages(self, chat_id: str) -> bool:
        """Return True when at least one message exists; probes a single row."""
        stmt = select(ChatMessage.id).where(ChatMessage.chat_id == chat_id).limit(1)
        with self._store_call("check chat messages"):
            return self.session.execute(stmt).first() is not None

    def append_message(
        self,
        chat: Chat,
        *,
        sender_id: str,
        ciphertext: str,
        now_ms: int,
    ) -> ChatMessage:
        """Persist a message and refresh the chat summary in one commit."""
        message = ChatMessage(
            chat_id=chat.id,
            sender_id=sender_id,
            text=ciphertext,
            timestamp_ms=now_ms,
        )
        with self._store_call("send message"):
            self.session.add(message)
            chat.last_message_sender_id = sender_id
            chat.last_message_text = ciphertext
            chat.last_message_ms = now_ms
            chat.last_message_status = MESSAGE_STATUS_UNREAD
            chat.last_updated_ms = now_ms
            self.session.commit()
        return message

    def set_last_message_read(self, chat_id: str) -> bool:
        """Flip an unread summary to read; returns True when a row changed."""
        stmt = (
            update(Chat)
            .where(
                Chat.id == chat_id,
                Chat.last_message_status == MESSAGE_STATUS_UNREAD,
            )
            .values(last_message_status=MESSAGE_STATUS_READ)
            .execution_options(synchronize_session="fetch")
        )
        with self._store_call("mark last message read"):
            result = self.session.execute(stmt)
            self.session.commit()
        return bool(result.rowcount)

    def list_messages(
        self,
        chat_id: str,
        *,
        limit: int,
        cursor: PageCursor | None = None,
    ) -> list[ChatMessage]:
        """Return messages newest-first, starting strictly after ``cursor``."""
        stmt = select(ChatMessage).where(ChatMessage.chat_id == chat_id)
        if cursor is not None:
            stmt = stmt.where(_after_cursor(ChatMessage.timestamp_ms, ChatMessage.id, cursor))
        stmt = stmt.order_by(ChatMessage.timestamp_ms.desc(), ChatMessage.id.desc()).limit(limit)
        with self._store_call("fetch messages"):
            return list(self.session.execute(stmt).scalars())

    def list_chats_for(
        self,
        uid: str,
        *,
        limit: int,
        cursor: PageCursor | None = None,
    ) -> list[Chat]:
        """Return chats the user belongs to, most recently updated first."""
        member_of = select(ChatMember.chat_id).where(ChatMember.uid == uid)
        stmt = select(Chat).where(Chat.id.in_(member_of))
        if cursor is not None:
            stmt = stmt.where(_after_cursor(Chat.last_updated_ms, Chat.id, cursor))
        stmt = stmt.order_by(Chat.last_updated_ms.desc(), Chat.id.desc()).limit(limit)
        with self._store_call("fetch chats"):
            return list(self.session.execute(stmt).scalars())

    def delete_chat(self, chat: Chat) -> int:
        """Delete a chat with all of its messages as one atomic batch.

        Returns:
            Number of messages removed.
        """
        with self._store_call("delete chat"):
            result = self.session.execute(
                delete(ChatMessage).where(ChatMessage.chat_id == chat.id)
            )
            self.session.delete(chat)
            self.session.commit()
        return int(result.rowcount or 0)
