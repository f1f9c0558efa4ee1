"""Models describing two-party chats and their membership index."""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import JSON, BigInteger, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from penpal_relay.db.session import Base

CHAT_TYPE_PENPAL = "penpal"
CHAT_TYPE_ONETIME = "onetime"
DEFAULT_CHAT_TYPE = CHAT_TYPE_PENPAL

MESSAGE_STATUS_UNREAD = "unread"
MESSAGE_STATUS_READ = "read"


def new_document_id() -> str:
    """Return a store-assigned opaque identifier."""
    return uuid.uuid4().hex


class Chat(Base):
    """A conversation between exactly two participants.

    The most recent message is denormalized onto the chat row so chat lists can
    be rendered without touching the message table. The summary text stays
    encrypted, exactly as it is stored in ``chat_message``.
    """

    __tablename__ = "chat"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_document_id)
    # Participant descriptors in the order supplied at creation.
    participants: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False)
    type: Mapped[str] = mapped_column(Text, nullable=False, default=DEFAULT_CHAT_TYPE)
    last_updated_ms: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)

    last_message_sender_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_message_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_message_ms: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    last_message_status: Mapped[str | None] = mapped_column(Text, nullable=True)

    members: Mapped[list[ChatMember]] = relationship(
        back_populates="chat",
        order_by="ChatMember.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def participant_uids(self) -> list[str]:
        """Participant uids in creation order."""
        return [member.uid for member in self.members]

    @property
    def has_last_message(self) -> bool:
        return self.last_message_ms is not None


class ChatMember(Base):
    """Membership index row; one per participant of a chat."""

    __tablename__ = "chat_member"

    chat_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("chat.id", ondelete="CASCADE"), primary_key=True
    )
    position: Mapped[int] = mapped_column(Integer, primary_key=True)
    uid: Mapped[str] = mapped_column(Text, nullable=False, index=True)

    chat: Mapped[Chat] = relationship(back_populates="members")
