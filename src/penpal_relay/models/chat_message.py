"""Models describing messages appended to a chat."""

from sqlalchemy import BigInteger, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from penpal_relay.db.session import Base
from penpal_relay.models.chat import new_document_id


class ChatMessage(Base):
    """Encrypted message belonging to a chat.

    Rows are immutable once written and are only removed together with their
    parent chat.
    """

    __tablename__ = "chat_message"
    __table_args__ = (
        Index("ix_chat_message_chat_timeline", "chat_id", "timestamp_ms", "id"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_document_id)
    chat_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("chat.id", ondelete="CASCADE"), nullable=False
    )
    sender_id: Mapped[str] = mapped_column(Text, nullable=False)
    # Ciphertext produced by the message cipher; never stored in plaintext.
    text: Mapped[str] = mapped_column(Text, nullable=False)
    timestamp_ms: Mapped[int] = mapped_column(BigInteger, nullable=False)
