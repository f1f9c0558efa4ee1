"""create chat tables

Revision ID: 5a1c0e7d9b42
Revises:
Create Date: 2026-10-19 09:12:40.518311

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5a1c0e7d9b42"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create chat, membership index and message tables."""
    op.create_table(
        "chat",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("participants", sa.JSON(), nullable=False),
        sa.Column("type", sa.Text(), nullable=False),
        sa.Column("last_updated_ms", sa.BigInteger(), nullable=False),
        sa.Column("last_message_sender_id", sa.Text(), nullable=True),
        sa.Column("last_message_text", sa.Text(), nullable=True),
        sa.Column("last_message_ms", sa.BigInteger(), nullable=True),
        sa.Column("last_message_status", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_chat_last_updated_ms", "chat", ["last_updated_ms"])

    op.create_table(
        "chat_member",
        sa.Column("chat_id", sa.String(length=32), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("uid", sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(["chat_id"], ["chat.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("chat_id", "position"),
    )
    op.create_index("ix_chat_member_uid", "chat_member", ["uid"])

    op.create_table(
        "chat_message",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("chat_id", sa.String(length=32), nullable=False),
        sa.Column("sender_id", sa.Text(), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("timestamp_ms", sa.BigInteger(), nullable=False),
        sa.ForeignKeyConstraint(["chat_id"], ["chat.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_chat_message_chat_timeline",
        "chat_message",
        ["chat_id", "timestamp_ms", "id"],
    )


def downgrade() -> None:
    """Drop the chat tables."""
    op.drop_index("ix_chat_message_chat_timeline", table_name="chat_message")
    op.drop_table("chat_message")
    op.drop_index("ix_chat_member_uid", table_name="chat_member")
    op.drop_table("chat_member")
    op.drop_index("ix_chat_last_updated_ms", table_name="chat")
    op.drop_table("chat")
