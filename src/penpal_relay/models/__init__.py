# src/penpal_relay/models/__init__.py
"""SQLAlchemy models for the Penpal Relay application."""

from .chat import Chat, ChatMember
from .chat_message import ChatMessage

__all__ = [
    "Chat", "ChatMember",
    "ChatMessage",
]
