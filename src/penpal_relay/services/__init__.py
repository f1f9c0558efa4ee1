# src/penpal_relay/services/__init__.py
"""Business logic services for the Penpal Relay application."""

from .chat_directory import ChatDirectory
from .chat_feed import ChatFeed
from .chat_lifecycle import ChatLifecycle
from .cipher import MessageCipher
from .message_ledger import MessageLedger

__all__ = [
    "ChatDirectory",
    "ChatFeed",
    "ChatLifecycle",
    "MessageCipher",
    "MessageLedger",
]
