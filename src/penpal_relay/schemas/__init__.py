"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .chat import ChatCreate, ChatPage, ChatResponse, LastMessageSummary, Participant
from .message import MessageCreate, MessagePage, MessageResponse, SentMessageResponse

__all__ = [
    "ChatCreate", "ChatPage", "ChatResponse", "LastMessageSummary", "Participant",
    "MessageCreate", "MessagePage", "MessageResponse", "SentMessageResponse",
]
