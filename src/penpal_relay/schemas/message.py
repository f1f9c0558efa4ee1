"""Message-related Pydantic schemas."""

from pydantic import BaseModel, Field


class MessageCreate(BaseModel):
    """Schema for sending a message to a chat."""

    text: str | None = Field(None, description="Plaintext message body")


class MessageResponse(BaseModel):
    """A single decrypted message."""

    id: str
    sender_id: str
    text: str | None = Field(None, description="Decrypted text; null when undisplayable")
    timestamp: int = Field(..., description="Epoch milliseconds")


class SentMessageResponse(BaseModel):
    """Result of a successful send."""

    chat_id: str
    type: str
    message: MessageResponse


class MessagePage(BaseModel):
    """A page of visible messages, oldest first."""

    messages: list[MessageResponse]
    next_page_token: str | None = None
