"""Chat-related Pydantic schemas."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Participant(BaseModel):
    """Descriptor of one chat participant as supplied by the client."""

    uid: str = Field(..., min_length=1, description="Unique identity of the participant")
    display_name: str | None = Field(None, description="Name shown next to messages")
    photo_url: str | None = Field(None, description="Avatar URL")

    model_config = ConfigDict(extra="ignore")

    def to_document(self) -> dict[str, Any]:
        """Return the stored form of the descriptor."""
        return self.model_dump(exclude_none=True)


class ChatCreate(BaseModel):
    """Schema for creating (or resolving) a two-party chat."""

    participants: list[Participant] = Field(..., description="Exactly two participants")
    type: str | None = Field(None, description="Chat type, defaults to 'penpal'")


class LastMessageSummary(BaseModel):
    """Denormalized summary of the newest message in a chat."""

    sender_id: str
    text: str | None = Field(None, description="Decrypted text; null when undisplayable")
    timestamp: int = Field(..., description="Epoch milliseconds")
    status: str


class ChatResponse(BaseModel):
    """Schema for chat information returned by the API."""

    chat_id: str
    participants: list[Participant]
    participant_uids: list[str]
    type: str
    last_updated: int = Field(..., description="Epoch milliseconds of the latest mutation")
    last_message: LastMessageSummary | None = None


class ChatPage(BaseModel):
    """A page of chats ordered by recency."""

    chats: list[ChatResponse]
    next_page_token: str | None = None
