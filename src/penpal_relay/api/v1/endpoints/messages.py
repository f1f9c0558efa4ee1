# src/penpal_relay/api/v1/endpoints/messages.py
"""Chat message endpoints for the Penpal Relay API."""

from __future__ import annotations

from fastapi import APIRouter, Query, status

from penpal_relay.core.errors import ChatServiceError
from penpal_relay.core.settings import settings
from penpal_relay.schemas.message import (
    MessageCreate,
    MessagePage,
    MessageResponse,
    SentMessageResponse,
)

from ..dependencies import CurrentUidDep, FeedDep, LedgerDep, raise_http_error

router = APIRouter(prefix="/chats", tags=["messages"])


@router.post(
    "/{chat_id}/messages",
    response_model=SentMessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def send_message(
    chat_id: str,
    message_data: MessageCreate,
    current_uid: CurrentUidDep,
    ledger: LedgerDep,
) -> SentMessageResponse:
    """Send a message to a chat as the authenticated caller."""
    try:
        sent = ledger.send_message(chat_id, current_uid, message_data.text)
    except ChatServiceError as err:
        raise_http_error(err, action="send message")

    return SentMessageResponse(
        chat_id=sent.chat_id,
        type=sent.chat_type,
        message=MessageResponse(
            id=sent.id,
            sender_id=sent.sender_id,
            text=sent.text,
            timestamp=sent.timestamp_ms,
        ),
    )


@router.get("/{chat_id}/messages", response_model=MessagePage)
async def fetch_messages(
    chat_id: str,
    current_uid: CurrentUidDep,
    feed: FeedDep,
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    page_token: str | None = Query(None),
) -> MessagePage:
    """Get the messages of a chat that are visible to the caller, oldest first."""
    try:
        page = feed.fetch_messages(chat_id, current_uid, page_size, page_token)
    except ChatServiceError as err:
        raise_http_error(err, action="fetch messages")
    return MessagePage(messages=page.items, next_page_token=page.next_page_token)
