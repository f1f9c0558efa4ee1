# src/penpal_relay/api/v1/endpoints/chats.py
"""Chat endpoints for the Penpal Relay API."""

from __future__ import annotations

from fastapi import APIRouter, Query, Response, status

from penpal_relay.core.errors import ChatServiceError
from penpal_relay.core.settings import settings
from penpal_relay.schemas.chat import ChatCreate, ChatPage, ChatResponse
from penpal_relay.services.chat_feed import to_chat_response

from ..dependencies import (
    CipherDep,
    CurrentUidDep,
    DirectoryDep,
    FeedDep,
    LifecycleDep,
    raise_http_error,
)

router = APIRouter(prefix="/chats", tags=["chats"])


@router.post(
    "",
    response_model=ChatResponse,
    status_code=status.HTTP_201_CREATED,
    responses={status.HTTP_200_OK: {"model": ChatResponse, "description": "Existing chat"}},
)
async def create_chat(
    chat_data: ChatCreate,
    response: Response,
    _current_uid: CurrentUidDep,
    directory: DirectoryDep,
    cipher: CipherDep,
) -> ChatResponse:
    """Create a chat between two participants, or return the existing one."""
    try:
        resolution = directory.create_or_get_chat(chat_data.participants, chat_data.type)
    except ChatServiceError as err:
        raise_http_error(err, action="create chat")

    if not resolution.created:
        response.status_code = status.HTTP_200_OK
    return to_chat_response(resolution.chat, cipher)


@router.get("", response_model=ChatPage)
async def list_chats(
    current_uid: CurrentUidDep,
    feed: FeedDep,
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    page_token: str | None = Query(None),
) -> ChatPage:
    """List the caller's chats, most recently updated first."""
    try:
        page = feed.fetch_latest_chats(current_uid, page_size, page_token)
    except ChatServiceError as err:
        raise_http_error(err, action="fetch latest chats")
    return ChatPage(chats=page.items, next_page_token=page.next_page_token)


@router.get("/{chat_id}", response_model=ChatResponse)
async def get_chat(
    chat_id: str,
    _current_uid: CurrentUidDep,
    lifecycle: LifecycleDep,
    cipher: CipherDep,
) -> ChatResponse:
    """Get a specific chat by ID."""
    try:
        chat = lifecycle.get_chat(chat_id)
    except ChatServiceError as err:
        raise_http_error(err, action="get chat")
    return to_chat_response(chat, cipher)


@router.delete("/{chat_id}")
async def delete_chat(
    chat_id: str,
    _current_uid: CurrentUidDep,
    lifecycle: LifecycleDep,
) -> dict[str, str]:
    """Delete a chat together with all of its messages."""
    try:
        lifecycle.delete_chat(chat_id)
    except ChatServiceError as err:
        raise_http_error(err, action="delete chat")
    return {"status": "deleted"}
