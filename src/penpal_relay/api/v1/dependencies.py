"""Shared API dependencies for authentication and service wiring."""

import logging
from typing import Annotated, NoReturn

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from penpal_relay.core.errors import (
    ChatServiceError,
    ForbiddenError,
    InvalidArgumentError,
    NotFoundError,
)
from penpal_relay.core.security import TokenVerificationError, verify_access_token
from penpal_relay.core.settings import settings
from penpal_relay.db.session import get_db
from penpal_relay.db.time import Clock, now_ms
from penpal_relay.repositories.chat_repo import ChatRepository
from penpal_relay.services import (
    ChatDirectory,
    ChatFeed,
    ChatLifecycle,
    MessageCipher,
    MessageLedger,
)
from penpal_relay.services.cipher import get_message_cipher

logger = logging.getLogger(__name__)

# HTTP Bearer scheme for JWT authentication
bearer_scheme = HTTPBearer()

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_current_uid(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer_scheme)],
) -> str:
    """Return the verified caller uid from the bearer token.

    Raises:
        HTTPException: If the token is invalid.
    """
    try:
        return verify_access_token(credentials.credentials)
    except TokenVerificationError as err:
        logger.info("Token verification failed: %s", err)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        ) from err


def get_clock() -> Clock:
    """Return the clock used to timestamp writes and evaluate embargoes."""
    return now_ms


def get_cipher() -> MessageCipher:
    """Return the process-wide message cipher."""
    return get_message_cipher()


CurrentUidDep = Annotated[str, Depends(get_current_uid)]
ClockDep = Annotated[Clock, Depends(get_clock)]
CipherDep = Annotated[MessageCipher, Depends(get_cipher)]


def get_chat_repository(db: SessionDep) -> ChatRepository:
    return ChatRepository(db)


RepoDep = Annotated[ChatRepository, Depends(get_chat_repository)]


def get_chat_directory(repo: RepoDep, clock: ClockDep) -> ChatDirectory:
    return ChatDirectory(repo, clock=clock)


def get_message_ledger(repo: RepoDep, cipher: CipherDep, clock: ClockDep) -> MessageLedger:
    return MessageLedger(repo, cipher, clock=clock)


def get_chat_feed(
    repo: RepoDep,
    cipher: CipherDep,
    ledger: Annotated[MessageLedger, Depends(get_message_ledger)],
    clock: ClockDep,
) -> ChatFeed:
    return ChatFeed(
        repo,
        cipher,
        ledger,
        clock=clock,
        delay_ms=settings.penpal_delay_ms,
        mark_read_on_fetch=settings.mark_read_on_fetch,
    )


def get_chat_lifecycle(repo: RepoDep) -> ChatLifecycle:
    return ChatLifecycle(repo)


DirectoryDep = Annotated[ChatDirectory, Depends(get_chat_directory)]
LedgerDep = Annotated[MessageLedger, Depends(get_message_ledger)]
FeedDep = Annotated[ChatFeed, Depends(get_chat_feed)]
LifecycleDep = Annotated[ChatLifecycle, Depends(get_chat_lifecycle)]

_STATUS_BY_ERROR: dict[type[ChatServiceError], int] = {
    InvalidArgumentError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ForbiddenError: status.HTTP_403_FORBIDDEN,
}


def raise_http_error(err: ChatServiceError, *, action: str) -> NoReturn:
    """Translate a service error into an HTTP error.

    Expected conditions keep their message; dependency failures are logged and
    surfaced as a generic failure for ``action``.
    """
    status_code = _STATUS_BY_ERROR.get(type(err))
    if status_code is not None:
        raise HTTPException(status_code=status_code, detail=err.message) from err
    logger.error("%s failed (%s): %s", action, err.kind, err)
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}",
    ) from err
