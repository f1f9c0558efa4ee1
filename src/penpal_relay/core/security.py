"""Bearer token issue and verification built on JWT."""
from __future__ import annotations

from datetime import timedelta

from jose import JWTError, jwt

from penpal_relay.core.settings import settings
from penpal_relay.db.time import utcnow


class TokenVerificationError(ValueError):
    """Raised when a bearer token cannot be trusted."""


def create_access_token(uid: str, extra_claims: dict[str, str] | None = None) -> str:
    """Create a JWT access token whose subject is the caller uid."""
    to_encode: dict[str, object] = {"sub": uid}
    if extra_claims:
        to_encode.update(extra_claims)
    to_encode["exp"] = utcnow() + timedelta(minutes=settings.access_token_expire_minutes)
    encoded_jwt: str = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return encoded_jwt


def verify_access_token(token: str) -> str:
    """Verify a JWT access token and return the caller uid.

    Raises:
        TokenVerificationError: If the token is malformed, expired, or has no subject.
    """
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as err:
        raise TokenVerificationError("Could not validate credentials") from err

    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject:
        raise TokenVerificationError("Could not validate credentials")
    return subject
