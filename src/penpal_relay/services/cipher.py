# src/penpal_relay/services/cipher.py
"""Symmetric encryption of message text at rest."""

from __future__ import annotations

import base64
import hashlib
import logging
from functools import lru_cache

from cryptography.fernet import Fernet, InvalidToken

from penpal_relay.core.errors import ConfigurationError
from penpal_relay.core.settings import settings

logger = logging.getLogger(__name__)


def derive_fernet_key(secret: str) -> bytes:
    """Derive a Fernet key from an arbitrary-length shared secret.

    Args:
        secret: Process-wide secret string.

    Returns:
        URL-safe base64 encoded 32-byte key.
    """
    digest = hashlib.sha256(secret.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest)


class MessageCipher:
    """Encrypt and decrypt message text with one shared secret."""

    def __init__(self, secret: str | None) -> None:
        if not secret:
            raise ConfigurationError(
                "MESSAGE_SECRET_KEY is required; message encryption cannot proceed without it"
            )
        self._fernet = Fernet(derive_fernet_key(secret))

    def encrypt(self, plaintext: str) -> str:
        """Encrypt plaintext and return an ASCII token."""
        return self._fernet.encrypt(plaintext.encode("utf-8")).decode("ascii")

    def decrypt(self, ciphertext: str) -> str:
        """Decrypt a token produced by :meth:`encrypt`.

        Returns an empty string when the token is malformed or was produced
        with a different key.
        """
        try:
            return self._fernet.decrypt(ciphertext.encode("ascii")).decode("utf-8")
        except (InvalidToken, UnicodeError, ValueError):
            logger.warning("Unable to decrypt message text (length %d)", len(ciphertext))
            return ""


@lru_cache(maxsize=1)
def get_message_cipher() -> MessageCipher:
    """Return the process-wide cipher built from settings."""
    return MessageCipher(settings.message_secret_key)
