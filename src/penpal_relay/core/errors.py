"""Error taxonomy shared by the chat services."""

from __future__ import annotations


class ChatServiceError(RuntimeError):
    """Base exception raised by the chat services.

    Every subclass carries a machine-readable ``kind`` so transport layers can
    map it to a status code without inspecting messages.
    """

    kind = "internal"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidArgumentError(ChatServiceError):
    """Raised for malformed requests such as a participant count other than two."""

    kind = "invalid_argument"


class NotFoundError(ChatServiceError):
    """Raised when the referenced chat does not exist."""

    kind = "not_found"


class ForbiddenError(ChatServiceError):
    """Raised when a write violates the policy of the chat type."""

    kind = "forbidden"


class DependencyFailureError(ChatServiceError):
    """Raised when the store or the cipher fails for reasons opaque to the core."""

    kind = "dependency_failure"


class ConfigurationError(RuntimeError):
    """Raised at startup when required configuration is missing."""
