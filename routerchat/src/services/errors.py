"""Exceptions raised by the service layer.

The API layer maps each of these onto an HTTP error response; services never
depend on Flask.
"""

from typing import Optional


class ChatServiceError(Exception):
    """Base class for all service-layer errors."""

    default_message = "Chat service error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ModelNotFoundError(ChatServiceError):
    """The requested model id is unknown or the catalog is unreachable."""

    default_message = "Model not found"


class MisconfiguredProviderError(ChatServiceError):
    """No provider credential is configured."""

    default_message = "OpenRouter API key not configured"


class ProviderError(ChatServiceError):
    """The completion provider failed, timed out or returned nothing usable.

    Attributes:
        reason: Short machine-readable cause, e.g. "empty_response" or "timeout"
    """

    default_message = "Completion provider error"

    def __init__(self, reason: str, message: Optional[str] = None):
        self.reason = reason
        super().__init__(message or f"{self.default_message}: {reason}")


class SessionNotFoundError(ChatServiceError):
    """The referenced chat session does not exist."""

    default_message = "Chat session not found"


class AccessDeniedError(ChatServiceError):
    """The caller does not own the resource it tries to act on."""

    default_message = "Access denied"


class IdentityServiceError(ChatServiceError):
    """The identity provider could not be reached or answered with an error."""

    default_message = "Authentication service error"
