"""Data classes describing one pass through the chat pipeline."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class RequestBranch(str, Enum):
    """Persistence branch of a chat request, decided once per request."""

    AUTHENTICATED = "authenticated"
    GUEST = "guest"

    @property
    def persists(self) -> bool:
        return self is RequestBranch.AUTHENTICATED


class ChatState(str, Enum):
    """Pipeline states of a chat request.

    Lifecycle: received -> identified -> model_resolved -> context_built
               -> provider_called -> persisted | discarded -> responded
               any state -> failed -> responded
    """

    RECEIVED = "received"
    IDENTIFIED = "identified"
    MODEL_RESOLVED = "model_resolved"
    CONTEXT_BUILT = "context_built"
    PROVIDER_CALLED = "provider_called"
    PERSISTED = "persisted"
    DISCARDED = "discarded"
    FAILED = "failed"
    RESPONDED = "responded"


@dataclass(frozen=True)
class ProviderCompletion:
    """Normalized completion returned by the provider gateway.

    Attributes:
        content: Assistant reply text
        token_usage: Total tokens reported by the provider (0 when absent)
        model: Provider model string the completion was requested for
    """

    content: str
    token_usage: int
    model: str


@dataclass(frozen=True)
class ChatResult:
    """Result returned to the caller of the chat pipeline.

    Attributes:
        content: Assistant reply text
        session_id: Persisted session id, None for guest requests
        token_count: Tokens reported for the reply
        branch: Branch the request was processed on
    """

    content: str
    session_id: Optional[str]
    token_count: int
    branch: RequestBranch
