"""Chat pipeline services package."""

from .chat_orchestrator import ChatOrchestrator, ChatRequestState, estimate_token_count
from .context_assembler import ContextAssembler
from .model_resolver import ModelResolver

__all__ = [
    "ChatOrchestrator",
    "ChatRequestState",
    "ContextAssembler",
    "ModelResolver",
    "estimate_token_count",
]
