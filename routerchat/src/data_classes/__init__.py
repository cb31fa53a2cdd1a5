"""Data classes module for the chat pipeline.

This module provides the core data structures passed between services:

Classes:
    - Identity: A verified caller, stored locally
    - CatalogModel: A model catalog entry
    - ResolvedModel: Provider model string plus credential for one request
    - ChatSession: A durable, owned conversation thread
    - ChatMessage: A single message within a session
    - ProviderCompletion: Normalized provider response
    - ChatResult: Result of one chat request
Enums:
    - MessageRole, RequestBranch, ChatState
"""

from routerchat.src.data_classes.catalog_model import CatalogModel, ResolvedModel
from routerchat.src.data_classes.chat_result import (
    ChatResult,
    ChatState,
    ProviderCompletion,
    RequestBranch,
)
from routerchat.src.data_classes.chat_session import (
    ChatMessage,
    ChatSession,
    MessageRole,
)
from routerchat.src.data_classes.identity import ADMIN_ROLE, USER_ROLE, Identity

__all__ = [
    "ADMIN_ROLE",
    "USER_ROLE",
    "Identity",
    "CatalogModel",
    "ResolvedModel",
    "ChatSession",
    "ChatMessage",
    "MessageRole",
    "ProviderCompletion",
    "ChatResult",
    "ChatState",
    "RequestBranch",
]
