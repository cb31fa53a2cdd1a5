"""Services package for the chat pipeline.

This package contains all service components for business logic.
"""

from .auth import BaseTokenVerifier, SupabaseTokenVerifier
from .chat import ChatOrchestrator, ContextAssembler, ModelResolver
from .factory import (
    create_chat_orchestrator,
    create_database,
    create_provider_gateway,
    create_token_verifier,
    grant_admin_role,
    seed_provider_credential,
)
from .llm import BaseProviderGateway, OpenRouterGateway
from .store import CatalogStore, Database, IdentityStore, SessionLedger, SettingsStore

__all__ = [
    # Pipeline services
    "BaseTokenVerifier",
    "SupabaseTokenVerifier",
    "ModelResolver",
    "ContextAssembler",
    "BaseProviderGateway",
    "OpenRouterGateway",
    "ChatOrchestrator",
    # Storage
    "Database",
    "SessionLedger",
    "IdentityStore",
    "CatalogStore",
    "SettingsStore",
    # Factory Functions
    "create_database",
    "create_token_verifier",
    "create_provider_gateway",
    "create_chat_orchestrator",
    "seed_provider_credential",
    "grant_admin_role",
]
