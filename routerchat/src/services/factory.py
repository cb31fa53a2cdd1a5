"""Service factory module for centralized service instantiation.

This module provides factory methods for creating service instances,
keeping service initialization logic in one place.
"""

import logging
from typing import Optional

from routerchat.conf.config import Config
from routerchat.src.data_classes import ADMIN_ROLE
from routerchat.src.services.auth import BaseTokenVerifier, SupabaseTokenVerifier
from routerchat.src.services.chat import ChatOrchestrator, ContextAssembler, ModelResolver
from routerchat.src.services.llm import BaseProviderGateway, OpenRouterGateway
from routerchat.src.services.store import (
    CatalogStore,
    Database,
    IdentityStore,
    SessionLedger,
    SettingsStore,
)

logger = logging.getLogger(__name__)


def create_database(url: Optional[str] = None) -> Database:
    """Create the database and make sure all tables exist.

    Args:
        url: SQLAlchemy URL; defaults to Config.DATABASE_URL

    Returns:
        Initialized Database instance
    """
    database = Database(url or Config.DATABASE_URL)
    database.create_all()
    return database


def create_token_verifier(identity_store: IdentityStore) -> BaseTokenVerifier:
    """Create the identity provider token verifier.

    Args:
        identity_store: Store receiving identity upserts

    Returns:
        Configured token verifier
    """
    return SupabaseTokenVerifier(identity_store=identity_store)


def create_provider_gateway() -> BaseProviderGateway:
    """Create the completion provider gateway from configuration."""
    logger.info(f"Using completion provider at {Config.OPENROUTER_API_BASE_URL}")
    return OpenRouterGateway()


def seed_provider_credential(settings_store: SettingsStore) -> None:
    """Copy OPENROUTER_API_KEY from the environment into the settings store.

    Only runs when the variable is set; the request path reads the settings
    store exclusively.
    """
    if Config.OPENROUTER_API_KEY:
        settings_store.set_setting(
            Config.OPENROUTER_API_KEY_SETTING, Config.OPENROUTER_API_KEY
        )
        logger.info("Provider credential seeded from environment")


def grant_admin_role(identity_store: IdentityStore, identity_id: str) -> bool:
    """Promote an existing identity to admin.

    Used by the command line to bootstrap the first admin, since the role
    endpoint itself is admin only. The identity must have signed in once.

    Returns:
        True if the identity exists and now holds the admin role
    """
    identity = identity_store.update_role(identity_id, ADMIN_ROLE)
    if identity is None:
        logger.warning(f"Cannot grant admin role, unknown identity {identity_id}")
        return False
    logger.info(f"Granted admin role to {identity_id}")
    return True

def create_chat_orchestrator(
    token_verifier: BaseTokenVerifier,
    provider_gateway: BaseProviderGateway,
    session_ledger: SessionLedger,
    catalog_store: CatalogStore,
    settings_store: SettingsStore,
) -> ChatOrchestrator:
    """Create and configure a ChatOrchestrator instance.

    Args:
        token_verifier: Resolves bearer tokens to identities
        provider_gateway: Calls the completion provider
        session_ledger: Persists sessions and messages
        catalog_store: Model catalog access
        settings_store: Settings access for the provider credential

    Returns:
        Configured ChatOrchestrator instance
    """
    logger.info("Initializing ChatOrchestrator with components")
    return ChatOrchestrator(
        token_verifier=token_verifier,
        model_resolver=ModelResolver(catalog_store, settings_store),
        context_assembler=ContextAssembler(session_ledger),
        provider_gateway=provider_gateway,
        session_ledger=session_ledger,
    )
