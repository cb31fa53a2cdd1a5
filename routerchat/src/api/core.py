"""Core API setup and configuration.

This module configures API middleware, error handling, and the endpoints.
"""

import logging

from flask import Flask

from routerchat.src.api.endpoints import register_endpoints
from routerchat.src.api.middleware import register_middleware
from routerchat.src.services import (
    BaseTokenVerifier,
    CatalogStore,
    ChatOrchestrator,
    IdentityStore,
    SessionLedger,
)

logger = logging.getLogger(__name__)


def setup_api(
    app: Flask,
    chat_orchestrator: ChatOrchestrator,
    session_ledger: SessionLedger,
    catalog_store: CatalogStore,
    identity_store: IdentityStore,
    token_verifier: BaseTokenVerifier,
) -> None:
    """Set up API with middleware and endpoints.

    Args:
        app: Flask application
        chat_orchestrator: Orchestrator running the chat pipeline
        session_ledger: Ledger holding sessions and messages
        catalog_store: Store holding the model catalog
        identity_store: Store holding the identities
        token_verifier: Verifier for bearer tokens
    """
    register_middleware(app)

    register_endpoints(
        app,
        chat_orchestrator,
        session_ledger,
        catalog_store,
        identity_store,
        token_verifier,
    )
