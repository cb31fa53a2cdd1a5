"""API endpoints package.

This package contains endpoint definitions for the API.
"""

from flask import Flask

from routerchat.src.api.endpoints.admin import init_admin_routes
from routerchat.src.api.endpoints.auth import init_auth_routes
from routerchat.src.api.endpoints.chat import init_chat_routes
from routerchat.src.api.endpoints.models import init_model_routes
from routerchat.src.api.endpoints.sessions import init_session_routes
from routerchat.src.services import (
    BaseTokenVerifier,
    CatalogStore,
    ChatOrchestrator,
    IdentityStore,
    SessionLedger,
)


def register_endpoints(
    app: Flask,
    chat_orchestrator: ChatOrchestrator,
    session_ledger: SessionLedger,
    catalog_store: CatalogStore,
    identity_store: IdentityStore,
    token_verifier: BaseTokenVerifier,
) -> None:
    """Register all API endpoints with the application.

    Args:
        app: Flask application
        chat_orchestrator: Orchestrator running the chat pipeline
        session_ledger: Ledger holding sessions and messages
        catalog_store: Store holding the model catalog
        identity_store: Store holding the identities
        token_verifier: Verifier for bearer tokens
    """
    app.register_blueprint(init_chat_routes(chat_orchestrator))
    app.register_blueprint(init_session_routes(session_ledger, token_verifier))
    app.register_blueprint(init_model_routes(catalog_store, token_verifier))
    app.register_blueprint(init_auth_routes(token_verifier))
    app.register_blueprint(init_admin_routes(identity_store, token_verifier))
