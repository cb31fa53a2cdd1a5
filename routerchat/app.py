"""Flask application for the multi-tenant LLM chat platform."""

import argparse
import logging
import sys
from typing import List, Optional

from flask import Flask
from flask_cors import CORS

from routerchat.conf.config import Config
from routerchat.src.api import setup_api
from routerchat.src.services import (
    BaseProviderGateway,
    BaseTokenVerifier,
    CatalogStore,
    Database,
    IdentityStore,
    SessionLedger,
    SettingsStore,
    create_chat_orchestrator,
    create_database,
    create_provider_gateway,
    create_token_verifier,
    grant_admin_role,
    seed_provider_credential,
)

# Logging is configured in routerchat/__init__.py
logger = logging.getLogger(__name__)


def create_app(
    database: Optional[Database] = None,
    token_verifier: Optional[BaseTokenVerifier] = None,
    provider_gateway: Optional[BaseProviderGateway] = None,
) -> Flask:
    """Create and configure the Flask application with the chat services.

    Args:
        database: Database to use; created from Config.DATABASE_URL if None
        token_verifier: Identity provider verifier; the Supabase verifier if None
        provider_gateway: Completion provider gateway; OpenRouter if None

    Returns:
        Configured Flask application
    """
    logger.info("Starting application setup...")

    app = Flask(__name__)
    CORS(app)

    if database is None:
        database = create_database()
    else:
        database.create_all()
    logger.info("Database ready")

    # Create stores
    identity_store = IdentityStore(database)
    catalog_store = CatalogStore(database)
    settings_store = SettingsStore(database)
    session_ledger = SessionLedger(database)

    seed_provider_credential(settings_store)

    if token_verifier is None:
        logger.info("Creating token verifier")
        token_verifier = create_token_verifier(identity_store)

    if provider_gateway is None:
        logger.info("Creating provider gateway")
        provider_gateway = create_provider_gateway()

    logger.info("Creating chat orchestrator")
    chat_orchestrator = create_chat_orchestrator(
        token_verifier=token_verifier,
        provider_gateway=provider_gateway,
        session_ledger=session_ledger,
        catalog_store=catalog_store,
        settings_store=settings_store,
    )
    logger.info("Chat orchestrator created")

    logger.info("Setting up API routes")
    setup_api(
        app,
        chat_orchestrator,
        session_ledger,
        catalog_store,
        identity_store,
        token_verifier,
    )
    logger.info("API routes configured")

    logger.info("Application setup complete")
    return app


def main(argv: Optional[List[str]] = None) -> None:
    """Parse command line arguments and run the development server."""
    parser = argparse.ArgumentParser(
        description="Run the RouterChat API (--host, --port, --database-url, --grant-admin)"
    )
    parser.add_argument(
        "--host",
        type=str,
        default=Config.FLASK_HOST,
        help=f"Interface to bind (default: {Config.FLASK_HOST})",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=Config.FLASK_PORT,
        help=f"Port to listen on (default: {Config.FLASK_PORT})",
    )
    parser.add_argument(
        "--database-url",
        type=str,
        default=None,
        help="SQLAlchemy database URL (default: DATABASE_URL or a local SQLite file)",
    )
    parser.add_argument(
        "--grant-admin",
        type=str,
        default=None,
        metavar="IDENTITY_ID",
        help="Promote a signed-in identity to admin and exit",
    )

    args = parser.parse_args(argv)

    if args.database_url:
        Config.DATABASE_URL = args.database_url
    Config.FLASK_HOST = args.host
    Config.FLASK_PORT = args.port

    logger.info(f"Using database: {Config.DATABASE_URL.split('@')[-1]}")

    if args.grant_admin:
        identity_store = IdentityStore(create_database())
        sys.exit(0 if grant_admin_role(identity_store, args.grant_admin) else 1)

    logger.info(f"Using completion provider: {Config.OPENROUTER_API_BASE_URL}")

    try:
        app = create_app()
    except ValueError as e:
        logger.error(f"Failed to create application: {str(e)}")
        sys.exit(1)

    app.run(host=Config.FLASK_HOST, port=Config.FLASK_PORT)


if __name__ == "__main__":
    main()
