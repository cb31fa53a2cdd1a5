"""Chat session endpoints module.

All routes require an identity. Sessions can only be read or deleted by
their owner.
"""

import logging
from typing import Optional, Tuple

from flask import Blueprint, Response, jsonify
from flask_pydantic import validate  # type: ignore
from pydantic import BaseModel, ConfigDict, Field

from routerchat.conf.config import Config
from routerchat.src.api.middleware.exceptions import ForbiddenError, NotFoundError
from routerchat.src.api.utils.auth import require_identity
from routerchat.src.data_classes import ChatSession, Identity
from routerchat.src.services import BaseTokenVerifier, SessionLedger

logger = logging.getLogger(__name__)


class CreateSessionRequest(BaseModel):
    """Request model for creating an empty session."""

    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    title: Optional[str] = Field(None, description="Session title")
    model_id: Optional[str] = Field(None, alias="modelId", description="Catalog model id")


def _owned_session(
    session_ledger: SessionLedger, identity: Identity, session_id: str
) -> ChatSession:
    """Load a session with its messages and check that the caller owns it."""
    chat_session = session_ledger.get_session_with_messages(session_id)
    if chat_session is None:
        raise NotFoundError(message="Chat session not found")
    if not chat_session.is_owned_by(identity.id):
        raise ForbiddenError(message="Access denied")
    return chat_session


def init_session_routes(
    session_ledger: SessionLedger, token_verifier: BaseTokenVerifier
) -> Blueprint:
    """Initialize session routes with the provided services.

    Args:
        session_ledger: Ledger holding sessions and messages.
        token_verifier: Verifier for the bearer token of each request.

    Returns:
        Blueprint: Flask blueprint with configured session routes.
    """
    sessions_bp = Blueprint("sessions", __name__)

    @sessions_bp.route("/api/chat/sessions", methods=["GET"])
    def list_sessions() -> Tuple[Response, int]:
        """List the caller's sessions, most recently updated first."""
        identity = require_identity(token_verifier)
        sessions = session_ledger.list_sessions(identity.id)
        return jsonify([chat_session.to_json() for chat_session in sessions]), 200

    @sessions_bp.route("/api/chat/sessions/<session_id>", methods=["GET"])
    def get_session(session_id: str) -> Tuple[Response, int]:
        """Return one session with its messages."""
        identity = require_identity(token_verifier)
        chat_session = _owned_session(session_ledger, identity, session_id)
        return jsonify(chat_session.to_json(include_messages=True)), 200

    @sessions_bp.route("/api/chat/sessions/<session_id>/messages", methods=["GET"])
    def get_session_messages(session_id: str) -> Tuple[Response, int]:
        """Return the title, model and ordered messages of one session."""
        identity = require_identity(token_verifier)
        chat_session = _owned_session(session_ledger, identity, session_id)
        return (
            jsonify(
                {
                    "title": chat_session.title,
                    "modelId": chat_session.model_id,
                    "messages": [message.to_json() for message in chat_session.messages],
                }
            ),
            200,
        )

    @sessions_bp.route("/api/chat/sessions", methods=["POST"])
    @validate()
    def create_session(body: CreateSessionRequest) -> Tuple[Response, int]:  # type: ignore
        """Create an empty session owned by the caller.

        Args:
            body: Validated request body

        Returns:
            The created session
        """
        identity = require_identity(token_verifier)
        chat_session = session_ledger.create_session(
            owner_id=identity.id,
            title=body.title or Config.DEFAULT_SESSION_TITLE,
            model_id=body.model_id,
        )
        return jsonify(chat_session.to_json()), 200

    @sessions_bp.route("/api/chat/sessions/<session_id>", methods=["DELETE"])
    def delete_session(session_id: str) -> Tuple[Response, int]:
        """Delete a session and its messages. Owner only."""
        identity = require_identity(token_verifier)
        chat_session = session_ledger.get_session(session_id)
        if chat_session is None:
            raise NotFoundError(message="Chat session not found")
        if not chat_session.is_owned_by(identity.id):
            raise ForbiddenError(message="Access denied")

        if not session_ledger.delete_session(session_id):
            # Deleted concurrently between the ownership check and the delete
            raise NotFoundError(message="Chat session not found")
        return jsonify({"success": True}), 200

    return sessions_bp
