"""Authentication endpoints module."""

from typing import Tuple

from flask import Blueprint, Response, jsonify

from routerchat.src.api.utils.auth import require_identity
from routerchat.src.services import BaseTokenVerifier


def init_auth_routes(token_verifier: BaseTokenVerifier) -> Blueprint:
    """Initialize authentication routes.

    Args:
        token_verifier: Verifier for the bearer token of each request.

    Returns:
        Blueprint: Flask blueprint with configured auth routes.
    """
    auth_bp = Blueprint("auth", __name__)

    @auth_bp.route("/api/auth/user", methods=["GET"])
    def get_user() -> Tuple[Response, int]:
        """Return the stored profile of the authenticated caller."""
        identity = require_identity(token_verifier)
        return jsonify(identity.to_json()), 200

    return auth_bp
