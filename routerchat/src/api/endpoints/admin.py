"""Admin endpoints module for identity management."""

import logging
from typing import Literal, Tuple

from flask import Blueprint, Response, jsonify
from flask_pydantic import validate  # type: ignore
from pydantic import BaseModel, Field

from routerchat.src.api.middleware.exceptions import NotFoundError
from routerchat.src.api.utils.auth import require_admin
from routerchat.src.services import BaseTokenVerifier, IdentityStore

logger = logging.getLogger(__name__)


class RoleUpdateRequest(BaseModel):
    """Request model for changing the role of an identity."""

    role: Literal["user", "admin"] = Field(..., description="New role")


def init_admin_routes(
    identity_store: IdentityStore, token_verifier: BaseTokenVerifier
) -> Blueprint:
    """Initialize admin routes with the provided services.

    Args:
        identity_store: Store holding the identities.
        token_verifier: Verifier for the bearer token of each request.

    Returns:
        Blueprint: Flask blueprint with configured admin routes.
    """
    admin_bp = Blueprint("admin", __name__)

    @admin_bp.route("/api/admin/users", methods=["GET"])
    def list_users() -> Tuple[Response, int]:
        require_admin(token_verifier)
        identities = identity_store.list_identities()
        return jsonify([identity.to_json() for identity in identities]), 200

    @admin_bp.route("/api/admin/users/<identity_id>/role", methods=["PUT"])
    @validate()
    def update_user_role(identity_id: str, body: RoleUpdateRequest) -> Tuple[Response, int]:  # type: ignore
        """Grant or revoke the admin role.

        Args:
            identity_id: Identity to update
            body: Validated request body

        Returns:
            The updated identity
        """
        admin = require_admin(token_verifier)
        identity = identity_store.update_role(identity_id, body.role)
        if identity is None:
            raise NotFoundError(message="User not found")

        logger.info(f"Role of {identity_id} set to {body.role} by {admin.id}")
        return jsonify(identity.to_json()), 200

    return admin_bp
