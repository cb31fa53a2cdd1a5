"""Model catalog endpoints module.

Listing is public; creating, editing and deleting models is admin only.
"""

import logging
from typing import Optional, Tuple

from flask import Blueprint, Response, jsonify
from flask_pydantic import validate  # type: ignore
from pydantic import BaseModel, ConfigDict, Field

from routerchat.src.api.middleware.exceptions import NotFoundError, ValidationError
from routerchat.src.api.utils.auth import require_admin
from routerchat.src.services import BaseTokenVerifier, CatalogStore

logger = logging.getLogger(__name__)


class ModelListQuery(BaseModel):
    """Query parameters for listing catalog models."""

    active: bool = Field(False, description="Only list active models")


class CreateModelRequest(BaseModel):
    """Request model for adding a catalog entry."""

    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    name: str = Field(..., min_length=1, description="Display name")
    provider: str = Field(..., min_length=1, description="Vendor label")
    provider_model_id: str = Field(
        ..., alias="modelId", min_length=1, description="Provider-routable model string"
    )
    description: Optional[str] = Field(None, description="Free text")
    is_active: bool = Field(True, alias="isActive", description="Offered to new chats")


class UpdateModelRequest(BaseModel):
    """Request model for a partial catalog entry update. Omitted fields are kept."""

    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    name: Optional[str] = Field(None, min_length=1)
    provider: Optional[str] = Field(None, min_length=1)
    provider_model_id: Optional[str] = Field(None, alias="modelId", min_length=1)
    description: Optional[str] = None
    is_active: Optional[bool] = Field(None, alias="isActive")


def init_model_routes(
    catalog_store: CatalogStore, token_verifier: BaseTokenVerifier
) -> Blueprint:
    """Initialize model catalog routes with the provided services.

    Args:
        catalog_store: Store holding the model catalog.
        token_verifier: Verifier used for the admin-only routes.

    Returns:
        Blueprint: Flask blueprint with configured model routes.
    """
    models_bp = Blueprint("models", __name__)

    @models_bp.route("/api/models", methods=["GET"])
    @validate()
    def list_models(query: ModelListQuery) -> Tuple[Response, int]:  # type: ignore
        """List catalog models ordered by name.

        Args:
            query: Validated query parameters

        Returns:
            JSON array of models
        """
        models = catalog_store.list_models(active_only=query.active)
        return jsonify([model.to_json() for model in models]), 200

    @models_bp.route("/api/models", methods=["POST"])
    @validate()
    def create_model(body: CreateModelRequest) -> Tuple[Response, int]:  # type: ignore
        """Add a model to the catalog."""
        identity = require_admin(token_verifier)
        model = catalog_store.create_model(
            name=body.name,
            provider=body.provider,
            provider_model_id=body.provider_model_id,
            description=body.description,
            is_active=body.is_active,
        )
        logger.info(f"Model {model.id} ({model.provider_model_id}) created by {identity.id}")
        return jsonify(model.to_json()), 201

    @models_bp.route("/api/models/<model_id>", methods=["PUT"])
    @validate()
    def update_model(model_id: str, body: UpdateModelRequest) -> Tuple[Response, int]:  # type: ignore
        """Update the fields present in the body; 404 for an unknown model."""
        require_admin(token_verifier)
        changes = {
            field_name: value
            for field_name, value in body.model_dump(exclude_unset=True).items()
            # Only the description may be cleared
            if value is not None or field_name == "description"
        }
        if not changes:
            raise ValidationError(message="No fields to update")

        model = catalog_store.update_model(model_id, **changes)
        if model is None:
            raise NotFoundError(message="Model not found")
        return jsonify(model.to_json()), 200

    @models_bp.route("/api/models/<model_id>", methods=["DELETE"])
    def delete_model(model_id: str) -> Tuple[Response, int]:
        """Delete a catalog model. Sessions using it keep existing without a model."""
        identity = require_admin(token_verifier)
        if not catalog_store.delete_model(model_id):
            raise NotFoundError(message="Model not found")

        logger.info(f"Model {model_id} deleted by {identity.id}")
        return jsonify({"success": True}), 200

    return models_bp
