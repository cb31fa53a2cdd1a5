"""Chat endpoints module.

This module provides the Flask route that sends a user message to the
completion provider. Authenticated callers get their exchange persisted;
guests (explicitly flagged or without a valid token) do not.
"""

import logging
from typing import Optional, Tuple

from flask import Blueprint, Response, jsonify
from flask_pydantic import validate  # type: ignore
from pydantic import BaseModel, ConfigDict, Field

from routerchat.src.api.utils.auth import get_bearer_token
from routerchat.src.data_classes import ChatResult
from routerchat.src.services import ChatOrchestrator

logger = logging.getLogger(__name__)


# Schema definitions
class ChatRequest(BaseModel):
    """Chat request model for validation."""

    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    message: str = Field(..., min_length=1, description="User's message")
    model_id: str = Field(
        ..., alias="modelId", min_length=1, description="Catalog id of the model"
    )
    session_id: Optional[str] = Field(
        None, alias="sessionId", description="Existing session to continue"
    )
    is_guest: Optional[bool] = Field(
        None, alias="isGuest", description="Whether to skip persistence; null counts as false"
    )


class ChatResponseModel(BaseModel):
    """Chat response model."""

    model_config = ConfigDict(populate_by_name=True)

    content: str = Field(..., description="Generated response text")
    session_id: Optional[str] = Field(
        None, alias="sessionId", description="Persisted session id, null for guests"
    )
    token_count: int = Field(0, alias="tokenCount", description="Tokens reported by the provider")

    @classmethod
    def from_result(cls, result: ChatResult) -> "ChatResponseModel":
        return cls(
            content=result.content,
            session_id=result.session_id,
            token_count=result.token_count,
        )


def init_chat_routes(chat_orchestrator: ChatOrchestrator) -> Blueprint:
    """Initialize chat routes with the provided services.

    Args:
        chat_orchestrator: Orchestrator running the chat pipeline.

    Returns:
        Blueprint: Flask blueprint with configured chat routes.
    """
    chat_bp = Blueprint("chat", __name__)

    @chat_bp.route("/api/chat/message", methods=["POST"])
    @validate()
    def send_message(body: ChatRequest) -> Tuple[Response, int]:  # type: ignore
        """Send a message to the selected model.

        Args:
            body: Validated request body

        Returns:
            Response with the reply, session id and token count
        """
        result = chat_orchestrator.send_message(
            message=body.message,
            model_id=body.model_id,
            session_id=body.session_id,
            is_guest=bool(body.is_guest),
            bearer_token=get_bearer_token(),
        )

        response = ChatResponseModel.from_result(result)
        return jsonify(response.model_dump(by_alias=True)), 200

    return chat_bp
