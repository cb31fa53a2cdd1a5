"""Error handling middleware for API requests.

This module turns every failure into a single JSON error response.
"""

import logging
import traceback
from typing import Any, Dict, List, Tuple, Type

from flask import Flask, Response, current_app, jsonify
from flask_pydantic.exceptions import ValidationError as RequestValidationError  # type: ignore
from pydantic import ValidationError as PydanticValidationError
from werkzeug.exceptions import HTTPException

from routerchat.src.api.middleware.exceptions import (
    APIError,
    ErrorResponseModel,
    ForbiddenError,
    NotFoundError,
    ServiceError,
    ValidationError,
)
from routerchat.src.services.errors import (
    AccessDeniedError,
    ChatServiceError,
    IdentityServiceError,
    MisconfiguredProviderError,
    ModelNotFoundError,
    ProviderError,
    SessionNotFoundError,
)

logger = logging.getLogger(__name__)

# Service errors and the API errors they are reported as
SERVICE_ERROR_MAPPING: Dict[Type[ChatServiceError], Type[APIError]] = {
    ModelNotFoundError: NotFoundError,
    SessionNotFoundError: NotFoundError,
    AccessDeniedError: ForbiddenError,
    MisconfiguredProviderError: ServiceError,
    ProviderError: ServiceError,
    IdentityServiceError: ServiceError,
}


def to_api_error(error: ChatServiceError) -> APIError:
    """Translate a service-layer error into the API error reported to the client.

    Args:
        error: Error raised by a service

    Returns:
        APIError carrying the status code of the error taxonomy
    """
    api_error_class = ServiceError
    for service_error_class, mapped in SERVICE_ERROR_MAPPING.items():
        if isinstance(error, service_error_class):
            api_error_class = mapped
            break

    if isinstance(error, ProviderError):
        return api_error_class(message="Failed to process message", details=error.message)
    return api_error_class(message=error.message)


def _validation_response(errors: List[Dict[str, Any]]) -> Tuple[Response, int]:
    """Report validation errors by location and message, without the rejected input."""
    details = [
        {"loc": [str(part) for part in e.get("loc", ())], "msg": e.get("msg", "")}
        for e in errors
    ]
    logger.warning(f"Validation error: {details}")
    return ValidationError(message="Validation error", details=details).to_response()


def register_error_handlers(app: Flask) -> None:
    """Register error handlers with the Flask application.

    Args:
        app: Flask application
    """

    @app.errorhandler(PydanticValidationError)
    def handle_pydantic_validation_error(error: PydanticValidationError) -> Tuple[Response, int]:  # type: ignore
        """Handle Pydantic validation errors.

        Args:
            error: Validation error from Pydantic

        Returns:
            JSON response with error details
        """
        return _validation_response(error.errors())

    @app.errorhandler(RequestValidationError)
    def handle_request_validation_error(error: RequestValidationError) -> Tuple[Response, int]:  # type: ignore
        """Handle request body and query validation failures raised by flask_pydantic."""
        errors: List[Dict[str, Any]] = []
        for location in ("body_params", "query_params", "path_params", "form_params"):
            errors.extend(getattr(error, location, None) or [])
        return _validation_response(errors)

    @app.errorhandler(APIError)
    def handle_api_error(error: APIError) -> Tuple[Response, int]:  # type: ignore
        """Handle custom API errors.

        Args:
            error: Custom API error

        Returns:
            JSON response with error details
        """
        logger.error(f"API error ({error.__class__.__name__}): {error.message}")
        if hasattr(error, "details") and error.details:
            logger.error(f"Error details: {error.details}")

        return error.to_response()

    @app.errorhandler(ChatServiceError)
    def handle_service_error(error: ChatServiceError) -> Tuple[Response, int]:  # type: ignore
        """Handle errors raised by the service layer.

        Args:
            error: Service-layer error

        Returns:
            JSON response with the mapped status code
        """
        api_error = to_api_error(error)
        logger.error(
            f"Service error ({error.__class__.__name__}) reported as {api_error.status_code}"
        )
        return api_error.to_response()

    @app.errorhandler(HTTPException)
    def handle_http_exception(error: HTTPException) -> Tuple[Response, int]:  # type: ignore
        """Report routing and method errors (404, 405, ...) with their own status."""
        status_code = error.code or 500
        response = ErrorResponseModel(
            message=error.name, details=error.description, status_code=status_code
        )
        return jsonify(response.model_dump()), status_code

    @app.errorhandler(Exception)
    def handle_exception(error: Exception) -> Tuple[Response, int]:  # type: ignore
        """Handle uncaught exceptions.

        Args:
            error: Exception that was raised

        Returns:
            JSON response with error message
        """
        logger.error(f"Unhandled exception: {str(error)}")
        logger.error(traceback.format_exc())

        # Only include detailed error info in debug mode
        details = str(error) if current_app.debug else None

        response = ErrorResponseModel(
            message="Internal server error", details=details, status_code=500
        )
        return jsonify(response.model_dump()), 500
