"""HTTP error types raised by the endpoints.

Every error renders as ``{"message", "details", "status_code"}`` with the
matching status; subclasses may add response headers.
"""

from typing import Any, Dict, List, Optional, Tuple, Union

from flask import Response, jsonify
from pydantic import BaseModel, Field

ErrorDetails = Union[str, List[Dict[str, Any]]]


class ErrorResponseModel(BaseModel):
    """Body of every error response."""

    message: str = Field(..., description="Human readable error")
    details: Optional[ErrorDetails] = Field(
        None, description="Provider message or per-field validation errors"
    )
    status_code: int = Field(500, description="HTTP status code")


class APIError(Exception):
    """Base class for errors that map directly onto an HTTP response."""

    status_code = 500
    default_message = "Internal server error"
    headers: Dict[str, str] = {}

    def __init__(self, message: Optional[str] = None, details: Optional[ErrorDetails] = None):
        """Initialize the API error.

        Args:
            message: Response message, default_message when omitted
            details: Extra context passed through to the body
        """
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_response(self) -> Tuple[Response, int]:
        body = ErrorResponseModel(
            message=self.message, details=self.details, status_code=self.status_code
        )
        response = jsonify(body.model_dump())
        response.headers.update(self.headers)
        return response, self.status_code


class ValidationError(APIError):
    """Malformed or incomplete request data."""

    status_code = 400
    default_message = "Validation error"


class UnauthorizedError(APIError):
    """Missing, invalid or expired bearer token."""

    status_code = 401
    default_message = "Unauthorized"
    headers = {"WWW-Authenticate": 'Bearer realm="routerchat"'}


class ForbiddenError(APIError):
    status_code = 403
    default_message = "Access denied"


class NotFoundError(APIError):
    status_code = 404
    default_message = "Resource not found"


class ServiceError(APIError):
    """Failure inside a downstream service."""

    status_code = 500
    default_message = "Service error"
