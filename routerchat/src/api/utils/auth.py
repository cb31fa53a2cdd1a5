"""Authentication helpers for endpoints.

Endpoints that require an identity fail with 401 on a missing or invalid
token. The chat endpoint does not use these helpers: it degrades to the
guest branch instead.
"""

import logging
from typing import Optional

from flask import request

from routerchat.src.api.middleware.exceptions import (
    ForbiddenError,
    ServiceError,
    UnauthorizedError,
)
from routerchat.src.data_classes import Identity
from routerchat.src.services.auth import BaseTokenVerifier, extract_bearer_token
from routerchat.src.services.errors import IdentityServiceError

logger = logging.getLogger(__name__)


def get_bearer_token() -> Optional[str]:
    """Return the bearer token of the current request, if any."""
    return extract_bearer_token(request.headers.get("Authorization"))


def require_identity(token_verifier: BaseTokenVerifier) -> Identity:
    """Resolve the identity of the current request or fail.

    Args:
        token_verifier: Verifier used to resolve the bearer token

    Returns:
        The verified identity

    Raises:
        UnauthorizedError: If no token is sent or the token is rejected
        ServiceError: If the identity provider cannot be consulted
    """
    token = get_bearer_token()
    if not token:
        raise UnauthorizedError(message="Unauthorized - No token provided")

    try:
        identity = token_verifier.verify(token)
    except IdentityServiceError:
        raise ServiceError(message="Authentication service error")

    if identity is None:
        raise UnauthorizedError(message="Unauthorized - Invalid token")
    return identity


def require_admin(token_verifier: BaseTokenVerifier) -> Identity:
    """Resolve the identity of the current request and require the admin role.

    Raises:
        UnauthorizedError: If the caller is not authenticated
        ForbiddenError: If the caller is not an admin
    """
    identity = require_identity(token_verifier)
    if not identity.is_admin:
        logger.warning(f"Non-admin identity {identity.id} attempted an admin action")
        raise ForbiddenError(message="Admin access required")
    return identity
