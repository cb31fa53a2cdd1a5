"""Bearer token verification against the identity provider."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import requests

from routerchat.conf.config import Config
from routerchat.src.data_classes import Identity
from routerchat.src.services.errors import IdentityServiceError
from routerchat.src.services.store import IdentityStore

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def extract_bearer_token(authorization_header: Optional[str]) -> Optional[str]:
    """Extract the token from an ``Authorization: Bearer <token>`` header value.

    Args:
        authorization_header: Raw header value, or None if the header is absent

    Returns:
        The token, or None if the header is absent, not a bearer header or empty
    """
    if not authorization_header or not authorization_header.startswith(BEARER_PREFIX):
        return None
    token = authorization_header[len(BEARER_PREFIX):].strip()
    return token or None


class BaseTokenVerifier(ABC):
    """Base class for token verifiers."""

    @abstractmethod
    def verify(self, bearer_token: Optional[str]) -> Optional[Identity]:
        """Resolve a bearer token to a stored identity.

        Args:
            bearer_token: Opaque token, or None when the caller sent none

        Returns:
            The identity, or None when the token is absent, invalid or expired

        Raises:
            IdentityServiceError: If the identity provider cannot be consulted
        """


class SupabaseTokenVerifier(BaseTokenVerifier):
    """Verifies tokens through the Supabase auth ``/user`` endpoint.

    Every successful verification upserts the identity locally, so the same
    token verified twice yields the same identity row.
    """

    def __init__(
        self,
        identity_store: IdentityStore,
        supabase_url: Optional[str] = Config.SUPABASE_URL,
        service_key: Optional[str] = Config.SUPABASE_SERVICE_ROLE_KEY,
        timeout: float = Config.IDENTITY_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        """Initialize the verifier.

        Args:
            identity_store: Store receiving the identity upserts
            supabase_url: Base URL of the Supabase project
            service_key: Service role key sent as ``apikey``
            timeout: Request timeout in seconds
            session: Optional pre-configured requests session
        """
        if not supabase_url:
            raise ValueError(
                "Supabase URL not found. Please set the SUPABASE_URL environment variable."
            )
        if not service_key:
            raise ValueError(
                "Supabase service key not found. Please set the "
                "SUPABASE_SERVICE_ROLE_KEY environment variable."
            )
        self.identity_store = identity_store
        self.user_url = f"{supabase_url.rstrip('/')}/auth/v1/user"
        self.service_key = service_key
        self.timeout = timeout
        self.session = session or requests.Session()

    def verify(self, bearer_token: Optional[str]) -> Optional[Identity]:
        """Resolve a bearer token to a stored identity.

        Args:
            bearer_token: Opaque token, or None when the caller sent none

        Returns:
            The upserted identity, or None when the token is absent, invalid or expired

        Raises:
            IdentityServiceError: If the identity provider is unreachable or fails
        """
        if not bearer_token:
            return None

        principal = self._fetch_principal(bearer_token)
        if principal is None:
            return None

        metadata: Dict[str, Any] = principal.get("user_metadata") or {}
        return self.identity_store.upsert_identity(
            identity_id=str(principal["id"]),
            email=principal.get("email") or "",
            first_name=metadata.get("first_name") or None,
            last_name=metadata.get("last_name") or None,
            profile_image_url=metadata.get("avatar_url") or None,
        )

    def _fetch_principal(self, bearer_token: str) -> Optional[Dict[str, Any]]:
        headers = {
            "apikey": self.service_key,
            "Authorization": f"Bearer {bearer_token}",
        }
        try:
            response = self.session.get(self.user_url, headers=headers, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"Identity provider unreachable: {str(e)}")
            raise IdentityServiceError()

        if response.status_code in (400, 401, 403, 404):
            logger.info(f"Token rejected by identity provider ({response.status_code})")
            return None
        if not response.ok:
            logger.error(f"Identity provider error: {response.status_code}")
            raise IdentityServiceError()

        try:
            principal = response.json()
        except ValueError:
            logger.error("Identity provider returned a non-JSON body")
            raise IdentityServiceError()

        if not isinstance(principal, dict) or not principal.get("id"):
            logger.warning("Identity provider returned a principal without an id")
            return None
        return principal
