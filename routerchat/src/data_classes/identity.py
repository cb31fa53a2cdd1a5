"""Data class for a verified caller identity."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

ADMIN_ROLE = "admin"
USER_ROLE = "user"


@dataclass
class Identity:
    """A user identity resolved from a bearer token and stored locally.

    Attributes:
        id: Stable identifier issued by the identity provider
        email: Email address of the principal
        role: Either "user" or "admin"; managed locally, never by the provider
        first_name: Optional first name from the provider metadata
        last_name: Optional last name from the provider metadata
        profile_image_url: Optional avatar URL from the provider metadata
        created_at: When the identity was first seen
        updated_at: When the profile fields were last refreshed
    """

    id: str
    email: str
    role: str = USER_ROLE
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE

    def to_json(self) -> Dict[str, Any]:
        """Convert the identity to a JSON-compatible dictionary."""
        return {
            "id": self.id,
            "email": self.email,
            "role": self.role,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "profileImageUrl": self.profile_image_url,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
