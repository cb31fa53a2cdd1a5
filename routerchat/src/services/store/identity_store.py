"""Persistence of verified identities."""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from routerchat.src.data_classes import ADMIN_ROLE, USER_ROLE, Identity
from routerchat.src.services.store.database import Database
from routerchat.src.services.store.entities import UserEntity, utc_now

logger = logging.getLogger(__name__)


class IdentityStore:
    """Reads and upserts identity rows.

    Identities are created on first sight and their profile fields refreshed
    on every later verification. The role column is never touched by an upsert.
    """

    def __init__(self, database: Database) -> None:
        self.database = database

    def get_identity(self, identity_id: str) -> Optional[Identity]:
        with self.database.session_scope() as session:
            row = session.get(UserEntity, identity_id)
            return row.to_identity() if row else None

    def list_identities(self) -> List[Identity]:
        """List all identities, newest first."""
        with self.database.session_scope() as session:
            query = select(UserEntity).order_by(UserEntity.created_at.desc())
            return [row.to_identity() for row in session.scalars(query)]

    def upsert_identity(
        self,
        identity_id: str,
        email: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        profile_image_url: Optional[str] = None,
    ) -> Identity:
        """Create the identity if absent, otherwise refresh its profile fields.

        Repeating the call with the same payload leaves exactly one row.

        Args:
            identity_id: Identifier issued by the identity provider
            email: Current email address
            first_name: Optional first name
            last_name: Optional last name
            profile_image_url: Optional avatar URL

        Returns:
            The stored identity
        """
        try:
            return self._upsert(identity_id, email, first_name, last_name, profile_image_url)
        except IntegrityError:
            # A concurrent request inserted the same id first; the row exists now
            logger.debug(f"Concurrent insert for identity {identity_id}, retrying as update")
            return self._upsert(identity_id, email, first_name, last_name, profile_image_url)

    def _upsert(
        self,
        identity_id: str,
        email: str,
        first_name: Optional[str],
        last_name: Optional[str],
        profile_image_url: Optional[str],
    ) -> Identity:
        with self.database.session_scope() as session:
            row = session.get(UserEntity, identity_id)
            if row is None:
                row = UserEntity(
                    id=identity_id,
                    email=email,
                    first_name=first_name,
                    last_name=last_name,
                    profile_image_url=profile_image_url,
                    role=USER_ROLE,
                )
                session.add(row)
                logger.info(f"Created identity {identity_id}")
            else:
                row.email = email
                row.first_name = first_name
                row.last_name = last_name
                row.profile_image_url = profile_image_url
                row.updated_at = utc_now()
            session.flush()
            return row.to_identity()

    def update_role(self, identity_id: str, role: str) -> Optional[Identity]:
        """Change the role of an identity.

        Args:
            identity_id: Identity to update
            role: "user" or "admin"

        Returns:
            The updated identity, or None if it does not exist

        Raises:
            ValueError: If the role is not recognised
        """
        if role not in (USER_ROLE, ADMIN_ROLE):
            raise ValueError(f"Invalid role: {role}")
        with self.database.session_scope() as session:
            row = session.get(UserEntity, identity_id)
            if row is None:
                return None
            row.role = role
            row.updated_at = utc_now()
            session.flush()
            return row.to_identity()
