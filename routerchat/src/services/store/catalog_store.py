"""Model catalog access: reads, admin edits and the set-null aware model removal."""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, select, update

from routerchat.src.data_classes import CatalogModel
from routerchat.src.services.store.database import Database
from routerchat.src.services.store.entities import AiModelEntity, ChatSessionEntity, utc_now

logger = logging.getLogger(__name__)

# Catalog field names and the entity columns they are stored in
UPDATABLE_MODEL_FIELDS: Dict[str, str] = {
    "name": "name",
    "provider": "provider",
    "provider_model_id": "model_id",
    "description": "description",
    "is_active": "is_active",
}


class CatalogStore:
    """Model catalog access."""

    def __init__(self, database: Database) -> None:
        self.database = database

    def get_model(self, model_id: str) -> Optional[CatalogModel]:
        """Look up a catalog entry by its internal id, active or not."""
        with self.database.session_scope() as session:
            row = session.get(AiModelEntity, model_id)
            return row.to_catalog_model() if row else None

    def list_models(self, active_only: bool = False) -> List[CatalogModel]:
        """List catalog entries ordered by name.

        Args:
            active_only: Only return models flagged as active
        """
        with self.database.session_scope() as session:
            query = select(AiModelEntity).order_by(AiModelEntity.name)
            if active_only:
                query = query.where(AiModelEntity.is_active.is_(True))
            return [row.to_catalog_model() for row in session.scalars(query)]

    def create_model(
        self,
        name: str,
        provider: str,
        provider_model_id: str,
        description: Optional[str] = None,
        is_active: bool = True,
        model_id: Optional[str] = None,
    ) -> CatalogModel:
        """Insert a catalog entry."""
        with self.database.session_scope() as session:
            row = AiModelEntity(
                name=name,
                provider=provider,
                model_id=provider_model_id,
                description=description,
                is_active=is_active,
            )
            if model_id:
                row.id = model_id
            session.add(row)
            session.flush()
            return row.to_catalog_model()

    def update_model(self, model_id: str, **changes: Any) -> Optional[CatalogModel]:
        """Apply a partial update to a catalog entry.

        Args:
            model_id: Entry to update
            **changes: Any of name, provider, provider_model_id, description, is_active

        Returns:
            The updated entry, or None if it does not exist

        Raises:
            ValueError: If an unknown field is passed
        """
        unknown = set(changes) - set(UPDATABLE_MODEL_FIELDS)
        if unknown:
            raise ValueError(f"Unknown model fields: {sorted(unknown)}")

        with self.database.session_scope() as session:
            row = session.get(AiModelEntity, model_id)
            if row is None:
                return None
            for field_name, value in changes.items():
                setattr(row, UPDATABLE_MODEL_FIELDS[field_name], value)
            row.updated_at = utc_now()
            session.flush()
            logger.info(f"Updated model {model_id}: {sorted(changes)}")
            return row.to_catalog_model()

    def delete_model(self, model_id: str) -> bool:
        """Delete a catalog entry, detaching the sessions that reference it.

        Sessions keep existing with ``model_id`` set to None; their messages
        are untouched.

        Returns:
            True if a row was deleted, False if the model did not exist
        """
        with self.database.session_scope() as session:
            detached = session.execute(
                update(ChatSessionEntity)
                .where(ChatSessionEntity.model_id == model_id)
                .values(model_id=None)
            )
            result = session.execute(
                delete(AiModelEntity).where(AiModelEntity.id == model_id)
            )
            deleted = result.rowcount > 0
        if deleted:
            logger.info(
                f"Deleted model {model_id}, detached {detached.rowcount} session(s)"
            )
        return deleted
