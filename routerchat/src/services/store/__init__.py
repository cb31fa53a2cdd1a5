"""Storage services package.

This package provides storage-related services including:
- Database: SQLAlchemy engine and transactional scopes
- SessionLedger: append-only persistence of chat sessions and messages
- IdentityStore: upserted identities from the identity provider
- CatalogStore: read access to the model catalog
- SettingsStore: key/value system settings (provider credential)

All mutation goes through the database's native row-level consistency;
no in-process locking is used.
"""

from .catalog_store import CatalogStore
from .database import Database
from .identity_store import IdentityStore
from .session_ledger import SessionLedger, derive_session_title
from .settings_store import SettingsStore

__all__ = [
    "Database",
    "SessionLedger",
    "IdentityStore",
    "CatalogStore",
    "SettingsStore",
    "derive_session_title",
]
