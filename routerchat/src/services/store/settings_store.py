"""Key/value system settings."""

from typing import Optional

from routerchat.src.services.store.database import Database
from routerchat.src.services.store.entities import SystemSettingEntity


class SettingsStore:
    """Reads and writes system settings such as the provider credential."""

    def __init__(self, database: Database) -> None:
        self.database = database

    def get_setting(self, key: str) -> Optional[str]:
        with self.database.session_scope() as session:
            row = session.get(SystemSettingEntity, key)
            return row.value if row else None

    def set_setting(self, key: str, value: str) -> None:
        """Insert or overwrite a setting."""
        with self.database.session_scope() as session:
            row = session.get(SystemSettingEntity, key)
            if row is None:
                session.add(SystemSettingEntity(key=key, value=value))
            else:
                row.value = value

