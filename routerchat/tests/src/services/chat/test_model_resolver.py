"""Unit tests for the ModelResolver."""

import unittest
from unittest.mock import Mock

from sqlalchemy.exc import OperationalError

from routerchat.src.services.chat import ModelResolver
from routerchat.src.services.errors import MisconfiguredProviderError, ModelNotFoundError
from routerchat.src.services.store import CatalogStore, Database, SettingsStore


class TestModelResolver(unittest.TestCase):
    """Test cases for model id resolution."""

    def setUp(self) -> None:
        self.database = Database("sqlite://")
        self.database.create_all()
        self.catalog = CatalogStore(self.database)
        self.settings = SettingsStore(self.database)
        self.resolver = ModelResolver(self.catalog, self.settings, "openrouter_api_key")

        self.model = self.catalog.create_model(
            name="GPT-4o", provider="openai", provider_model_id="openai/gpt-4o"
        )

    def tearDown(self) -> None:
        self.database.dispose()

    def test_resolve_known_model(self) -> None:
        self.settings.set_setting("openrouter_api_key", "sk-test")

        resolved = self.resolver.resolve(self.model.id)

        self.assertEqual(resolved.model_id, self.model.id)
        self.assertEqual(resolved.provider_model_id, "openai/gpt-4o")
        self.assertEqual(resolved.api_key, "sk-test")
        self.assertNotIn("sk-test", repr(resolved))

    def test_resolve_inactive_model(self) -> None:
        self.settings.set_setting("openrouter_api_key", "sk-test")
        inactive = self.catalog.create_model(
            name="Old", provider="x", provider_model_id="x/old", is_active=False
        )

        self.assertEqual(self.resolver.resolve(inactive.id).provider_model_id, "x/old")

    def test_resolve_unknown_model(self) -> None:
        self.settings.set_setting("openrouter_api_key", "sk-test")

        with self.assertRaises(ModelNotFoundError):
            self.resolver.resolve("missing")

    def test_resolve_without_credential(self) -> None:
        with self.assertRaises(MisconfiguredProviderError):
            self.resolver.resolve(self.model.id)

    def test_resolve_with_empty_credential(self) -> None:
        self.settings.set_setting("openrouter_api_key", "")

        with self.assertRaises(MisconfiguredProviderError):
            self.resolver.resolve(self.model.id)

    def test_catalog_unreachable_is_reported_as_not_found(self) -> None:
        mock_catalog = Mock(spec=CatalogStore)
        mock_catalog.get_model.side_effect = OperationalError("SELECT", {}, Exception("gone"))
        resolver = ModelResolver(mock_catalog, self.settings)

        with self.assertRaises(ModelNotFoundError):
            resolver.resolve(self.model.id)

    def test_settings_unreachable_is_reported_as_misconfigured(self) -> None:
        mock_settings = Mock(spec=SettingsStore)
        mock_settings.get_setting.side_effect = OperationalError(
            "SELECT", {}, Exception("gone")
        )
        resolver = ModelResolver(self.catalog, mock_settings)

        with self.assertRaises(MisconfiguredProviderError):
            resolver.resolve(self.model.id)


if __name__ == "__main__":
    unittest.main()
