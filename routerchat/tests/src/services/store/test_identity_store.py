"""Unit tests for the IdentityStore."""

import unittest

from sqlalchemy import func, select

from routerchat.src.data_classes import ADMIN_ROLE, USER_ROLE
from routerchat.src.services import grant_admin_role
from routerchat.src.services.store import Database, IdentityStore
from routerchat.src.services.store.entities import UserEntity


class TestIdentityStore(unittest.TestCase):
    """Test cases for identity upserts and role management."""

    def setUp(self) -> None:
        self.database = Database("sqlite://")
        self.database.create_all()
        self.store = IdentityStore(self.database)

    def tearDown(self) -> None:
        self.database.dispose()

    def _count_rows(self) -> int:
        with self.database.session_scope() as session:
            return session.scalar(select(func.count()).select_from(UserEntity)) or 0

    def test_upsert_creates_identity_with_user_role(self) -> None:
        identity = self.store.upsert_identity(
            "user-1", "a@example.com", first_name="Ada", last_name="Lovelace"
        )

        self.assertEqual(identity.id, "user-1")
        self.assertEqual(identity.role, USER_ROLE)
        self.assertFalse(identity.is_admin)
        self.assertEqual(identity.first_name, "Ada")

    def test_repeated_upsert_is_idempotent(self) -> None:
        """Test that verifying the same principal twice leaves one row."""
        first = self.store.upsert_identity("user-1", "a@example.com")
        second = self.store.upsert_identity("user-1", "a@example.com")

        self.assertEqual(first.id, second.id)
        self.assertEqual(self._count_rows(), 1)

    def test_upsert_refreshes_profile_fields(self) -> None:
        self.store.upsert_identity("user-1", "old@example.com")

        updated = self.store.upsert_identity(
            "user-1", "new@example.com", profile_image_url="https://img.test/a.png"
        )

        self.assertEqual(updated.email, "new@example.com")
        self.assertEqual(updated.profile_image_url, "https://img.test/a.png")

    def test_upsert_preserves_role(self) -> None:
        self.store.upsert_identity("user-1", "a@example.com")
        self.store.update_role("user-1", ADMIN_ROLE)

        identity = self.store.upsert_identity("user-1", "a@example.com")

        self.assertTrue(identity.is_admin)

    def test_get_identity(self) -> None:
        self.store.upsert_identity("user-1", "a@example.com")

        identity = self.store.get_identity("user-1")

        assert identity is not None
        self.assertEqual(identity.email, "a@example.com")
        self.assertIsNone(self.store.get_identity("missing"))

    def test_update_role_unknown_identity(self) -> None:
        self.assertIsNone(self.store.update_role("missing", ADMIN_ROLE))

    def test_update_role_rejects_invalid_role(self) -> None:
        with self.assertRaises(ValueError):
            self.store.update_role("user-1", "superuser")

    def test_list_identities(self) -> None:
        self.store.upsert_identity("user-1", "a@example.com")
        self.store.upsert_identity("user-2", "b@example.com")

        identities = self.store.list_identities()

        self.assertEqual({identity.id for identity in identities}, {"user-1", "user-2"})

    def test_list_identities_empty(self) -> None:
        self.assertEqual(self.store.list_identities(), [])


class TestGrantAdminRole(unittest.TestCase):
    """Test cases for the command line admin bootstrap."""

    def setUp(self) -> None:
        self.database = Database("sqlite://")
        self.database.create_all()
        self.store = IdentityStore(self.database)

    def tearDown(self) -> None:
        self.database.dispose()

    def test_promotes_existing_identity(self) -> None:
        self.store.upsert_identity("user-1", "a@example.com")

        self.assertTrue(grant_admin_role(self.store, "user-1"))

        identity = self.store.get_identity("user-1")
        assert identity is not None
        self.assertEqual(identity.role, ADMIN_ROLE)

    def test_unknown_identity(self) -> None:
        self.assertFalse(grant_admin_role(self.store, "missing"))
        self.assertEqual(self.store.list_identities(), [])


if __name__ == "__main__":
    unittest.main()
