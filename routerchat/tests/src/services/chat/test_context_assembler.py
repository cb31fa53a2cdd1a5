"""Unit tests for the ContextAssembler."""

import unittest

from routerchat.src.data_classes import MessageRole
from routerchat.src.services.chat import ContextAssembler
from routerchat.src.services.store import Database, IdentityStore, SessionLedger


class TestContextAssembler(unittest.TestCase):
    """Test cases for provider context assembly."""

    def setUp(self) -> None:
        self.database = Database("sqlite://")
        self.database.create_all()
        IdentityStore(self.database).upsert_identity("owner-1", "owner@example.com")
        self.ledger = SessionLedger(self.database)
        self.assembler = ContextAssembler(self.ledger)

    def tearDown(self) -> None:
        self.database.dispose()

    def test_without_session_only_new_message(self) -> None:
        context = self.assembler.assemble(None, "Hello")

        self.assertEqual(context, [{"role": "user", "content": "Hello"}])

    def test_history_precedes_new_message(self) -> None:
        """Test that the stored history is replayed in order before the new turn."""
        chat_session = self.ledger.create_session("owner-1", "Chat")
        self.ledger.append_message(chat_session.id, MessageRole.USER, "Hi", 1)
        self.ledger.append_message(chat_session.id, MessageRole.ASSISTANT, "Hello!", 3)

        context = self.assembler.assemble(chat_session.id, "How are you?")

        self.assertEqual(
            context,
            [
                {"role": "user", "content": "Hi"},
                {"role": "assistant", "content": "Hello!"},
                {"role": "user", "content": "How are you?"},
            ],
        )

    def test_context_reflects_latest_storage(self) -> None:
        chat_session = self.ledger.create_session("owner-1", "Chat")
        self.assertEqual(len(self.assembler.assemble(chat_session.id, "one")), 1)

        self.ledger.append_message(chat_session.id, MessageRole.USER, "one", 1)

        self.assertEqual(len(self.assembler.assemble(chat_session.id, "two")), 2)

    def test_empty_session(self) -> None:
        chat_session = self.ledger.create_session("owner-1", "Chat")

        context = self.assembler.assemble(chat_session.id, "First")

        self.assertEqual(context, [{"role": "user", "content": "First"}])


if __name__ == "__main__":
    unittest.main()
