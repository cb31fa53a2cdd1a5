"""Unit tests for the ChatOrchestrator.

The stores run on an in-memory SQLite database; the token verifier and the
provider gateway are mocked.
"""

import unittest
from typing import Optional
from unittest.mock import Mock

from routerchat.src.data_classes import (
    ChatState,
    Identity,
    MessageRole,
    ProviderCompletion,
    RequestBranch,
)
from routerchat.src.services.auth import BaseTokenVerifier
from routerchat.src.services.chat import (
    ChatOrchestrator,
    ChatRequestState,
    ContextAssembler,
    ModelResolver,
    estimate_token_count,
)
from routerchat.src.services.errors import (
    AccessDeniedError,
    IdentityServiceError,
    MisconfiguredProviderError,
    ModelNotFoundError,
    ProviderError,
    SessionNotFoundError,
)
from routerchat.src.services.llm import BaseProviderGateway
from routerchat.src.services.store import (
    CatalogStore,
    Database,
    IdentityStore,
    SessionLedger,
    SettingsStore,
)

OWNER = Identity(id="owner-1", email="owner@example.com")
STRANGER = Identity(id="owner-2", email="stranger@example.com")


class TestEstimateTokenCount(unittest.TestCase):
    def test_rounds_up(self) -> None:
        self.assertEqual(estimate_token_count(""), 0)
        self.assertEqual(estimate_token_count("abcd"), 1)
        self.assertEqual(estimate_token_count("abcde"), 2)


class TestChatRequestState(unittest.TestCase):
    def test_branch_is_decided_once(self) -> None:
        state = ChatRequestState()
        state.identified(RequestBranch.GUEST, None)

        self.assertEqual(state.state, ChatState.IDENTIFIED)
        with self.assertRaises(RuntimeError):
            state.identified(RequestBranch.AUTHENTICATED, OWNER)
        self.assertEqual(state.branch, RequestBranch.GUEST)

    def test_authenticated_branch_requires_identity(self) -> None:
        state = ChatRequestState()

        with self.assertRaises(ValueError):
            state.identified(RequestBranch.AUTHENTICATED, None)

    def test_require_identity_and_session(self) -> None:
        state = ChatRequestState()
        with self.assertRaises(RuntimeError):
            state.require_identity()
        with self.assertRaises(RuntimeError):
            state.require_session_id()

        state.identified(RequestBranch.AUTHENTICATED, OWNER)
        state.session_id = "session-1"

        self.assertEqual(state.require_identity(), OWNER)
        self.assertEqual(state.require_session_id(), "session-1")


class TestChatOrchestrator(unittest.TestCase):
    """Test cases for the chat request path."""

    def setUp(self) -> None:
        """Set up stores on an in-memory database and mocked external services."""
        self.database = Database("sqlite://")
        self.database.create_all()

        identities = IdentityStore(self.database)
        identities.upsert_identity(OWNER.id, OWNER.email)
        identities.upsert_identity(STRANGER.id, STRANGER.email)

        self.catalog = CatalogStore(self.database)
        self.settings = SettingsStore(self.database)
        self.ledger = SessionLedger(self.database)
        self.settings.set_setting("openrouter_api_key", "sk-test")
        self.model = self.catalog.create_model(
            name="GPT-4o", provider="openai", provider_model_id="openai/gpt-4o"
        )

        self.mock_verifier = Mock(spec=BaseTokenVerifier)
        self.mock_verifier.verify.side_effect = self._verify
        self.mock_gateway = Mock(spec=BaseProviderGateway)
        self.mock_gateway.complete.return_value = ProviderCompletion(
            content="Hi there", token_usage=42, model="openai/gpt-4o"
        )

        self.orchestrator = ChatOrchestrator(
            token_verifier=self.mock_verifier,
            model_resolver=ModelResolver(self.catalog, self.settings, "openrouter_api_key"),
            context_assembler=ContextAssembler(self.ledger),
            provider_gateway=self.mock_gateway,
            session_ledger=self.ledger,
        )

    def tearDown(self) -> None:
        self.database.dispose()

    @staticmethod
    def _verify(token: Optional[str]) -> Optional[Identity]:
        return {"owner-token": OWNER, "stranger-token": STRANGER}.get(token or "")

    def _sent_messages(self):  # type: ignore
        return self.mock_gateway.complete.call_args[0][1]

    # Guest branch
    def test_guest_request_is_not_persisted(self) -> None:
        """Test that an explicit guest gets a reply and nothing is written."""
        result = self.orchestrator.send_message(
            message="Hello", model_id=self.model.id, is_guest=True
        )

        self.assertEqual(result.content, "Hi there")
        self.assertEqual(result.token_count, 42)
        self.assertIsNone(result.session_id)
        self.assertEqual(result.branch, RequestBranch.GUEST)
        self.assertEqual(self._sent_messages(), [{"role": "user", "content": "Hello"}])
        self.mock_verifier.verify.assert_not_called()
        self.assertEqual(self.ledger.list_sessions(OWNER.id), [])

    def test_guest_flag_wins_over_valid_token(self) -> None:
        result = self.orchestrator.send_message(
            message="Hello",
            model_id=self.model.id,
            is_guest=True,
            bearer_token="owner-token",
        )

        self.assertIsNone(result.session_id)
        self.assertEqual(self.ledger.list_sessions(OWNER.id), [])

    def test_invalid_token_degrades_to_guest(self) -> None:
        result = self.orchestrator.send_message(
            message="Hello", model_id=self.model.id, bearer_token="expired-token"
        )

        self.assertEqual(result.branch, RequestBranch.GUEST)
        self.assertIsNone(result.session_id)

    def test_missing_token_degrades_to_guest(self) -> None:
        result = self.orchestrator.send_message(message="Hello", model_id=self.model.id)

        self.assertEqual(result.branch, RequestBranch.GUEST)
        self.mock_verifier.verify.assert_not_called()

    def test_identity_service_failure_degrades_to_guest(self) -> None:
        self.mock_verifier.verify.side_effect = IdentityServiceError()

        result = self.orchestrator.send_message(
            message="Hello", model_id=self.model.id, bearer_token="owner-token"
        )

        self.assertEqual(result.branch, RequestBranch.GUEST)
        self.assertIsNone(result.session_id)

    def test_guest_session_id_is_ignored(self) -> None:
        chat_session = self.ledger.create_session(OWNER.id, "Chat", self.model.id)
        self.ledger.append_message(chat_session.id, MessageRole.USER, "secret", 2)

        result = self.orchestrator.send_message(
            message="Hello",
            model_id=self.model.id,
            session_id=chat_session.id,
            is_guest=True,
        )

        self.assertIsNone(result.session_id)
        self.assertEqual(self._sent_messages(), [{"role": "user", "content": "Hello"}])
        self.assertEqual(len(self.ledger.get_messages(chat_session.id)), 1)

    # Authenticated branch
    def test_first_message_creates_session(self) -> None:
        """Test that an authenticated first message persists both turns."""
        message = "Tell me about the history of the Roman Empire in detail please"

        result = self.orchestrator.send_message(
            message=message, model_id=self.model.id, bearer_token="owner-token"
        )

        self.assertEqual(result.branch, RequestBranch.AUTHENTICATED)
        assert result.session_id is not None
        chat_session = self.ledger.get_session(result.session_id)
        assert chat_session is not None
        self.assertEqual(chat_session.owner_id, OWNER.id)
        self.assertEqual(chat_session.title, message[:50] + "...")
        self.assertEqual(chat_session.model_id, self.model.id)

        messages = self.ledger.get_messages(result.session_id)
        self.assertEqual([m.role for m in messages], [MessageRole.USER, MessageRole.ASSISTANT])
        self.assertEqual(messages[0].content, message)
        self.assertEqual(messages[0].token_count, estimate_token_count(message))
        self.assertEqual(messages[1].content, "Hi there")
        self.assertEqual(messages[1].token_count, 42)

    def test_follow_up_sends_full_history(self) -> None:
        """Test that a follow-up message replays the stored conversation."""
        first = self.orchestrator.send_message(
            message="Hi", model_id=self.model.id, bearer_token="owner-token"
        )
        self.mock_gateway.complete.return_value = ProviderCompletion(
            content="Fine, thanks", token_usage=10, model="openai/gpt-4o"
        )

        second = self.orchestrator.send_message(
            message="How are you?",
            model_id=self.model.id,
            session_id=first.session_id,
            bearer_token="owner-token",
        )

        self.assertEqual(second.session_id, first.session_id)
        self.assertEqual(
            self._sent_messages(),
            [
                {"role": "user", "content": "Hi"},
                {"role": "assistant", "content": "Hi there"},
                {"role": "user", "content": "How are you?"},
            ],
        )
        assert second.session_id is not None
        self.assertEqual(len(self.ledger.get_messages(second.session_id)), 4)

    def test_follow_up_updates_session_model(self) -> None:
        other = self.catalog.create_model(
            name="Claude", provider="anthropic", provider_model_id="anthropic/claude-3"
        )
        first = self.orchestrator.send_message(
            message="Hi", model_id=self.model.id, bearer_token="owner-token"
        )

        self.orchestrator.send_message(
            message="Again",
            model_id=other.id,
            session_id=first.session_id,
            bearer_token="owner-token",
        )

        assert first.session_id is not None
        chat_session = self.ledger.get_session(first.session_id)
        assert chat_session is not None
        self.assertEqual(chat_session.model_id, other.id)
        self.assertEqual(self.mock_gateway.complete.call_args[0][0], "anthropic/claude-3")

    def test_unknown_session_is_rejected(self) -> None:
        with self.assertRaises(SessionNotFoundError):
            self.orchestrator.send_message(
                message="Hi",
                model_id=self.model.id,
                session_id="missing",
                bearer_token="owner-token",
            )
        self.mock_gateway.complete.assert_not_called()

    def test_foreign_session_is_rejected(self) -> None:
        """Test that a caller cannot post to a session they do not own."""
        chat_session = self.ledger.create_session(OWNER.id, "Chat", self.model.id)

        with self.assertRaises(AccessDeniedError):
            self.orchestrator.send_message(
                message="Hi",
                model_id=self.model.id,
                session_id=chat_session.id,
                bearer_token="stranger-token",
            )

        self.assertEqual(self.ledger.get_messages(chat_session.id), [])
        self.mock_gateway.complete.assert_not_called()

    # Failures
    def test_unknown_model_writes_nothing(self) -> None:
        with self.assertRaises(ModelNotFoundError):
            self.orchestrator.send_message(
                message="Hi", model_id="missing", bearer_token="owner-token"
            )

        self.assertEqual(self.ledger.list_sessions(OWNER.id), [])
        self.mock_gateway.complete.assert_not_called()

    def test_missing_credential_writes_nothing(self) -> None:
        self.settings.set_setting("openrouter_api_key", "")

        with self.assertRaises(MisconfiguredProviderError):
            self.orchestrator.send_message(
                message="Hi", model_id=self.model.id, bearer_token="owner-token"
            )

        self.assertEqual(self.ledger.list_sessions(OWNER.id), [])

    def test_provider_failure_keeps_user_turn(self) -> None:
        """Test that a failed provider call leaves the user turn but no reply."""
        self.mock_gateway.complete.side_effect = ProviderError(
            "empty_response", "No response from OpenRouter API"
        )

        with self.assertRaises(ProviderError):
            self.orchestrator.send_message(
                message="Hi", model_id=self.model.id, bearer_token="owner-token"
            )

        sessions = self.ledger.list_sessions(OWNER.id)
        self.assertEqual(len(sessions), 1)
        messages = self.ledger.get_messages(sessions[0].id)
        self.assertEqual([m.role for m in messages], [MessageRole.USER])

    def test_provider_failure_for_guest_writes_nothing(self) -> None:
        self.mock_gateway.complete.side_effect = ProviderError("timeout")

        with self.assertRaises(ProviderError):
            self.orchestrator.send_message(
                message="Hi", model_id=self.model.id, is_guest=True
            )

        self.assertEqual(self.ledger.list_sessions(OWNER.id), [])

    def test_provider_receives_resolved_credential(self) -> None:
        self.orchestrator.send_message(message="Hi", model_id=self.model.id, is_guest=True)

        args = self.mock_gateway.complete.call_args[0]
        self.assertEqual(args[0], "openai/gpt-4o")
        self.assertEqual(args[2], "sk-test")


if __name__ == "__main__":
    unittest.main()
