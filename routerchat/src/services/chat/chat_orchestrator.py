"""Chat orchestration: the request path from user message to provider reply.

The orchestrator sequences token verification, model resolution, context
assembly, the provider call and persistence. Whether a request is a guest
request is decided exactly once, right after identification, and the
resulting RequestBranch is carried unchanged through the remaining steps.
"""

import logging
import math
from typing import Dict, List, Optional, Tuple

from routerchat.conf.config import Config
from routerchat.src.data_classes import (
    ChatResult,
    ChatState,
    Identity,
    MessageRole,
    ProviderCompletion,
    RequestBranch,
    ResolvedModel,
)
from routerchat.src.services.auth import BaseTokenVerifier
from routerchat.src.services.chat.context_assembler import ContextAssembler
from routerchat.src.services.chat.model_resolver import ModelResolver
from routerchat.src.services.errors import (
    AccessDeniedError,
    ChatServiceError,
    IdentityServiceError,
    SessionNotFoundError,
)
from routerchat.src.services.llm import BaseProviderGateway
from routerchat.src.services.store import SessionLedger

logger = logging.getLogger(__name__)


def estimate_token_count(text: str) -> int:
    """Rough token estimate for a user message (characters / 4, rounded up)."""
    return math.ceil(len(text) / Config.TOKEN_ESTIMATE_CHARS_PER_TOKEN)


class ChatRequestState:
    """Tracks one chat request through the pipeline states.

    Attributes:
        state: Current pipeline state
        branch: Guest or authenticated; set once at identification
        identity: Resolved identity for the authenticated branch
        session_id: Session the exchange is persisted to, if any
    """

    def __init__(self) -> None:
        self.state: ChatState = ChatState.RECEIVED
        self.branch: Optional[RequestBranch] = None
        self.identity: Optional[Identity] = None
        self.session_id: Optional[str] = None

    def identified(self, branch: RequestBranch, identity: Optional[Identity]) -> None:
        """Fix the branch for the rest of the request."""
        if self.branch is not None:
            raise RuntimeError("Request branch is already decided")
        if branch.persists and identity is None:
            raise ValueError("Authenticated branch requires an identity")
        self.branch = branch
        self.identity = identity
        self.advance(ChatState.IDENTIFIED)

    def require_identity(self) -> Identity:
        if self.identity is None:
            raise RuntimeError("No identity resolved for this request")
        return self.identity

    def require_session_id(self) -> str:
        if self.session_id is None:
            raise RuntimeError("No session bound to this request")
        return self.session_id

    def advance(self, state: ChatState) -> None:
        logger.debug(f"Chat request {self.state.value} -> {state.value}")
        self.state = state


class ChatOrchestrator:
    """Entry point of the chat request path.

    Authenticated, non-guest requests persist the exchange: the user turn is
    written before the provider call and survives a provider failure; the
    assistant turn is written only after a successful call. Guest requests
    never create sessions or messages.
    """

    def __init__(
        self,
        token_verifier: BaseTokenVerifier,
        model_resolver: ModelResolver,
        context_assembler: ContextAssembler,
        provider_gateway: BaseProviderGateway,
        session_ledger: SessionLedger,
    ):
        """Initialize the orchestrator with its collaborators.

        Args:
            token_verifier: Resolves bearer tokens to identities
            model_resolver: Maps model ids to provider models and credential
            context_assembler: Builds the provider-facing conversation
            provider_gateway: Calls the completion provider
            session_ledger: Persists sessions and messages
        """
        self.token_verifier = token_verifier
        self.model_resolver = model_resolver
        self.context_assembler = context_assembler
        self.provider_gateway = provider_gateway
        self.session_ledger = session_ledger

    def identify(
        self, bearer_token: Optional[str], is_guest: bool
    ) -> Tuple[RequestBranch, Optional[Identity]]:
        """Decide the request branch.

        Never fails: a missing, invalid or unverifiable token degrades the
        request to the guest branch.

        Args:
            bearer_token: Token from the Authorization header, if any
            is_guest: Explicit guest flag sent by the client

        Returns:
            Tuple of the branch and the identity (None for guests)
        """
        if is_guest:
            return RequestBranch.GUEST, None

        identity: Optional[Identity] = None
        if bearer_token:
            try:
                identity = self.token_verifier.verify(bearer_token)
            except IdentityServiceError:
                logger.warning("Auth failed for chat message, proceeding as guest")

        if identity is None:
            return RequestBranch.GUEST, None
        return RequestBranch.AUTHENTICATED, identity

    def send_message(
        self,
        message: str,
        model_id: str,
        session_id: Optional[str] = None,
        is_guest: bool = False,
        bearer_token: Optional[str] = None,
    ) -> ChatResult:
        """Process one user message end to end.

        Args:
            message: User message text
            model_id: Catalog id of the model to use
            session_id: Existing session to continue (ignored for guests)
            is_guest: Explicit guest flag
            bearer_token: Token from the Authorization header, if any

        Returns:
            ChatResult with the reply, the session id (None for guests) and token usage

        Raises:
            ModelNotFoundError: Unknown model; nothing was written
            MisconfiguredProviderError: No provider credential; nothing was written
            SessionNotFoundError: Unknown session id on the authenticated branch
            AccessDeniedError: Session owned by somebody else
            ProviderError: Provider call failed; a persisted user turn is kept
        """
        state = ChatRequestState()
        try:
            branch, identity = self.identify(bearer_token, is_guest)
            state.identified(branch, identity)
            logger.info(f"Processing chat message on {branch.value} branch")

            resolved = self.model_resolver.resolve(model_id)
            state.advance(ChatState.MODEL_RESOLVED)

            if branch.persists:
                context = self._build_persisted_context(
                    state, state.require_identity(), resolved, message, session_id
                )
            else:
                if session_id:
                    logger.debug("Ignoring session id supplied with a guest request")
                context = self.context_assembler.assemble(None, message)
            state.advance(ChatState.CONTEXT_BUILT)

            completion = self.provider_gateway.complete(
                resolved.provider_model_id, context, resolved.api_key
            )
            state.advance(ChatState.PROVIDER_CALLED)

            if branch.persists:
                self._persist_reply(state.require_session_id(), completion)
                state.advance(ChatState.PERSISTED)
            else:
                state.advance(ChatState.DISCARDED)
        except ChatServiceError as e:
            logger.error(
                f"Chat request failed in state {state.state.value}: "
                f"{e.__class__.__name__}: {e.message}"
            )
            state.advance(ChatState.FAILED)
            raise

        state.advance(ChatState.RESPONDED)
        return ChatResult(
            content=completion.content,
            session_id=state.session_id,
            token_count=completion.token_usage,
            branch=branch,
        )

    def _build_persisted_context(
        self,
        state: ChatRequestState,
        identity: Identity,
        resolved: ResolvedModel,
        message: str,
        session_id: Optional[str],
    ) -> List[Dict[str, str]]:
        """Assemble the context and make the user turn durable.

        History is read before the user turn is appended, so the context is
        the stored history plus exactly one new message.
        """
        if session_id:
            existing = self.session_ledger.get_session(session_id)
            if existing is None:
                raise SessionNotFoundError()
            if not existing.is_owned_by(identity.id):
                logger.warning(
                    f"Identity {identity.id} tried to post to session {session_id}"
                )
                raise AccessDeniedError()

        context = self.context_assembler.assemble(session_id, message)

        chat_session = self.session_ledger.ensure_session(
            owner_id=identity.id,
            seed_title=message,
            model_id=resolved.model_id,
            session_id=session_id,
        )
        state.session_id = chat_session.id
        self.session_ledger.append_message(
            chat_session.id, MessageRole.USER, message, estimate_token_count(message)
        )
        return context

    def _persist_reply(self, session_id: str, completion: ProviderCompletion) -> None:
        self.session_ledger.append_message(
            session_id,
            MessageRole.ASSISTANT,
            completion.content,
            completion.token_usage,
        )
