"""Service for persisting chat sessions and their messages.

This module provides the session ledger: the only writer of conversation
state. Sessions are created lazily, messages are strictly appended and only
ever removed together with their session.
"""

import logging
from typing import List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from routerchat.conf.config import Config
from routerchat.src.data_classes import ChatMessage, ChatSession, MessageRole
from routerchat.src.services.errors import SessionNotFoundError
from routerchat.src.services.store.database import Database
from routerchat.src.services.store.entities import (
    AiModelEntity,
    ChatMessageEntity,
    ChatSessionEntity,
    utc_now,
)

logger = logging.getLogger(__name__)


def derive_session_title(
    first_message: str, max_length: int = Config.SESSION_TITLE_MAX_LENGTH
) -> str:
    """Derive a session title from the first user message.

    Args:
        first_message: Text of the first message in the conversation
        max_length: Number of characters kept before ellipsizing

    Returns:
        The first ``max_length`` characters, followed by "..." if truncated
    """
    if len(first_message) > max_length:
        return first_message[:max_length] + "..."
    return first_message


class SessionLedger:
    """Service for storing and retrieving chat sessions using the database.

    Writes for one request are issued sequentially by the caller, which gives
    per-request ordering. Concurrent requests against the same session are
    not serialized; their messages interleave in storage-arrival order.

    Attributes:
        database (Database): Database providing transactional scopes
    """

    def __init__(self, database: Database) -> None:
        """Initialize the ledger on top of a database."""
        self.database = database

    # Session operations
    def get_session(self, session_id: str) -> Optional[ChatSession]:
        """Fetch a session without its messages.

        Args:
            session_id: Session to fetch

        Returns:
            The session, or None if it does not exist
        """
        with self.database.session_scope() as session:
            row = session.get(ChatSessionEntity, session_id)
            return row.to_chat_session() if row else None

    def get_session_with_messages(self, session_id: str) -> Optional[ChatSession]:
        """Fetch a session together with its ordered messages and model name.

        Args:
            session_id: Session to fetch

        Returns:
            The session with ``messages`` and ``model_name`` populated, or None
        """
        with self.database.session_scope() as session:
            row = session.get(ChatSessionEntity, session_id)
            if row is None:
                return None
            chat_session = row.to_chat_session()
            if row.model_id:
                model = session.get(AiModelEntity, row.model_id)
                chat_session.model_name = model.name if model else None
            chat_session.messages = self._query_messages(session, session_id)
            chat_session.message_count = len(chat_session.messages)
            return chat_session

    def list_sessions(self, owner_id: str) -> List[ChatSession]:
        """List the sessions of one owner, most recently updated first.

        Each session carries its message count and the name of the model it
        references (None once that model was deleted).

        Args:
            owner_id: Identity whose sessions are listed

        Returns:
            List of sessions; empty if the owner has none
        """
        with self.database.session_scope() as session:
            query = (
                select(
                    ChatSessionEntity,
                    AiModelEntity.name,
                    func.count(ChatMessageEntity.id),
                )
                .outerjoin(AiModelEntity, ChatSessionEntity.model_id == AiModelEntity.id)
                .outerjoin(
                    ChatMessageEntity, ChatMessageEntity.session_id == ChatSessionEntity.id
                )
                .where(ChatSessionEntity.user_id == owner_id)
                .group_by(ChatSessionEntity.id, AiModelEntity.name)
                .order_by(ChatSessionEntity.updated_at.desc())
            )
            result: List[ChatSession] = []
            for row, model_name, message_count in session.execute(query):
                chat_session = row.to_chat_session()
                chat_session.model_name = model_name
                chat_session.message_count = message_count
                result.append(chat_session)
            logger.debug(f"Listed {len(result)} sessions for owner {owner_id}")
            return result

    def create_session(
        self, owner_id: str, title: str, model_id: Optional[str] = None
    ) -> ChatSession:
        """Create a new, empty session.

        Args:
            owner_id: Owner of the session; immutable afterwards
            title: Display title
            model_id: Catalog model the conversation uses, if any

        Returns:
            The created session
        """
        with self.database.session_scope() as session:
            row = ChatSessionEntity(user_id=owner_id, title=title, model_id=model_id)
            session.add(row)
            session.flush()
            logger.info(f"Created chat session {row.id} for owner {owner_id}")
            return row.to_chat_session()

    def ensure_session(
        self,
        owner_id: str,
        seed_title: str,
        model_id: Optional[str],
        session_id: Optional[str] = None,
    ) -> ChatSession:
        """Return the session a new message belongs to, creating it if needed.

        Without ``session_id`` a new session is created with a title derived
        from ``seed_title``. With ``session_id`` the existing session is
        returned after its ``model_id`` and ``updated_at`` are refreshed.
        Ownership is not checked here.

        Args:
            owner_id: Owner of a newly created session
            seed_title: First user message, used to derive the title
            model_id: Catalog model used for this turn
            session_id: Existing session, if the caller supplied one

        Returns:
            The new or existing session

        Raises:
            SessionNotFoundError: If ``session_id`` does not exist
        """
        if not session_id:
            return self.create_session(
                owner_id=owner_id,
                title=derive_session_title(seed_title),
                model_id=model_id,
            )

        with self.database.session_scope() as session:
            row = session.get(ChatSessionEntity, session_id)
            if row is None:
                raise SessionNotFoundError()
            row.model_id = model_id
            row.updated_at = utc_now()
            session.flush()
            return row.to_chat_session()

    def delete_session(self, session_id: str) -> bool:
        """Delete a session and, with it, all of its messages.

        Args:
            session_id: Session to delete

        Returns:
            True if the session existed and was deleted
        """
        with self.database.session_scope() as session:
            removed_messages = session.execute(
                delete(ChatMessageEntity).where(ChatMessageEntity.session_id == session_id)
            )
            result = session.execute(
                delete(ChatSessionEntity).where(ChatSessionEntity.id == session_id)
            )
            deleted = result.rowcount > 0
        if deleted:
            logger.info(
                f"Deleted chat session {session_id} with {removed_messages.rowcount} message(s)"
            )
        return deleted

    # Message operations
    def append_message(
        self, session_id: str, role: MessageRole, content: str, token_count: int
    ) -> ChatMessage:
        """Append a message to a session.

        Prior messages are never modified. The session's ``updated_at`` is
        touched.

        Args:
            session_id: Session the message belongs to
            role: user or assistant
            content: Message text
            token_count: Token count to record for the message

        Returns:
            The stored message

        Raises:
            SessionNotFoundError: If the session does not exist
        """
        with self.database.session_scope() as session:
            parent = session.get(ChatSessionEntity, session_id)
            if parent is None:
                raise SessionNotFoundError()
            now = utc_now()
            row = ChatMessageEntity(
                session_id=session_id,
                role=MessageRole(role).value,
                content=content,
                token_count=token_count,
                created_at=now,
            )
            session.add(row)
            parent.updated_at = now
            session.flush()
            logger.debug(f"Appended {row.role} message {row.id} to session {session_id}")
            return row.to_chat_message()

    def get_messages(self, session_id: str) -> List[ChatMessage]:
        """Return the messages of a session, oldest first.

        Args:
            session_id: Session whose messages are loaded

        Returns:
            Ordered list of messages; empty if the session has none
        """
        with self.database.session_scope() as session:
            return self._query_messages(session, session_id)

    @staticmethod
    def _query_messages(session: Session, session_id: str) -> List[ChatMessage]:
        query = (
            select(ChatMessageEntity)
            .where(ChatMessageEntity.session_id == session_id)
            .order_by(ChatMessageEntity.created_at, ChatMessageEntity.id)
        )
        return [row.to_chat_message() for row in session.scalars(query)]
