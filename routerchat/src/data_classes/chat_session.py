"""Data classes for persisted chat sessions and their messages."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class MessageRole(str, Enum):
    """Author of a persisted message."""

    USER = "user"
    ASSISTANT = "assistant"


@dataclass
class ChatMessage:
    """A single message within a chat session.

    Attributes:
        id: Storage identifier, increasing in insertion order
        session_id: Owning session
        role: user or assistant
        content: Message text
        token_count: Estimated (user) or provider-reported (assistant) tokens
        created_at: Insertion timestamp; defines the conversational order
    """

    id: int
    session_id: str
    role: MessageRole
    content: str
    token_count: int
    created_at: datetime

    def to_provider_message(self) -> Dict[str, str]:
        """Return the ``{role, content}`` shape sent to the completion provider."""
        return {"role": self.role.value, "content": self.content}

    def to_json(self) -> Dict[str, Any]:
        """Convert the message to a JSON-compatible dictionary."""
        return {
            "id": self.id,
            "sessionId": self.session_id,
            "role": self.role.value,
            "content": self.content,
            "tokenCount": self.token_count,
            "createdAt": self.created_at.isoformat(),
        }


@dataclass
class ChatSession:
    """A durable, owned conversation thread.

    Attributes:
        id: Session identifier
        owner_id: Identity that created the session; immutable
        title: Display title, derived from the first message
        model_id: Catalog model last used; None once that model is deleted
        created_at: Creation timestamp
        updated_at: Last activity timestamp
        model_name: Display name of the referenced model, if loaded
        message_count: Number of stored messages, if loaded
        messages: Ordered messages, if loaded
    """

    id: str
    owner_id: str
    title: str
    model_id: Optional[str]
    created_at: datetime
    updated_at: datetime
    model_name: Optional[str] = None
    message_count: Optional[int] = None
    messages: List[ChatMessage] = field(default_factory=list)

    def is_owned_by(self, identity_id: str) -> bool:
        return self.owner_id == identity_id

    def to_json(self, include_messages: bool = False) -> Dict[str, Any]:
        """Convert the session to a JSON-compatible dictionary.

        Args:
            include_messages: Whether to embed the loaded messages

        Returns:
            Dict containing the session's data in a JSON-serializable format
        """
        result: Dict[str, Any] = {
            "id": self.id,
            "userId": self.owner_id,
            "title": self.title,
            "modelId": self.model_id,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }
        if self.model_name is not None:
            result["model"] = {"name": self.model_name}
        if self.message_count is not None:
            result["messageCount"] = self.message_count
        if include_messages:
            result["messages"] = [message.to_json() for message in self.messages]
        return result
