"""Assembly of the provider-facing conversation context."""

import logging
from typing import Dict, List, Optional

from routerchat.src.data_classes import MessageRole
from routerchat.src.services.store import SessionLedger

logger = logging.getLogger(__name__)


class ContextAssembler:
    """Builds the ordered message list sent to the provider.

    The context is rebuilt from storage on every call and never cached, so it
    always reflects the latest durable state. No truncation is applied; an
    over-long context is left for the provider to reject.
    """

    def __init__(self, session_ledger: SessionLedger):
        self.session_ledger = session_ledger

    def assemble(
        self, session_id: Optional[str], new_user_message: str
    ) -> List[Dict[str, str]]:
        """Return the stored history of a session followed by the new user turn.

        Args:
            session_id: Session whose history is loaded, or None for no history
            new_user_message: Text of the incoming user message

        Returns:
            List of ``{role, content}`` dicts, oldest first, new message last
        """
        context: List[Dict[str, str]] = []
        if session_id:
            history = self.session_ledger.get_messages(session_id)
            context.extend(message.to_provider_message() for message in history)
            logger.debug(f"Loaded {len(history)} prior message(s) for session {session_id}")

        context.append({"role": MessageRole.USER.value, "content": new_user_message})
        return context
