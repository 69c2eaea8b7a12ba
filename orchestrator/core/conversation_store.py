"""
In-memory conversation store. Keyed by conversation_id; lives for the process lifetime.
"""

import logging
import threading
from datetime import datetime, timezone

from orchestrator.schemas.conversation import Conversation, Message

logger = logging.getLogger(__name__)


class ConversationStore:
    """Append-only conversation histories shared by all request workers."""

    def __init__(self) -> None:
        self._conversations: dict[str, Conversation] = {}
        self._lock = threading.Lock()

    def get(self, conversation_id: str) -> Conversation | None:
        """Return the conversation (copy so caller cannot mutate store), or None if unknown."""
        with self._lock:
            conversation = self._conversations.get(conversation_id)
            out = conversation.model_copy(deep=True) if conversation is not None else None
        logger.info(
            "[conversation_store:get] IN  conversation_id=%s OUT messages=%s",
            conversation_id[:16],
            len(out.messages) if out is not None else None,
        )
        return out

    def append(self, conversation_id: str, query: str, answer: str) -> None:
        """Append one user/assistant exchange, creating the conversation on first use."""
        with self._lock:
            conversation = self._conversations.get(conversation_id)
            if conversation is None:
                conversation = Conversation(id=conversation_id, start_time=datetime.now(timezone.utc))
                self._conversations[conversation_id] = conversation
            conversation.messages.append(Message(role="user", content=query, timestamp=datetime.now(timezone.utc)))
            conversation.messages.append(Message(role="assistant", content=answer, timestamp=datetime.now(timezone.utc)))
            total = len(conversation.messages)
        logger.info(
            "[conversation_store:append] conversation_id=%s messages=%d answer_len=%d",
            conversation_id[:16], total, len(answer),
        )

    def __len__(self) -> int:
        with self._lock:
            return len(self._conversations)


# Process-wide store used by the API layer
conversation_store = ConversationStore()
