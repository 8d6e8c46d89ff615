"""Chat store: append-only message logs keyed by session id."""

import logging
from copy import deepcopy
from typing import Any

from docsgpt.state.codec import PersistenceCodec
from docsgpt.state.models import ChatMessage, ChatRole, new_id, now_ms

logger = logging.getLogger(__name__)


class ChatStore:
    """Per-session message logs plus a transient sending flag.

    The sending flag is process-local and never persisted; it is False on
    construction and after every restore.
    """

    def __init__(self, codec: PersistenceCodec) -> None:
        self.codec = codec
        self.session_messages: dict[str, list[ChatMessage]] = {}
        self.is_sending = False

    def add_message(
        self,
        session_id: str | None,
        role: ChatRole | str,
        content: str,
        evidence: dict[str, Any] | None = None,
    ) -> ChatMessage | None:
        """Append a message to a session's log.

        Args:
            session_id: Session the message belongs to
            role: "user" or "assistant"
            content: Message text (may contain markdown)
            evidence: Optional structured payload

        Returns:
            The created message, or None if session_id is empty or the
            role is unknown
        """
        if not session_id:
            return None
        try:
            role = ChatRole(role)
        except ValueError:
            logger.warning(f"⚠️ Ignoring message with unknown role {role!r}")
            return None

        message = ChatMessage(
            id=new_id(),
            role=role,
            content=content,
            created_at=now_ms(),
            evidence=evidence,
        )
        self.session_messages.setdefault(session_id, []).append(message)
        self.persist()
        return message

    def get_messages(self, session_id: str | None) -> list[ChatMessage]:
        """Return a copy of a session's log in insertion order."""
        if not session_id:
            return []
        return [deepcopy(m) for m in self.session_messages.get(session_id, [])]

    def set_sending(self, is_sending: bool) -> None:
        self.is_sending = bool(is_sending)

    def persist(self) -> bool:
        return self.codec.save_messages(self.session_messages)

    def restore(self) -> None:
        loaded = self.codec.load_messages()
        self.is_sending = False
        if loaded is None:
            return
        self.session_messages = loaded
        logger.info(f"📂 Restored message logs for {len(loaded)} session(s)")
