"""Session store: named workspaces and the globally active session.

Sessions reference documents by id only. A referenced document may be
missing from the document store; callers resolve ids through
DocumentStore.get_document and handle None.
"""

import logging

from docsgpt.constants import DEFAULT_SESSION_NAME
from docsgpt.state.codec import PersistenceCodec
from docsgpt.state.models import Session, SessionState, new_id, now_ms

logger = logging.getLogger(__name__)


class SessionStore:
    """In-memory map of sessions, persisted through the codec."""

    def __init__(self, codec: PersistenceCodec) -> None:
        self.codec = codec
        self.sessions: dict[str, Session] = {}
        self.active_session_id: str | None = None

    def create_session(self, name: str | None = None) -> str:
        """Create a session and make it the active one.

        Args:
            name: Display name (default: "Untitled Session")

        Returns:
            str: The new session id
        """
        session_id = new_id()
        self.sessions[session_id] = Session(
            id=session_id,
            name=(name or "").strip() or DEFAULT_SESSION_NAME,
            state=SessionState.ACTIVE,
            created_at=now_ms(),
        )
        self.active_session_id = session_id
        self.persist()
        logger.info(f"🗂️ Created session {session_id}")
        return session_id

    def get_session(self, session_id: str | None) -> Session | None:
        if not session_id:
            return None
        return self.sessions.get(session_id)

    def list_sessions(self) -> list[Session]:
        return list(self.sessions.values())

    def get_active_session(self) -> Session | None:
        return self.get_session(self.active_session_id)

    def set_active_session(self, session_id: str) -> bool:
        if session_id not in self.sessions:
            return False
        self.active_session_id = session_id
        self.persist()
        return True

    def rename_session(self, session_id: str, name: str) -> bool:
        session = self.sessions.get(session_id)
        new_name = (name or "").strip()
        if session is None or not new_name:
            return False
        session.name = new_name
        self.persist()
        return True

    def add_document_to_session(self, session_id: str, doc_id: str) -> bool:
        """Append a document to a session and select it as the active document.

        A no-op if the session is unknown or already holds the document.
        """
        session = self.sessions.get(session_id)
        if session is None or not doc_id or doc_id in session.document_ids:
            return False
        session.document_ids.append(doc_id)
        session.active_document_id = doc_id
        self.persist()
        return True

    def set_active_document(self, session_id: str, doc_id: str) -> bool:
        """Select a document already added to the session."""
        session = self.sessions.get(session_id)
        if session is None or doc_id not in session.document_ids:
            return False
        session.active_document_id = doc_id
        self.persist()
        return True

    def persist(self) -> bool:
        return self.codec.save_sessions(self.sessions, self.active_session_id)

    def restore(self) -> None:
        loaded = self.codec.load_sessions()
        if loaded is None:
            return
        for session in loaded.sessions:
            self.sessions[session.id] = session
        self.active_session_id = loaded.active_session_id
        logger.info(f"📂 Restored {len(loaded.sessions)} session(s)")
