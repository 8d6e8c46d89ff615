"""Explicit container for the three stores sharing one codec."""

import logging
from dataclasses import dataclass

from docsgpt.state.base import Extractor
from docsgpt.state.chat import ChatStore
from docsgpt.state.codec import PersistenceCodec
from docsgpt.state.documents import DocumentStore
from docsgpt.state.models import Document, Session
from docsgpt.state.sessions import SessionStore
from docsgpt.state.substrate import KeyValueSubstrate

logger = logging.getLogger(__name__)


@dataclass
class StateLayer:
    """The document, session and chat stores of one running process.

    Build it once at start-up with create(), call restore(), and pass the
    instance to whatever needs the stores.
    """

    codec: PersistenceCodec
    documents: DocumentStore
    sessions: SessionStore
    chat: ChatStore

    @classmethod
    def create(cls, substrate: KeyValueSubstrate, extractor: Extractor) -> "StateLayer":
        codec = PersistenceCodec(substrate)
        return cls(
            codec=codec,
            documents=DocumentStore(codec, extractor),
            sessions=SessionStore(codec),
            chat=ChatStore(codec),
        )

    def restore(self) -> "StateLayer":
        self.sessions.restore()
        self.documents.restore()
        self.chat.restore()
        logger.debug("State layer restored")
        return self

    def active_document(self) -> Document | None:
        """Resolve the active session's active document, if both still exist."""
        session: Session | None = self.sessions.get_active_session()
        if session is None:
            return None
        return self.documents.get_document(session.active_document_id)
