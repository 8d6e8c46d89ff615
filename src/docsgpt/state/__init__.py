"""Client-side document/session state layer.

This package provides the stores that back the user interface:
- DocumentStore: document lifecycle and the is_queryable gate
- SessionStore: named sessions and per-session documents
- ChatStore: per-session message logs
- PersistenceCodec: versioned, pessimistic persistence of all three

Usage:
    from docsgpt.state import FileSubstrate, StateLayer

    layer = StateLayer.create(FileSubstrate(state_dir), extractor).restore()
    doc_id = layer.documents.add_document(file)
"""

from docsgpt.state.base import AnalysisError, Analyst, Extractor, ParseOutcome
from docsgpt.state.chat import ChatStore
from docsgpt.state.codec import LoadedSessions, PersistenceCodec
from docsgpt.state.documents import DocumentStore
from docsgpt.state.layer import StateLayer
from docsgpt.state.models import (
    ChatMessage,
    ChatRole,
    Document,
    DocumentMetadata,
    DocumentState,
    Session,
    SessionState,
    UploadedFile,
)
from docsgpt.state.sessions import SessionStore
from docsgpt.state.substrate import (
    FileSubstrate,
    KeyValueSubstrate,
    MemorySubstrate,
    SubstrateError,
)

__all__ = [
    # Layer
    "StateLayer",
    # Stores
    "DocumentStore",
    "SessionStore",
    "ChatStore",
    # Persistence
    "PersistenceCodec",
    "LoadedSessions",
    "KeyValueSubstrate",
    "MemorySubstrate",
    "FileSubstrate",
    "SubstrateError",
    # Models
    "Document",
    "DocumentMetadata",
    "DocumentState",
    "Session",
    "SessionState",
    "ChatMessage",
    "ChatRole",
    "UploadedFile",
    # Collaborators
    "Extractor",
    "Analyst",
    "ParseOutcome",
    "AnalysisError",
]
