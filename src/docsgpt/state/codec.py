"""Persistence codec for the state layer.

The codec stores canonical entity data under a versioned schema and loads
it back pessimistically:

- Only an explicit allow-list of fields is written per entity. File handles,
  the chat sending flag and any other derived value never reach storage.
- Loading never trusts a persisted claim that the persisted data cannot
  justify. A document claiming PARSED without an artifact id comes back as
  UPLOADED, and a document caught in PARSING comes back as PARSE_FAILED.
- Storage never advances state on its own: save, load and delete only.

Failures (quota exceeded, unreadable storage, malformed JSON) are logged
and reported as "no data"; nothing here raises to the caller.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any

from docsgpt.constants import PARSE_INTERRUPTED_ERROR, STORAGE_KEYS, STORAGE_VERSION
from docsgpt.state.models import (
    ChatMessage,
    ChatRole,
    Document,
    DocumentMetadata,
    DocumentState,
    Session,
    SessionState,
    now_ms,
)
from docsgpt.state.substrate import KeyValueSubstrate, SubstrateError

logger = logging.getLogger(__name__)

FAMILIES = ("sessions", "documents", "messages")


@dataclass
class LoadedSessions:
    """Sessions restored from storage plus the global active session id."""

    sessions: list[Session]
    active_session_id: str | None


# =============================================================================
# Canonical field allow-lists
# =============================================================================


def document_to_record(document: Document) -> dict[str, Any]:
    """Build the canonical storage record for a document."""
    return {
        "id": document.id,
        "state": document.state.value,
        "metadata": {
            "name": document.metadata.name,
            "size": document.metadata.size,
            "type": document.metadata.type,
            "uploadedAt": document.metadata.uploaded_at,
        },
        "artifactId": document.artifact_id,
        "parseError": document.parse_error,
    }


def session_to_record(session: Session) -> dict[str, Any]:
    """Build the canonical storage record for a session."""
    return {
        "id": session.id,
        "name": session.name,
        "state": session.state.value,
        "documentIds": list(session.document_ids),
        "activeDocumentId": session.active_document_id,
        "createdAt": session.created_at,
    }


def message_to_record(message: ChatMessage) -> dict[str, Any]:
    """Build the canonical storage record for a chat message."""
    return {
        "id": message.id,
        "role": message.role.value,
        "content": message.content,
        "evidence": message.evidence,
        "createdAt": message.created_at,
    }


# =============================================================================
# Structural validation
# =============================================================================


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value)


def document_from_record(record: Any) -> Document | None:
    """Validate a stored document record and apply load-time downgrades.

    Args:
        record: Decoded JSON value for one document

    Returns:
        The repaired Document with no file handle, or None if the record
        is structurally invalid
    """
    if not isinstance(record, dict) or not _non_empty_str(record.get("id")):
        return None

    try:
        state = DocumentState(record.get("state"))
    except ValueError:
        return None

    raw_metadata = record.get("metadata")
    if not isinstance(raw_metadata, dict):
        return None
    name = raw_metadata.get("name")
    size = raw_metadata.get("size")
    mime_type = raw_metadata.get("type", "")
    uploaded_at = raw_metadata.get("uploadedAt")
    if not isinstance(name, str) or not _is_int(size) or not isinstance(mime_type, str):
        return None
    if not _is_int(uploaded_at):
        return None

    artifact_id = record.get("artifactId")
    if not _non_empty_str(artifact_id):
        artifact_id = None
    parse_error = record.get("parseError")
    if not isinstance(parse_error, str):
        parse_error = None

    doc_id = record["id"]

    if state is DocumentState.PARSED and artifact_id is None:
        logger.warning(
            f"⚠️ Document {doc_id} claims PARSED but has no artifact id, downgrading to UPLOADED"
        )
        state = DocumentState.UPLOADED

    if state is DocumentState.PARSING:
        logger.warning(f"⚠️ Document {doc_id} was parsing when stored, marking as PARSE_FAILED")
        state = DocumentState.PARSE_FAILED
        parse_error = PARSE_INTERRUPTED_ERROR

    if state is not DocumentState.PARSE_FAILED:
        parse_error = None

    return Document(
        id=doc_id,
        state=state,
        metadata=DocumentMetadata(
            name=name, size=size, type=mime_type, uploaded_at=uploaded_at
        ),
        file=None,
        artifact_id=artifact_id,
        parse_error=parse_error,
    )


def session_from_record(record: Any) -> Session | None:
    """Validate a stored session record.

    Duplicate document ids are collapsed and an active document that is not
    a member of the session is cleared.
    """
    if not isinstance(record, dict):
        return None
    session_id = record.get("id")
    name = record.get("name")
    if not _non_empty_str(session_id) or not _non_empty_str(name):
        return None

    try:
        state = SessionState(record.get("state"))
    except ValueError:
        return None

    raw_ids = record.get("documentIds")
    if not isinstance(raw_ids, list) or not all(_non_empty_str(i) for i in raw_ids):
        return None
    document_ids = list(dict.fromkeys(raw_ids))

    created_at = record.get("createdAt")
    if not _is_int(created_at):
        return None

    active_document_id = record.get("activeDocumentId")
    if active_document_id not in document_ids:
        active_document_id = None

    return Session(
        id=session_id,
        name=name,
        state=state,
        created_at=created_at,
        document_ids=document_ids,
        active_document_id=active_document_id,
    )


def message_from_record(record: Any) -> ChatMessage | None:
    """Validate a stored chat message record."""
    if not isinstance(record, dict) or not _non_empty_str(record.get("id")):
        return None
    try:
        role = ChatRole(record.get("role"))
    except ValueError:
        return None
    content = record.get("content")
    created_at = record.get("createdAt")
    if not isinstance(content, str) or not _is_int(created_at):
        return None
    evidence = record.get("evidence")
    if not isinstance(evidence, dict):
        evidence = None
    return ChatMessage(
        id=record["id"], role=role, content=content, created_at=created_at, evidence=evidence
    )


def _entries(payload: Any) -> list[tuple[str, Any]]:
    """Yield well-formed [id, value] pairs from a stored list, skipping the rest."""
    entries = []
    for entry in payload:
        if isinstance(entry, list) and len(entry) == 2 and _non_empty_str(entry[0]):
            entries.append((entry[0], entry[1]))
        else:
            logger.warning(f"⚠️ Dropping malformed stored entry: {entry!r:.80}")
    return entries


# =============================================================================
# Codec
# =============================================================================


class PersistenceCodec:
    """Serializes each entity family to and from a key/value substrate."""

    def __init__(self, substrate: KeyValueSubstrate) -> None:
        self.substrate = substrate

    # -- low level ----------------------------------------------------------

    def _write(self, family: str, payload: dict[str, Any]) -> bool:
        data = {"version": STORAGE_VERSION, **payload, "timestamp": now_ms()}
        try:
            self.substrate.set(STORAGE_KEYS[family], json.dumps(data))
            return True
        except (SubstrateError, TypeError, ValueError) as e:
            logger.warning(f"⚠️ Failed to save {family}: {e}")
            return False

    def _read(self, family: str) -> dict[str, Any] | None:
        """Read a family envelope, enforcing the schema version."""
        key = STORAGE_KEYS[family]
        try:
            saved = self.substrate.get(key)
        except SubstrateError as e:
            logger.warning(f"⚠️ Failed to load {family}: {e}")
            return None
        if not saved:
            return None

        try:
            data = json.loads(saved)
        except ValueError as e:
            logger.warning(f"⚠️ Stored {family} is not valid JSON: {e}")
            return None
        if not isinstance(data, dict):
            logger.warning(f"⚠️ Stored {family} is not an object")
            return None

        version = data.get("version")
        if not _is_int(version) or version < STORAGE_VERSION:
            logger.warning(f"⚠️ Outdated {family} format (version={version!r}), clearing storage")
            self._remove(family)
            return None
        return data

    def _remove(self, family: str) -> None:
        try:
            self.substrate.remove(STORAGE_KEYS[family])
        except SubstrateError as e:
            logger.warning(f"⚠️ Failed to clear {family}: {e}")

    # -- documents ----------------------------------------------------------

    def save_documents(self, documents: dict[str, Document]) -> bool:
        records = [[doc_id, document_to_record(doc)] for doc_id, doc in documents.items()]
        return self._write("documents", {"documents": records})

    def load_documents(self) -> list[Document] | None:
        """Load documents, dropping malformed records and downgrading unproven states.

        Returns:
            Restored documents in stored order, or None if nothing usable is stored
        """
        data = self._read("documents")
        if data is None or not isinstance(data.get("documents"), list):
            return None

        documents = []
        for doc_id, record in _entries(data["documents"]):
            document = document_from_record(record)
            if document is None or document.id != doc_id:
                logger.warning(f"⚠️ Dropping invalid stored document {doc_id}")
                continue
            documents.append(document)
        return documents

    # -- sessions -----------------------------------------------------------

    def save_sessions(self, sessions: dict[str, Session], active_session_id: str | None) -> bool:
        records = [[session_id, session_to_record(s)] for session_id, s in sessions.items()]
        return self._write(
            "sessions", {"sessions": records, "activeSessionId": active_session_id}
        )

    def load_sessions(self) -> LoadedSessions | None:
        data = self._read("sessions")
        if data is None or not isinstance(data.get("sessions"), list):
            return None

        sessions = []
        for session_id, record in _entries(data["sessions"]):
            session = session_from_record(record)
            if session is None or session.id != session_id:
                logger.warning(f"⚠️ Dropping invalid stored session {session_id}")
                continue
            sessions.append(session)

        active_session_id = data.get("activeSessionId")
        if not isinstance(active_session_id, str) or active_session_id not in {
            s.id for s in sessions
        }:
            active_session_id = None
        return LoadedSessions(sessions=sessions, active_session_id=active_session_id)

    # -- messages -----------------------------------------------------------

    def save_messages(self, session_messages: dict[str, list[ChatMessage]]) -> bool:
        records = [
            [session_id, [message_to_record(m) for m in messages]]
            for session_id, messages in session_messages.items()
        ]
        return self._write("messages", {"sessionMessages": records})

    def load_messages(self) -> dict[str, list[ChatMessage]] | None:
        data = self._read("messages")
        if data is None or not isinstance(data.get("sessionMessages"), list):
            return None

        session_messages: dict[str, list[ChatMessage]] = {}
        for session_id, records in _entries(data["sessionMessages"]):
            if not isinstance(records, list):
                logger.warning(f"⚠️ Dropping invalid message log for session {session_id}")
                continue
            messages = []
            for record in records:
                message = message_from_record(record)
                if message is None:
                    logger.warning(f"⚠️ Dropping invalid message in session {session_id}")
                    continue
                messages.append(message)
            session_messages[session_id] = messages
        return session_messages

    # -- config -------------------------------------------------------------

    def save_config(self, config: dict[str, Any]) -> bool:
        try:
            self.substrate.set(STORAGE_KEYS["config"], json.dumps(config))
            return True
        except (SubstrateError, TypeError, ValueError) as e:
            logger.warning(f"⚠️ Failed to save config: {e}")
            return False

    def load_config(self) -> dict[str, Any] | None:
        try:
            saved = self.substrate.get(STORAGE_KEYS["config"])
            config = json.loads(saved) if saved else None
        except (SubstrateError, ValueError) as e:
            logger.warning(f"⚠️ Failed to load config: {e}")
            return None
        return config if isinstance(config, dict) else None

    # -- clearing -----------------------------------------------------------

    def clear_sessions(self) -> None:
        self._remove("sessions")

    def clear_documents(self) -> None:
        self._remove("documents")

    def clear_messages(self) -> None:
        self._remove("messages")

    def clear_all(self) -> None:
        """Remove every family, including the configuration."""
        for family in FAMILIES:
            self._remove(family)
        self._remove("config")
