"""Core data models for the document/session state layer."""

import mimetypes
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any


class DocumentState(str, Enum):
    """Lifecycle states of an uploaded document."""

    UPLOADED = "UPLOADED"
    PARSING = "PARSING"
    PARSE_FAILED = "PARSE_FAILED"
    PARSED = "PARSED"
    REQUIRES_REUPLOAD = "REQUIRES_REUPLOAD"


class SessionState(str, Enum):
    """Lifecycle states of a session. Only ACTIVE is produced today."""

    CREATED = "CREATED"
    ACTIVE = "ACTIVE"
    ARCHIVED = "ARCHIVED"


class ChatRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


def now_ms() -> int:
    """Return the current time as epoch milliseconds."""
    return int(time.time() * 1000)


def new_id() -> str:
    return uuid.uuid4().hex


@dataclass
class UploadedFile:
    """Raw file content held in memory by the document store.

    Attributes:
        name: Original filename
        content_type: Declared MIME type (may be empty)
        data: Raw bytes of the file
    """

    name: str
    content_type: str
    data: bytes = field(repr=False)

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def from_path(cls, path: Path) -> "UploadedFile":
        """Read a file from disk, guessing its MIME type from the extension."""
        content_type, _ = mimetypes.guess_type(path.name)
        return cls(name=path.name, content_type=content_type or "", data=path.read_bytes())


@dataclass(frozen=True)
class DocumentMetadata:
    """Immutable facts about an upload."""

    name: str
    size: int
    type: str
    uploaded_at: int


@dataclass
class Document:
    """One uploaded file and its processing status.

    The file handle is owned by the document store and never persisted;
    a restored document always starts without one.
    """

    id: str
    state: DocumentState
    metadata: DocumentMetadata
    file: UploadedFile | None = field(default=None, repr=False)
    artifact_id: str | None = None
    parse_error: str | None = None


@dataclass
class Session:
    """A named workspace grouping documents by id."""

    id: str
    name: str
    state: SessionState
    created_at: int
    document_ids: list[str] = field(default_factory=list)
    active_document_id: str | None = None


@dataclass
class ChatMessage:
    """One turn in a session's conversation."""

    id: str
    role: ChatRole
    content: str
    created_at: int
    evidence: dict[str, Any] | None = None
