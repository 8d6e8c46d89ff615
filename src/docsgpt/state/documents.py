"""Document store: owns documents, their file handles and their lifecycle.

State machine:

    UPLOADED      --parse(start)-->    PARSING
    PARSING       --parse(success)-->  PARSED
    PARSING       --parse(failure)-->  PARSE_FAILED
    PARSE_FAILED  --parse(retry)-->    PARSING
    any           --parse, no file-->  REQUIRES_REUPLOAD
    any           --reupload(file)-->  UPLOADED

Every transition is persisted immediately. A crash leaves storage in the
state before or after a transition, and a PARSING record that outlives
its process is repaired to PARSE_FAILED by the codec on the next load.
"""

import logging
from typing import Any

from docsgpt.state.base import Extractor
from docsgpt.state.codec import PersistenceCodec
from docsgpt.state.models import (
    Document,
    DocumentMetadata,
    DocumentState,
    UploadedFile,
    new_id,
    now_ms,
)

logger = logging.getLogger(__name__)

# States from which a parse may start. PARSING is excluded, which makes the
# state itself the single-flight lock for a document id.
PARSEABLE_STATES = frozenset({DocumentState.UPLOADED, DocumentState.PARSE_FAILED})


class DocumentStore:
    """In-memory map of documents, persisted through the codec."""

    def __init__(self, codec: PersistenceCodec, extractor: Extractor) -> None:
        self.codec = codec
        self.extractor = extractor
        self.documents: dict[str, Document] = {}

    def add_document(self, file: UploadedFile) -> str:
        """Register an uploaded file as a new UPLOADED document.

        Returns:
            str: The new document id
        """
        doc_id = new_id()
        self.documents[doc_id] = Document(
            id=doc_id,
            state=DocumentState.UPLOADED,
            metadata=DocumentMetadata(
                name=file.name,
                size=file.size,
                type=file.content_type,
                uploaded_at=now_ms(),
            ),
            file=file,
        )
        self.persist()
        logger.info(f"📄 Added document {doc_id} ({file.name}, {file.size} bytes)")
        return doc_id

    def reupload_document(self, doc_id: str, file: UploadedFile) -> bool:
        """Attach a fresh file handle to an existing document and reset it to UPLOADED."""
        document = self.documents.get(doc_id)
        if document is None:
            return False

        document.file = file
        document.state = DocumentState.UPLOADED
        document.parse_error = None
        self.persist()
        logger.info(f"📄 Re-uploaded document {doc_id}")
        return True

    def get_document(self, doc_id: str | None) -> Document | None:
        if not doc_id:
            return None
        return self.documents.get(doc_id)

    def list_documents(self) -> list[Document]:
        return list(self.documents.values())

    def is_queryable(self, doc_id: str | None) -> bool:
        """Return True only for a PARSED document with a backend artifact id.

        This is the single gate for sending questions about a document.
        """
        document = self.get_document(doc_id)
        return (
            document is not None
            and document.state is DocumentState.PARSED
            and document.artifact_id is not None
        )

    async def parse_document(self, doc_id: str) -> bool:
        """Submit a document's file to the extraction collaborator.

        A no-op returning False when the id is unknown or the document is not
        in UPLOADED or PARSE_FAILED. A document without a file handle moves
        to REQUIRES_REUPLOAD and returns False.

        Returns:
            bool: True if the document ended up PARSED
        """
        document = self.documents.get(doc_id)
        if document is None:
            return False

        if document.file is None:
            document.state = DocumentState.REQUIRES_REUPLOAD
            document.parse_error = None
            self.persist()
            logger.info(f"📎 Document {doc_id} has no file content, re-upload required")
            return False

        if document.state not in PARSEABLE_STATES:
            logger.debug(f"Refusing to parse document {doc_id} in state {document.state.value}")
            return False

        document.state = DocumentState.PARSING
        document.parse_error = None
        self.persist()
        logger.info(f"🔍 Parsing document {doc_id} ({document.metadata.name})")

        try:
            outcome = await self.extractor.parse(document.file, doc_id)
        except Exception as e:
            logger.error(f"❌ Extraction call failed for {doc_id}: {e}", exc_info=True)
            self._fail(document, str(e) or "Parse failed")
            return False

        if not outcome.success or not outcome.artifact_id:
            self._fail(document, outcome.error or "Parse failed")
            return False

        document.artifact_id = outcome.artifact_id
        document.state = DocumentState.PARSED
        document.parse_error = None
        self.persist()
        logger.info(f"✅ Document {doc_id} parsed (artifact {outcome.artifact_id})")
        return True

    def _fail(self, document: Document, error: str) -> None:
        document.state = DocumentState.PARSE_FAILED
        document.parse_error = error
        self.persist()
        logger.warning(f"⚠️ Parsing failed for {document.id}: {error}")

    async def get_content_metrics(self, doc_id: str) -> dict[str, Any] | None:
        """Fetch text metrics for a queryable document's artifact.

        Returns:
            Dict with wordCount, characterCount and paragraphCount, or None
        """
        if not self.is_queryable(doc_id):
            return None
        artifact_id = self.documents[doc_id].artifact_id
        try:
            return await self.extractor.get_metrics(artifact_id)
        except Exception as e:
            logger.warning(f"⚠️ Failed to fetch content metrics for {doc_id}: {e}")
            return None

    def persist(self) -> bool:
        return self.codec.save_documents(self.documents)

    def restore(self) -> None:
        """Repopulate from storage. Restored documents never carry a file handle."""
        documents = self.codec.load_documents()
        if documents is None:
            return
        for document in documents:
            self.documents[document.id] = document
        logger.info(f"📂 Restored {len(documents)} document(s)")
