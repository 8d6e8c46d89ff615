"""Protocols for the external collaborators the state layer depends on."""

from dataclasses import dataclass
from typing import Any, Protocol

from docsgpt.state.models import UploadedFile


class AnalysisError(Exception):
    """Raised by an analysis collaborator with a user-facing message."""


@dataclass
class ParseOutcome:
    """Result of submitting a file to the extraction collaborator.

    Attributes:
        success: Whether the backend extracted and stored the text
        artifact_id: Backend-issued id of the stored text (success only)
        text_length: Number of characters extracted (success only)
        error: Human-readable failure message (failure only)
    """

    success: bool
    artifact_id: str | None = None
    text_length: int | None = None
    error: str | None = None

    @classmethod
    def ok(cls, artifact_id: str, text_length: int | None = None) -> "ParseOutcome":
        return cls(success=True, artifact_id=artifact_id, text_length=text_length)

    @classmethod
    def failed(cls, error: str) -> "ParseOutcome":
        return cls(success=False, error=error)


class Extractor(Protocol):
    """Protocol for the text extraction collaborator.

    Calls must be idempotent per document id; a retry after a failure is
    an ordinary call.
    """

    async def parse(self, file: UploadedFile, document_id: str) -> ParseOutcome:
        """Submit a file for text extraction.

        Args:
            file: Raw file to extract text from
            document_id: Id of the document the file belongs to

        Returns:
            ParseOutcome describing success (with artifact id) or failure
        """
        ...

    async def get_metrics(self, artifact_id: str) -> dict[str, Any] | None:
        """Return word, character and paragraph counts for an artifact."""
        ...


class Analyst(Protocol):
    """Protocol for the analysis collaborator."""

    async def analyze(
        self,
        artifact_id: str,
        intent: str,
        query: str = "",
        service: str | None = None,
        model: str | None = None,
        api_key: str | None = None,
    ) -> str:
        """Ask the text-generation service about a parsed artifact.

        Returns:
            str: Generated content

        Raises:
            AnalysisError: If the analysis could not be completed
        """
        ...
