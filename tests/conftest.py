"""Pytest configuration and shared fixtures for the test suite."""

import io
import zipfile
from typing import Any

import pytest
import requests

from docsgpt.state import (
    AnalysisError,
    MemorySubstrate,
    ParseOutcome,
    PersistenceCodec,
    StateLayer,
    UploadedFile,
)

SAMPLE_TEXT = (
    "Quarterly report for Example Corp.\n\n"
    "Revenue grew 12% to $4.2M in Q3 2024.\n\n"
    "Risks include supplier concentration and currency exposure."
)


# Service availability checks
def ravendb_available() -> bool:
    """Check if RavenDB server is running and accessible.

    Returns:
        True if RavenDB is available, False otherwise
    """
    try:
        response = requests.get("http://localhost:8080/databases", timeout=2)
        return response.status_code in (200, 401)  # Auth required is OK
    except requests.RequestException:
        return False


class FakeExtractor:
    """Extraction collaborator with scripted outcomes.

    outcomes[i] is returned (or raised, if an exception) by the i-th parse
    call; calls beyond the script succeed with artifact "artifact-<n>".
    gates[i], if set to an asyncio.Event, holds the i-th call until it is set.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[UploadedFile, str]] = []
        self.outcomes: list[Any] = []
        self.gates: list[Any] = []
        self.metrics: dict[str, int] | None = {
            "wordCount": 3,
            "characterCount": 17,
            "paragraphCount": 1,
        }
        self.metrics_requests: list[str] = []

    async def parse(self, file: UploadedFile, document_id: str) -> ParseOutcome:
        index = len(self.calls)
        self.calls.append((file, document_id))
        if index < len(self.gates) and self.gates[index] is not None:
            await self.gates[index].wait()
        outcome = (
            self.outcomes[index]
            if index < len(self.outcomes)
            else ParseOutcome.ok(f"artifact-{index + 1}", 42)
        )
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def get_metrics(self, artifact_id: str) -> dict[str, int] | None:
        self.metrics_requests.append(artifact_id)
        return self.metrics


class FakeAnalyst:
    """Analysis collaborator returning a fixed answer or raising AnalysisError."""

    def __init__(self, result: str = "## Executive Summary\n- Revenue grew") -> None:
        self.result = result
        self.error: str | None = None
        self.calls: list[dict[str, Any]] = []

    async def analyze(
        self,
        artifact_id: str,
        intent: str,
        query: str = "",
        service: str | None = None,
        model: str | None = None,
        api_key: str | None = None,
    ) -> str:
        self.calls.append(
            {
                "artifact_id": artifact_id,
                "intent": intent,
                "query": query,
                "service": service,
                "model": model,
                "api_key": api_key,
            }
        )
        if self.error:
            raise AnalysisError(self.error)
        return self.result


@pytest.fixture
def substrate() -> MemorySubstrate:
    return MemorySubstrate()


@pytest.fixture
def codec(substrate) -> PersistenceCodec:
    return PersistenceCodec(substrate)


@pytest.fixture
def extractor() -> FakeExtractor:
    return FakeExtractor()


@pytest.fixture
def analyst() -> FakeAnalyst:
    return FakeAnalyst()


@pytest.fixture
def layer(substrate, extractor) -> StateLayer:
    """Provide a freshly restored state layer over an in-memory substrate."""
    return StateLayer.create(substrate, extractor).restore()


@pytest.fixture
def reload(substrate, extractor):
    """Factory fixture simulating a process restart over the same storage.

    Returns:
        Function returning a new, restored StateLayer
    """

    def _reload() -> StateLayer:
        return StateLayer.create(substrate, extractor).restore()

    return _reload


@pytest.fixture
def txt_file() -> UploadedFile:
    return UploadedFile(name="report.txt", content_type="text/plain", data=SAMPLE_TEXT.encode())


@pytest.fixture
def create_upload():
    """Factory fixture to create in-memory uploads.

    Returns:
        Function that creates an UploadedFile with custom parameters
    """

    def _create_upload(
        name: str = "notes.txt", text: str = SAMPLE_TEXT, content_type: str = "text/plain"
    ) -> UploadedFile:
        return UploadedFile(name=name, content_type=content_type, data=text.encode())

    return _create_upload


def make_docx(paragraphs: list[str]) -> bytes:
    """Build a minimal DOCX package holding the given paragraphs."""
    ns = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"
    body = "".join(f"<w:p><w:r><w:t>{p}</w:t></w:r></w:p>" for p in paragraphs)
    xml = f'<?xml version="1.0" encoding="UTF-8"?><w:document xmlns:w="{ns}"><w:body>{body}</w:body></w:document>'

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as package:
        package.writestr("[Content_Types].xml", "<Types/>")
        package.writestr("word/document.xml", xml)
    return buffer.getvalue()


@pytest.fixture
def docx_bytes() -> bytes:
    return make_docx(["First paragraph of the memo.", "Second paragraph with details."])


@pytest.fixture
def pdf_bytes() -> bytes:
    """Build a one-page PDF with PyMuPDF."""
    import fitz

    doc = fitz.open()
    page = doc.new_page()
    page.insert_text((72, 72), "Hello from a generated PDF document.")
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def ravendb_substrate():
    """Provide a RavenDB substrate, skip if RavenDB not available.

    Yields:
        RavenDBSubstrate connected to the configured database

    Raises:
        pytest.skip: If RavenDB server is not running
    """
    if not ravendb_available():
        pytest.skip("RavenDB server not running on localhost:8080")

    from docsgpt.service.database import RavenDBSubstrate, create_database, database_exists

    if not database_exists():
        create_database()
    substrate = RavenDBSubstrate()
    yield substrate
    substrate.close()
