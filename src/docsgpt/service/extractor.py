"""Text extraction for uploaded PDF, DOCX and TXT documents."""

import io
import logging
import re
import zipfile
from xml.etree import ElementTree

import fitz  # PyMuPDF

from docsgpt.constants import SUPPORTED_EXTENSIONS, SUPPORTED_MIME_TYPES

logger = logging.getLogger(__name__)

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
TXT_MIME = "text/plain"

_WORD_NS = "{http://schemas.openxmlformats.org/wordprocessingml/2006/main}"


class ExtractionError(Exception):
    """Raised when text cannot be extracted from a document."""


class UnsupportedFileError(ExtractionError):
    """Raised for file types the extractor does not handle."""


def file_extension(filename: str | None) -> str:
    """Return the lowercase extension of filename without the dot."""
    if not filename or "." not in filename:
        return ""
    return filename.rsplit(".", 1)[1].lower()


def is_supported(filename: str | None, content_type: str | None) -> bool:
    """Check whether a file is a supported type by MIME type or extension.

    Args:
        filename: Original filename
        content_type: Declared MIME type

    Returns:
        True if the file can be extracted, False otherwise
    """
    return content_type in SUPPORTED_MIME_TYPES or file_extension(filename) in SUPPORTED_EXTENSIONS


def extract_text_from_pdf(data: bytes) -> str:
    """Extract all text from PDF bytes.

    Returns:
        str: Concatenated text from all pages
    """
    doc = fitz.open(stream=data, filetype="pdf")
    text = ""

    for page in doc:
        text += page.get_text()

    doc.close()
    return text


def extract_text_from_docx(data: bytes) -> str:
    """Extract paragraph text from the main part of a DOCX package."""
    with zipfile.ZipFile(io.BytesIO(data)) as package:
        xml = package.read("word/document.xml")

    root = ElementTree.fromstring(xml)
    paragraphs = []
    for paragraph in root.iter(f"{_WORD_NS}p"):
        runs = [node.text or "" for node in paragraph.iter(f"{_WORD_NS}t")]
        paragraphs.append("".join(runs))
    return "\n".join(paragraphs)


def clean_text(text: str) -> str:
    """Normalize line endings and whitespace in extracted text."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = re.sub(r"\n{3,}", "\n\n", text)
    text = re.sub(r"[ \t]+", " ", text)
    return text.strip()


def extract_text(data: bytes, filename: str | None, content_type: str | None = None) -> str:
    """Extract and clean plain text from an uploaded document.

    The declared MIME type is tried first; the filename extension is the
    fallback.

    Args:
        data: Raw file bytes
        filename: Original filename
        content_type: Declared MIME type

    Returns:
        str: Cleaned text content

    Raises:
        UnsupportedFileError: If the file type is not PDF, DOCX or TXT
        ExtractionError: If the file could not be read
    """
    kind = _KIND_BY_MIME.get(content_type or "") or file_extension(filename)
    reader = _READERS.get(kind)
    if reader is None:
        raise UnsupportedFileError(f"Unsupported file format: {content_type or 'unknown'}")

    try:
        text = reader(data)
    except Exception as e:
        raise ExtractionError(f"Failed to extract text from document: {e}") from e

    logger.info(f"  Extracted {len(text)} characters from {filename}")
    return clean_text(text)


def _decode_text(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


_KIND_BY_MIME = {PDF_MIME: "pdf", DOCX_MIME: "docx", TXT_MIME: "txt"}
_READERS = {
    "pdf": extract_text_from_pdf,
    "docx": extract_text_from_docx,
    "txt": _decode_text,
}


def compute_metrics(text: str) -> dict[str, int]:
    """Compute word, character and paragraph counts for extracted text."""
    return {
        "wordCount": len(text.split()),
        "characterCount": len(text),
        "paragraphCount": len([p for p in re.split(r"\n\s*\n", text) if p.strip()]),
    }
