"""Document parsing and metrics API routes."""

import logging
from datetime import datetime, timezone

from flask import Blueprint, jsonify, request

from docsgpt.constants import MIN_EXTRACTED_TEXT_LENGTH
from docsgpt.service.extractor import (
    UnsupportedFileError,
    compute_metrics,
    extract_text,
    is_supported,
)
from docsgpt.service.routes.config import get_config

logger = logging.getLogger(__name__)

parse_bp = Blueprint("parse", __name__)

UNSUPPORTED_MESSAGE = "Only PDF, DOCX, and TXT files are supported"


@parse_bp.route("/parse", methods=["POST"])
def parse_document():
    """Extract text from an uploaded document and store it as an artifact.

    Expects multipart form data with:
        - document: The file (PDF, DOCX or TXT)
        - documentId: Client-side id of the document

    Returns:
        JSON response with the new artifact id and extracted text length
    """
    upload = request.files.get("document")
    document_id = request.form.get("documentId")

    if upload is None or not upload.filename or not document_id:
        logger.warning("❌ Parse request without document or documentId")
        return jsonify({"error": "Document file and documentId required"}), 400

    if not is_supported(upload.filename, upload.mimetype):
        logger.warning(f"❌ Unsupported file type: {upload.filename} ({upload.mimetype})")
        return jsonify({"error": UNSUPPORTED_MESSAGE}), 400

    logger.info(f"📤 Parsing document {document_id}: {upload.filename}")

    try:
        text = extract_text(upload.read(), upload.filename, upload.mimetype)
    except UnsupportedFileError:
        return jsonify({"error": UNSUPPORTED_MESSAGE}), 400
    except Exception as e:
        logger.error(f"❌ Parse error for {document_id}: {e}", exc_info=True)
        return jsonify({"error": "Document parsing failed"}), 500

    if len(text) < MIN_EXTRACTED_TEXT_LENGTH:
        logger.warning(f"❌ Document {document_id} has insufficient text ({len(text)} chars)")
        return jsonify({"error": "Document contains insufficient text"}), 400

    artifact_id = get_config().artifacts.put(document_id, text)
    logger.info(f"✅ Stored artifact {artifact_id} ({len(text)} chars) for {document_id}")

    return jsonify(
        {
            "success": True,
            "documentId": document_id,
            "artifactId": artifact_id,
            "textLength": len(text),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
    )


@parse_bp.route("/metrics/<artifact_id>", methods=["GET"])
def get_metrics(artifact_id: str):
    """Compute word, character and paragraph counts for a stored artifact.

    Returns:
        JSON response with metrics, or 404 if the artifact is unknown
    """
    text = get_config().artifacts.get(artifact_id)
    if text is None:
        return jsonify({"error": "Document not found"}), 404

    metrics = compute_metrics(text)
    logger.debug(f"Metrics for {artifact_id}: {metrics}")
    return jsonify(
        {
            "success": True,
            "artifactId": artifact_id,
            "metrics": metrics,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
    )
