"""Analysis API route: answers intent-shaped questions about an artifact."""

import logging
from datetime import datetime, timezone

from flask import Blueprint, jsonify, request

from docsgpt.service.analysis import INTENT_PROMPTS, run_analysis
from docsgpt.service.routes.config import get_config

logger = logging.getLogger(__name__)

analyze_bp = Blueprint("analyze", __name__)


@analyze_bp.route("/analyze", methods=["POST"])
def analyze():
    """Analyze a parsed document with the configured LLM service.

    Request:
        {
            "artifactId": "3f2a...",
            "intent": "summarize",       # chat | extract | summarize | analyze
            "query": "What is ...?",     # used by the chat intent
            "service": "ollama",         # optional, defaults from environment
            "model": "llama3",           # optional
            "apiKey": "..."              # optional, Gemini only
        }

    Response:
        {
            "success": true,
            "artifactId": "3f2a...",
            "intent": "summarize",
            "result": "## Executive Summary ...",
            "metadata": {"textLength": 1234, "timestamp": "..."}
        }
    """
    config = get_config()
    data = request.get_json(silent=True) or {}

    artifact_id = data.get("artifactId")
    intent = data.get("intent")
    if not artifact_id or not intent:
        logger.warning("❌ Analyze request missing artifactId or intent")
        return jsonify({"error": "Missing required parameters: artifactId, intent"}), 400

    if intent not in INTENT_PROMPTS:
        return jsonify({"error": f"Invalid intent: {intent}"}), 400

    text = config.artifacts.get(artifact_id)
    if text is None:
        return jsonify({"error": "Document not parsed or missing. Please parse document first."}), 400

    logger.info(f"🔍 Analyzing artifact {artifact_id} ({len(text)} chars), intent={intent}")

    try:
        llm_service = config.llm_factory(
            {
                "service": data.get("service"),
                "model": data.get("model"),
                "api_key": data.get("apiKey"),
            }
        )
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    try:
        result = run_analysis(llm_service, text, intent, data.get("query", ""))
    except Exception as e:
        logger.error(f"❌ Analysis error: {e}", exc_info=True)
        return jsonify({"error": "Analysis failed"}), 500

    logger.info("✅ Analysis completed")
    return jsonify(
        {
            "success": True,
            "artifactId": artifact_id,
            "intent": intent,
            "result": result,
            "metadata": {
                "textLength": len(text),
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
        }
    )
