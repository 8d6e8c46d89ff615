"""Health check API routes."""

from datetime import datetime, timezone

from flask import Blueprint, jsonify

from docsgpt.service.routes.config import get_config

health_bp = Blueprint("health", __name__)


@health_bp.route("/health", methods=["GET"])
def health():
    """Health check endpoint.

    Returns:
        JSON with service status and the number of stored artifacts
    """
    return jsonify(
        {
            "status": "ok",
            "artifacts": len(get_config().artifacts),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
    )
