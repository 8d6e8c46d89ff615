"""Flask backend for document text extraction and analysis.

This module provides the HTTP service the client talks to: it extracts
text from uploaded documents, keeps it in memory under an artifact id,
and answers intent-shaped questions about an artifact with an LLM.
"""

import logging
import os
from typing import Callable

from dotenv import load_dotenv
from flask import Flask, jsonify

from docsgpt.constants import MAX_UPLOAD_SIZE_BYTES
from docsgpt.llm import LLMService
from docsgpt.service.routes import analyze_bp, health_bp, init_config, parse_bp

# Configure logging
log_level = os.getenv("LOG_LEVEL", "INFO")
logging.basicConfig(
    level=getattr(logging, log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Load environment variables
load_dotenv()
logger.debug("Environment variables loaded")


def create_app(llm_factory: Callable[[dict], LLMService] | None = None) -> Flask:
    """Factory function for creating the Flask application.

    This function is used by WSGI servers like gunicorn to create the app.

    Args:
        llm_factory: Optional callable building an LLM service from a config dict

    Returns:
        Flask: The configured Flask application instance
    """
    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = MAX_UPLOAD_SIZE_BYTES

    init_config(app, llm_factory=llm_factory)

    # Register blueprints
    app.register_blueprint(health_bp)
    app.register_blueprint(parse_bp)
    app.register_blueprint(analyze_bp)

    @app.errorhandler(413)
    def file_too_large(error):
        max_mb = MAX_UPLOAD_SIZE_BYTES // (1024 * 1024)
        return jsonify({"error": f"File too large (max {max_mb}MB)"}), 413

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({"error": "Endpoint not found"}), 404

    logger.debug("Flask app created")
    return app


def main() -> None:
    """Entry point for the backend command-line interface."""
    print("🚀 Starting docsgpt backend...")

    app = create_app()

    host = os.getenv("FLASK_HOST", "0.0.0.0")
    port = int(os.getenv("FLASK_PORT", "3001"))
    debug = os.getenv("FLASK_ENV", "development") == "development"

    print(f"🌐 Starting Flask server on http://{host}:{port}")
    print(f"🔧 Debug mode: {debug}")
    print(f"❤️  Health check available at http://{host}:{port}/health")
    print("📝 Press CTRL+C to quit")

    app.run(host=host, port=port, debug=debug)


if __name__ == "__main__":
    main()
