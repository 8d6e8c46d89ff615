"""Application-wide constants and defaults for docsgpt.

This module provides a single source of truth for storage keys, limits,
and other constants used throughout the application.
"""

import os

# =============================================================================
# Persistence
# =============================================================================
STORAGE_VERSION = 2

STORAGE_KEYS = {
    "sessions": "docsgpt-sessions-v2",
    "documents": "docsgpt-documents-v2",
    "messages": "docsgpt-messages-v2",
    "config": "docsgpt-config",
}

DEFAULT_STATE_DIR = "~/.docsgpt"
DEFAULT_STATE_BACKEND = "file"

PARSE_INTERRUPTED_ERROR = "Parsing interrupted by page reload"

DEFAULT_SESSION_NAME = "Untitled Session"

# =============================================================================
# File Upload Limits
# =============================================================================
MAX_UPLOAD_SIZE_BYTES = 10 * 1024 * 1024  # 10MB
MIN_EXTRACTED_TEXT_LENGTH = 10

SUPPORTED_EXTENSIONS = {"pdf", "docx", "txt"}
SUPPORTED_MIME_TYPES = {
    "application/pdf",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text/plain",
}

# =============================================================================
# LLM Settings
# =============================================================================
MAX_PROMPT_DOCUMENT_CHARS = 2000  # Document text sent with each prompt
ANALYSIS_TEMPERATURE = 0.1  # Sampling temperature for analysis requests

# =============================================================================
# Display Settings
# =============================================================================
CONTENT_PREVIEW_LENGTH = 200  # Characters to show in content previews

# =============================================================================
# Default URLs and Hosts
# =============================================================================
DEFAULT_BACKEND_URL = "http://localhost:3001"
DEFAULT_OLLAMA_HOST = "http://localhost:11434"
DEFAULT_RAVENDB_URL = "http://localhost:8080"
DEFAULT_RAVENDB_DATABASE = "docsgpt"

# =============================================================================
# Model Defaults
# =============================================================================
MODEL_DEFAULTS = {
    "ollama": "llama3",
    "gemini": "gemini-2.5-flash",
}


def get_default_model(service: str | None = None) -> str:
    """Get the default generation model for a given LLM service.

    Checks the LLM_MODEL environment variable first, then falls back
    to service-specific defaults.

    Args:
        service: The LLM service name ("ollama" or "gemini").
                If None, uses LLM_SERVICE env var or defaults to "ollama".

    Returns:
        str: The model name to use.
    """
    env_model = os.getenv("LLM_MODEL")
    if env_model:
        return env_model

    if service is None:
        service = os.getenv("LLM_SERVICE", "ollama")

    return MODEL_DEFAULTS.get(service, MODEL_DEFAULTS["ollama"])
