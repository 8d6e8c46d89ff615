"""Builds the LLM service an analysis request asks for."""

import logging
import os

from dotenv import load_dotenv

from docsgpt.constants import DEFAULT_OLLAMA_HOST, get_default_model
from docsgpt.llm.base import LLMService
from docsgpt.llm.gemini import GeminiService
from docsgpt.llm.ollama import OllamaService

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

SUPPORTED_SERVICES = ("ollama", "gemini")


def get_llm_service(config: dict | None = None) -> LLMService:
    """Create an LLM service from request settings with environment fallbacks.

    Args:
        config: Settings sent by the client, all optional:
            - 'service': "ollama" or "gemini" (fallback: LLM_SERVICE, then "ollama")
            - 'model': Model name (fallback: LLM_MODEL, then the service default)
            - 'host': Ollama host URL (fallback: OLLAMA_HOST)
            - 'api_key': Gemini API key (fallback: GEMINI_API_KEY, read by the client)

    Returns:
        LLMService: A provider ready to generate responses

    Raises:
        ValueError: If the service is not one of SUPPORTED_SERVICES
    """
    config = config or {}
    service_type = config.get("service") or os.getenv("LLM_SERVICE", "ollama")
    if service_type not in SUPPORTED_SERVICES:
        raise ValueError(f"Unsupported service type: {service_type}")

    model = config.get("model") or get_default_model(service_type)
    logger.debug(f"Selected LLM service {service_type} with model {model}")

    if service_type == "gemini":
        return GeminiService(model=model, api_key=config.get("api_key"))

    host = config.get("host") or os.getenv("OLLAMA_HOST", DEFAULT_OLLAMA_HOST)
    return OllamaService(host=host, model=model)
