"""LLM providers used by the analysis backend.

- OllamaService: models served by a local Ollama server
- GeminiService: Google Gemini API

Usage:
    from docsgpt.llm import get_llm_service

    service = get_llm_service({"service": "gemini", "model": "gemini-2.5-flash"})
    text = await service.generate_response(messages)
"""

from docsgpt.llm.base import LLMService, split_system_messages
from docsgpt.llm.factory import SUPPORTED_SERVICES, get_llm_service
from docsgpt.llm.gemini import GeminiService
from docsgpt.llm.ollama import OllamaService

__all__ = [
    "LLMService",
    "OllamaService",
    "GeminiService",
    "SUPPORTED_SERVICES",
    "get_llm_service",
    "split_system_messages",
]
