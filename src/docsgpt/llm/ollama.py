"""Ollama LLM service implementation."""

import logging

import ollama

from docsgpt.constants import ANALYSIS_TEMPERATURE
from docsgpt.llm.base import log_messages

logger = logging.getLogger(__name__)


class OllamaService:
    """Generates analyses with a model served by a local Ollama server."""

    def __init__(self, host: str, model: str, temperature: float = ANALYSIS_TEMPERATURE) -> None:
        """Initialize the Ollama service.

        Args:
            host: The Ollama server host URL (e.g., "http://localhost:11434")
            model: The model name to use (e.g., "llama3")
            temperature: Sampling temperature passed with every request
        """
        self.host = host
        self.model = model
        self.temperature = temperature
        logger.info(f"🤖 Initializing OllamaService: host={host}, model={model}")
        self.client = ollama.Client(host=host)

    async def generate_response(self, messages: list[dict]) -> str:
        """Send the messages to Ollama's chat endpoint.

        Ollama understands system messages natively, so they are passed as is.
        """
        log_messages(self.model, messages)
        try:
            response = self.client.chat(
                model=self.model,
                messages=messages,
                options={"temperature": self.temperature},
            )
        except Exception as e:
            logger.error(f"❌ Ollama API error: {e}", exc_info=True)
            raise

        content = response.message.content or ""
        logger.info(f"✅ Response generated: {len(content)} characters")
        return content
