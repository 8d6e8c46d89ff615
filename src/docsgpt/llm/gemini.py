"""Google Gemini LLM service implementation."""

import logging

from google import genai
from google.genai import types

from docsgpt.constants import ANALYSIS_TEMPERATURE
from docsgpt.llm.base import log_messages, split_system_messages

logger = logging.getLogger(__name__)


class GeminiService:
    """Generates analyses with the Google Gemini API.

    The API key comes from the request when the user configured one,
    otherwise the client reads GEMINI_API_KEY from the environment.
    """

    def __init__(
        self,
        model: str,
        api_key: str | None = None,
        temperature: float = ANALYSIS_TEMPERATURE,
    ) -> None:
        self.model = model
        self.temperature = temperature
        logger.info(f"🤖 Initializing GeminiService: model={model}")
        self.client = genai.Client(api_key=api_key) if api_key else genai.Client()

    async def generate_response(self, messages: list[dict]) -> str:
        """Generate a response using Gemini.

        System messages become the system instruction; the remaining turns are
        joined into a single contents string.

        Args:
            messages: List of message dictionaries with 'role' and 'content' keys.

        Returns:
            str: The generated response content from the model.
        """
        log_messages(self.model, messages)
        system, turns = split_system_messages(messages)
        config = types.GenerateContentConfig(
            system_instruction=system or None,
            temperature=self.temperature,
        )

        try:
            response = self.client.models.generate_content(
                model=self.model,
                contents="\n".join(m.get("content", "") for m in turns),
                config=config,
            )
        except Exception as e:
            logger.error(f"❌ Gemini API error: {e}", exc_info=True)
            raise

        content = response.text or ""
        logger.info(f"✅ Response generated: {len(content)} characters")
        return content
