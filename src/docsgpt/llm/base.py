"""LLM service protocol and message helpers shared by the providers."""

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class LLMService(Protocol):
    """A chat model that turns system/user messages into text.

    The analysis backend only ever sends one system message followed by one
    user message, but providers accept any role sequence.
    """

    model: str

    async def generate_response(self, messages: list[dict]) -> str:
        """Generate a completion for the given messages.

        Args:
            messages: Dicts with 'role' ("system", "user" or "assistant")
                and 'content' keys

        Returns:
            str: Generated text; empty if the model returned nothing
        """
        ...


def split_system_messages(messages: list[dict]) -> tuple[str, list[dict]]:
    """Separate system instructions from the conversation turns.

    Returns:
        Tuple of (joined system text, remaining messages in order)
    """
    system = "\n".join(m.get("content", "") for m in messages if m.get("role") == "system")
    turns = [m for m in messages if m.get("role") != "system"]
    return system, turns


def log_messages(model: str, messages: list[dict]) -> None:
    logger.info(f"🗣️  Generating response with {model} ({len(messages)} messages)")
    for i, msg in enumerate(messages):
        preview = msg.get("content", "")[:100]
        logger.debug(f"  Message {i + 1} ({msg.get('role', 'unknown')}): {preview}...")
