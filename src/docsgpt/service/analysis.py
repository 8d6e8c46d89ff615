"""Intent-shaped prompts and document analysis via an LLM service.

Each intent has a system prompt and a user prompt template with a
mandatory output format. The document text is truncated before it is
placed in the prompt.
"""

import asyncio
import logging

from docsgpt.constants import MAX_PROMPT_DOCUMENT_CHARS
from docsgpt.llm import LLMService

logger = logging.getLogger(__name__)

INTENT_PROMPTS = {
    "extract": {
        "system": "You are a document extraction system. Follow the EXACT format specified.",
        "user": """Extract key information from this document.

OUTPUT FORMAT (MANDATORY):
## Extracted Information
### Entities
- Entity 1
- Entity 2
### Key Facts
- Fact 1
- Fact 2
### Numbers & Dates
- Number/Date 1
- Number/Date 2

Document:
{document_text}""",
    },
    "summarize": {
        "system": "You are a document summarization system. Follow the EXACT format specified.",
        "user": """Summarize this document for executive review.

OUTPUT FORMAT (MANDATORY):
## Executive Summary
- Key point 1
- Key point 2
- Key point 3

## Main Findings
- Finding 1
- Finding 2
- Finding 3

Document:
{document_text}""",
    },
    "analyze": {
        "system": "You are a document analysis system. Follow the EXACT format specified.",
        "user": """Analyze this document for risks, opportunities, and implications.

OUTPUT FORMAT (MANDATORY):
## Analysis Results
### High Priority
- Critical item 1
- Critical item 2
### Medium Priority
- Important item 1
- Important item 2
### Low Priority
- Minor item 1
- Minor item 2

Document:
{document_text}""",
    },
    "chat": {
        "system": "Provide direct, helpful responses about the document.",
        "user": "Answer this question about the document:\n\n{document_text}\n\nQuestion: {query}",
    },
}

EMPTY_RESULT = "Analysis completed but no content returned"


def truncate_document(text: str, limit: int = MAX_PROMPT_DOCUMENT_CHARS) -> str:
    return text if len(text) <= limit else text[:limit] + "..."


def build_messages(text: str, intent: str, query: str = "") -> list[dict]:
    """Build the chat messages for an intent.

    Args:
        text: Extracted document text
        intent: One of the keys of INTENT_PROMPTS
        query: The user's question (used by the chat intent)

    Returns:
        list[dict]: System and user messages

    Raises:
        ValueError: If the intent is unknown
    """
    if intent not in INTENT_PROMPTS:
        supported = ", ".join(INTENT_PROMPTS)
        raise ValueError(f"Invalid intent: {intent}. Supported: {supported}")

    template = INTENT_PROMPTS[intent]
    user_prompt = template["user"].replace("{document_text}", truncate_document(text))
    user_prompt = user_prompt.replace("{query}", query or "")
    return [
        {"role": "system", "content": template["system"]},
        {"role": "user", "content": user_prompt},
    ]


async def analyze_document(llm_service: LLMService, text: str, intent: str, query: str = "") -> str:
    """Run an intent-shaped analysis of document text.

    Returns:
        str: The generated content, or a placeholder if the model returned nothing
    """
    messages = build_messages(text, intent, query)
    logger.info(f"🤖 Analyzing {len(text)} characters with intent '{intent}'")
    content = await llm_service.generate_response(messages)
    return content or EMPTY_RESULT


def run_analysis(llm_service: LLMService, text: str, intent: str, query: str = "") -> str:
    """Run analyze_document to completion from synchronous code.

    Flask views are synchronous, so each call gets its own event loop,
    which is closed afterwards.
    """
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(analyze_document(llm_service, text, intent, query))
    finally:
        asyncio.set_event_loop(None)
        loop.close()
