"""Intent-driven actions on top of the state layer.

Every question about a document goes through DocumentStore.is_queryable
first. Nothing here reaches into store fields directly; all mutation goes
through store methods.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum

from docsgpt.client.config import ClientConfig
from docsgpt.state.base import AnalysisError, Analyst
from docsgpt.state.documents import DocumentStore
from docsgpt.state.layer import StateLayer
from docsgpt.state.models import ChatMessage, ChatRole

logger = logging.getLogger(__name__)


class Intent(str, Enum):
    CHAT = "chat"
    EXTRACT = "extract"
    SUMMARIZE = "summarize"
    ANALYZE = "analyze"


@dataclass(frozen=True)
class SuggestedQuestion:
    text: str
    intent: Intent


SUGGESTED_QUESTIONS = (
    SuggestedQuestion("What entities are mentioned?", Intent.EXTRACT),
    SuggestedQuestion("What are the key findings?", Intent.EXTRACT),
    SuggestedQuestion("What are the risks and opportunities?", Intent.ANALYZE),
    SuggestedQuestion("Summarize for executive review", Intent.SUMMARIZE),
)

# Checked in order; the first match wins.
_INTENT_PATTERNS = (
    (Intent.EXTRACT, re.compile(r"entities|mentioned|extract|findings|facts|numbers|dates", re.I)),
    (Intent.ANALYZE, re.compile(r"risks|opportunities|analyze|trends|issues|implications", re.I)),
    (Intent.SUMMARIZE, re.compile(r"summary|summarize|overview|brief|executive", re.I)),
)


@dataclass
class AnalysisResult:
    content: str
    intent: Intent


def infer_intent(question: str) -> Intent:
    """Guess an intent from the wording of a free-form question."""
    for intent, pattern in _INTENT_PATTERNS:
        if pattern.search(question or ""):
            return intent
    return Intent.CHAT


def get_suggested_questions() -> list[SuggestedQuestion]:
    return list(SUGGESTED_QUESTIONS)


def get_question_intent(question: str) -> Intent:
    """Return the intent of a suggested question, or CHAT for anything else."""
    for suggestion in SUGGESTED_QUESTIONS:
        if suggestion.text == question:
            return suggestion.intent
    return Intent.CHAT


def can_ask_questions(layer: StateLayer) -> bool:
    """True if the active session's active document is queryable."""
    document = layer.active_document()
    return document is not None and layer.documents.is_queryable(document.id)


def suggested_questions_for(layer: StateLayer) -> list[SuggestedQuestion]:
    """Suggestions are offered only before the first message about a queryable document."""
    session = layer.sessions.get_active_session()
    if session is None or not can_ask_questions(layer) or layer.chat.get_messages(session.id):
        return []
    return get_suggested_questions()


async def analyze_with_intent(
    documents: DocumentStore,
    doc_id: str,
    query: str,
    analyst: Analyst,
    config: ClientConfig,
    intent: Intent | None = None,
) -> AnalysisResult:
    """Ask the analysis collaborator about a queryable document.

    Args:
        documents: Document store holding the document
        doc_id: Id of the document to ask about
        query: The user's question
        analyst: Analysis collaborator
        config: Model selection settings
        intent: Explicit intent; inferred from the question if omitted

    Returns:
        AnalysisResult with the generated content and the intent used

    Raises:
        AnalysisError: If the document is not queryable, the configuration is
            incomplete, or the collaborator fails
    """
    final_intent = intent or infer_intent(query)

    if not documents.is_queryable(doc_id):
        raise AnalysisError("Document not available.")
    if not config.service or not config.model:
        raise AnalysisError("Configuration missing: service or model not set.")

    document = documents.get_document(doc_id)
    content = await analyst.analyze(
        document.artifact_id,
        final_intent.value,
        query or "",
        config.service,
        config.model,
        config.api_key,
    )
    if not content:
        raise AnalysisError("Analysis incomplete. Try again")
    return AnalysisResult(content=content, intent=final_intent)


async def ask(
    layer: StateLayer,
    analyst: Analyst,
    config: ClientConfig,
    question: str,
    intent: Intent | None = None,
) -> ChatMessage | None:
    """Send a question about the active document and record both turns.

    Returns:
        The assistant message (an answer or a failure notice), or None if
        nothing was sent because the question was blank, a send was already
        in flight, or the active document is not queryable
    """
    question = (question or "").strip()
    if not question or layer.chat.is_sending:
        return None

    session = layer.sessions.get_active_session()
    document = layer.active_document()
    if session is None or document is None or not layer.documents.is_queryable(document.id):
        return None

    layer.chat.set_sending(True)
    layer.chat.add_message(session.id, ChatRole.USER, question)
    try:
        result = await analyze_with_intent(
            layer.documents,
            document.id,
            question,
            analyst,
            config,
            intent or get_question_intent(question),
        )
        content = f"**Source document:** {document.metadata.name}\n\n{result.content}"
    except AnalysisError as e:
        logger.warning(f"⚠️ Analysis failed: {e}")
        content = f"Analysis failed: {e}"
    finally:
        layer.chat.set_sending(False)

    return layer.chat.add_message(session.id, ChatRole.ASSISTANT, content)
