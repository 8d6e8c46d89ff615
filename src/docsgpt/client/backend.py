"""HTTP client for the docsgpt backend.

BackendClient implements both collaborator protocols of the state layer:
Extractor (parse, get_metrics) and Analyst (analyze). Blocking requests
calls run in a worker thread so awaiting them suspends only the calling
coroutine.
"""

import asyncio
import logging
from typing import Any

import requests

from docsgpt.constants import DEFAULT_BACKEND_URL
from docsgpt.state.base import AnalysisError, ParseOutcome
from docsgpt.state.models import UploadedFile

logger = logging.getLogger(__name__)


def _error_message(response: requests.Response, default: str) -> str:
    """Extract the backend's error message from a failed response."""
    try:
        body = response.json()
    except ValueError:
        return response.text.strip() or default
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return default


class BackendClient:
    """Client for the extraction and analysis endpoints of the backend."""

    def __init__(self, base_url: str = DEFAULT_BACKEND_URL, timeout: float | None = None) -> None:
        """Initialize the client.

        Args:
            base_url: Backend root URL (e.g., "http://localhost:3001")
            timeout: Optional per-request timeout in seconds (default: none)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    # -- extraction ---------------------------------------------------------

    async def parse(self, file: UploadedFile, document_id: str) -> ParseOutcome:
        return await asyncio.to_thread(self.parse_sync, file, document_id)

    def parse_sync(self, file: UploadedFile, document_id: str) -> ParseOutcome:
        """Upload a file to /parse and translate the response into a ParseOutcome."""
        logger.info(f"📤 Sending {file.name} ({file.size} bytes) for parsing")
        try:
            response = requests.post(
                f"{self.base_url}/parse",
                files={
                    "document": (
                        file.name,
                        file.data,
                        file.content_type or "application/octet-stream",
                    )
                },
                data={"documentId": document_id},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning(f"⚠️ Parse request failed: {e}")
            return ParseOutcome.failed(f"Could not reach backend: {e}")

        if not response.ok:
            return ParseOutcome.failed(_error_message(response, "Parse failed"))

        try:
            body = response.json()
        except ValueError:
            return ParseOutcome.failed("Parse failed: invalid backend response")

        artifact_id = body.get("artifactId") if isinstance(body, dict) else None
        if not artifact_id or not body.get("success"):
            return ParseOutcome.failed("Parse failed: backend did not issue an artifact")
        return ParseOutcome.ok(artifact_id, body.get("textLength"))

    async def get_metrics(self, artifact_id: str) -> dict[str, Any] | None:
        return await asyncio.to_thread(self.get_metrics_sync, artifact_id)

    def get_metrics_sync(self, artifact_id: str) -> dict[str, Any] | None:
        try:
            response = requests.get(f"{self.base_url}/metrics/{artifact_id}", timeout=self.timeout)
            if not response.ok:
                return None
            body = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"⚠️ Failed to fetch content metrics: {e}")
            return None
        return body.get("metrics") if body.get("success") else None

    # -- analysis -----------------------------------------------------------

    async def analyze(
        self,
        artifact_id: str,
        intent: str,
        query: str = "",
        service: str | None = None,
        model: str | None = None,
        api_key: str | None = None,
    ) -> str:
        return await asyncio.to_thread(
            self.analyze_sync, artifact_id, intent, query, service, model, api_key
        )

    def analyze_sync(
        self,
        artifact_id: str,
        intent: str,
        query: str = "",
        service: str | None = None,
        model: str | None = None,
        api_key: str | None = None,
    ) -> str:
        """POST /analyze and return the generated content.

        Raises:
            AnalysisError: With a short user-facing message on any failure
        """
        payload = {
            "artifactId": artifact_id,
            "intent": intent,
            "query": query or "",
            "service": service,
            "model": model,
        }
        if api_key:
            payload["apiKey"] = api_key

        logger.info(f"🔍 Requesting '{intent}' analysis of artifact {artifact_id}")
        try:
            response = requests.post(f"{self.base_url}/analyze", json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning(f"⚠️ Analyze request failed: {e}")
            raise AnalysisError("Connection lost. Retry") from e

        if response.status_code == 401:
            raise AnalysisError("Check API key and try again")
        if response.status_code >= 500:
            raise AnalysisError("Connection lost. Retry")
        if not response.ok:
            raise AnalysisError(_error_message(response, "Analysis failed. Try again"))

        try:
            body = response.json()
        except ValueError as e:
            raise AnalysisError("Analysis incomplete. Try again") from e
        if not isinstance(body, dict) or not body.get("success") or not body.get("result"):
            raise AnalysisError("Analysis incomplete. Try again")
        return body["result"]

    # -- status -------------------------------------------------------------

    def health(self, timeout: float = 5.0) -> bool:
        """Return True if the backend answers its health check."""
        try:
            response = requests.get(f"{self.base_url}/health", timeout=timeout)
            return response.status_code == 200
        except requests.RequestException:
            return False
