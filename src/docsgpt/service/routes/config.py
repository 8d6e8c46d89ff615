"""Shared configuration for route modules."""

import uuid
from dataclasses import dataclass, field
from typing import Callable

from flask import Flask, current_app

from docsgpt.llm import LLMService, get_llm_service

EXTENSION_KEY = "docsgpt"


class ArtifactStore:
    """In-memory extracted texts keyed by backend-issued artifact id.

    Parsing the same document again replaces its previous artifact.
    """

    def __init__(self) -> None:
        self.texts: dict[str, str] = {}
        self.by_document: dict[str, str] = {}

    def put(self, document_id: str, text: str) -> str:
        previous = self.by_document.get(document_id)
        if previous is not None:
            self.texts.pop(previous, None)
        artifact_id = uuid.uuid4().hex
        self.texts[artifact_id] = text
        self.by_document[document_id] = artifact_id
        return artifact_id

    def get(self, artifact_id: str) -> str | None:
        return self.texts.get(artifact_id)

    def __len__(self) -> int:
        return len(self.texts)


@dataclass
class RouteConfig:
    """Configuration container for Flask route dependencies.

    One instance is attached to each app so tests can build isolated apps.
    """

    artifacts: ArtifactStore = field(default_factory=ArtifactStore)
    llm_factory: Callable[[dict], LLMService] = get_llm_service


def get_config() -> RouteConfig:
    """Get the route configuration of the current app.

    Returns:
        RouteConfig instance with current settings
    """
    return current_app.extensions[EXTENSION_KEY]


def init_config(app: Flask, llm_factory: Callable[[dict], LLMService] | None = None) -> RouteConfig:
    """Attach a fresh route configuration to an app.

    Args:
        app: Flask application
        llm_factory: Callable building an LLM service from a config dict
    """
    config = RouteConfig()
    if llm_factory is not None:
        config.llm_factory = llm_factory
    app.extensions[EXTENSION_KEY] = config
    return config
