"""Client configuration: backend location and model selection."""

import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path

from dotenv import load_dotenv

from docsgpt.constants import (
    DEFAULT_BACKEND_URL,
    DEFAULT_STATE_BACKEND,
    DEFAULT_STATE_DIR,
    get_default_model,
)
from docsgpt.state.codec import PersistenceCodec

# Load environment variables
load_dotenv()


def get_state_dir() -> Path:
    """Return the directory holding persisted client state."""
    return Path(os.getenv("DOCSGPT_STATE_DIR", DEFAULT_STATE_DIR)).expanduser()


def get_state_backend() -> str:
    """Return the substrate kind to persist state with ("file" or "ravendb")."""
    return os.getenv("DOCSGPT_STATE_BACKEND", DEFAULT_STATE_BACKEND)


@dataclass
class ClientConfig:
    """Settings the client sends along with analysis requests.

    Values persisted through the codec's config family override the
    environment defaults.
    """

    backend_url: str = DEFAULT_BACKEND_URL
    service: str = "ollama"
    model: str = ""
    api_key: str | None = None

    @classmethod
    def from_env(cls) -> "ClientConfig":
        service = os.getenv("LLM_SERVICE", "ollama")
        return cls(
            backend_url=os.getenv("DOCSGPT_BACKEND_URL", DEFAULT_BACKEND_URL),
            service=service,
            model=get_default_model(service),
            api_key=os.getenv("GEMINI_API_KEY") or None,
        )

    @classmethod
    def load(cls, codec: PersistenceCodec) -> "ClientConfig":
        """Load persisted settings on top of the environment defaults."""
        config = cls.from_env()
        saved = codec.load_config() or {}
        for f in fields(cls):
            value = saved.get(f.name)
            if isinstance(value, str) and value:
                setattr(config, f.name, value)
        return config

    def save(self, codec: PersistenceCodec) -> bool:
        return codec.save_config(asdict(self))

    def is_complete(self) -> bool:
        return bool(self.backend_url and self.service and self.model)

    def describe(self) -> dict[str, str]:
        """Return the settings for display, with the API key masked."""
        data = {k: v or "" for k, v in asdict(self).items()}
        if self.api_key:
            visible = self.api_key[-4:] if len(self.api_key) > 8 else ""
            data["api_key"] = "*" * 8 + visible
        return data
