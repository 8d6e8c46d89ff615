"""Flask route blueprints for the docsgpt backend."""

from docsgpt.service.routes.analyze import analyze_bp
from docsgpt.service.routes.config import ArtifactStore, RouteConfig, get_config, init_config
from docsgpt.service.routes.health import health_bp
from docsgpt.service.routes.parse import parse_bp

__all__ = [
    "analyze_bp",
    "health_bp",
    "parse_bp",
    "ArtifactStore",
    "RouteConfig",
    "init_config",
    "get_config",
]
