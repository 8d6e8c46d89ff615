"""RavenDB persistence for the state layer.

This package provides a key/value substrate backed by RavenDB:
- Configuration management (RavenDBConfig)
- Document store creation and database helpers
- RavenDBSubstrate, usable wherever a KeyValueSubstrate is expected

Usage:
    from docsgpt.service.database import RavenDBSubstrate

    substrate = RavenDBSubstrate()
"""

from docsgpt.service.database.config import RavenDBConfig
from docsgpt.service.database.models import StoredValue
from docsgpt.service.database.substrate import (
    RavenDBSubstrate,
    create_database,
    create_document_store,
    database_exists,
)

__all__ = [
    # Config
    "RavenDBConfig",
    # Models
    "StoredValue",
    # Substrate
    "RavenDBSubstrate",
    "create_document_store",
    "create_database",
    "database_exists",
]
