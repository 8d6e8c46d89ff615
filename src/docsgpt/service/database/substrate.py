"""RavenDB-backed key/value substrate and database helpers."""

import logging

import requests
from ravendb import DocumentStore

from docsgpt.service.database.config import RavenDBConfig
from docsgpt.service.database.models import StoredValue
from docsgpt.state.substrate import SubstrateError

logger = logging.getLogger(__name__)

COLLECTION = "StateEntries"


def create_document_store(url: str | None = None, database: str | None = None) -> DocumentStore:
    """Create and initialize a DocumentStore for the state database.

    Args:
        url: RavenDB server URL (default: RAVENDB_URL)
        database: Database name (default: RAVENDB_DATABASE)

    Returns:
        DocumentStore: Initialized DocumentStore instance
    """
    config = RavenDBConfig.from_env(url, database)
    store = DocumentStore([config.url], config.database)
    store.initialize()
    return store


def database_exists(url: str | None = None, database: str | None = None) -> bool:
    """Check whether the state database can be queried.

    Returns:
        bool: True if database exists, False otherwise
    """
    try:
        store = create_document_store(url, database)
        with store.open_session() as session:
            list(session.query().take(0))
        store.close()
        return True
    except Exception:
        return False


def create_database(url: str | None = None, database: str | None = None) -> None:
    """Create the state database through the RavenDB admin API.

    Raises:
        requests.HTTPError: If the server rejects the request
    """
    config = RavenDBConfig.from_env(url, database)
    payload = {"DatabaseName": config.database, "Settings": {}, "Disabled": False}
    response = requests.put(config.admin_url, json=payload, timeout=10)
    response.raise_for_status()
    logger.info(f"🗄️ Created RavenDB database {config.database}")


class RavenDBSubstrate:
    """Substrate storing each key as one StoredValue document.

    The document id is the substrate key. Each call opens its own session,
    so a set is a whole-value replacement committed by save_changes().
    """

    def __init__(self, url: str | None = None, database: str | None = None) -> None:
        self.config = RavenDBConfig.from_env(url, database)
        self._store: DocumentStore | None = None

    @property
    def store(self) -> DocumentStore:
        if self._store is None:
            logger.debug(f"Connecting to RavenDB at {self.config.url} ({self.config.database})")
            self._store = create_document_store(self.config.url, self.config.database)
        return self._store

    def get(self, key: str) -> str | None:
        try:
            with self.store.open_session() as session:
                entry = session.load(key, StoredValue)
        except Exception as e:
            raise SubstrateError(f"RavenDB read of '{key}' failed: {e}") from e
        return entry.value if entry is not None else None

    def set(self, key: str, value: str) -> None:
        entry = StoredValue(Id=key, value=value)
        try:
            with self.store.open_session() as session:
                session.store(entry, key)
                session.advanced.get_metadata_for(entry)["@collection"] = COLLECTION
                session.save_changes()
        except Exception as e:
            raise SubstrateError(f"RavenDB write of '{key}' failed: {e}") from e

    def remove(self, key: str) -> None:
        try:
            with self.store.open_session() as session:
                session.delete(key)
                session.save_changes()
        except Exception as e:
            raise SubstrateError(f"RavenDB delete of '{key}' failed: {e}") from e

    def close(self) -> None:
        if self._store is not None:
            self._store.close()
            self._store = None
