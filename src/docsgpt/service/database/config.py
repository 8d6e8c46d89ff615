"""Connection settings for the RavenDB state substrate."""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from docsgpt.constants import DEFAULT_RAVENDB_DATABASE, DEFAULT_RAVENDB_URL

# Load environment variables
load_dotenv()


@dataclass(frozen=True)
class RavenDBConfig:
    """Where client state lives when DOCSGPT_STATE_BACKEND=ravendb.

    Attributes:
        url: RavenDB server URL (RAVENDB_URL, default http://localhost:8080)
        database: Database holding the state entries (RAVENDB_DATABASE, default docsgpt)
    """

    url: str = DEFAULT_RAVENDB_URL
    database: str = DEFAULT_RAVENDB_DATABASE

    @classmethod
    def from_env(cls, url: str | None = None, database: str | None = None) -> "RavenDBConfig":
        """Resolve settings, preferring explicit values over the environment."""
        return cls(
            url=url or os.getenv("RAVENDB_URL", DEFAULT_RAVENDB_URL),
            database=database or os.getenv("RAVENDB_DATABASE", DEFAULT_RAVENDB_DATABASE),
        )

    @property
    def admin_url(self) -> str:
        return f"{self.url.rstrip('/')}/admin/databases"
