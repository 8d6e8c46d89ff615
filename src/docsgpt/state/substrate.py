"""Key/value string substrates backing the persistence codec.

A substrate stores whole string values under a small fixed set of keys.
It supports get, set and remove; there are no partial updates. Any
failure to read or write is raised as SubstrateError so the codec can
treat it uniformly.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class SubstrateError(Exception):
    """Raised when a substrate cannot read, write or remove a value."""


class KeyValueSubstrate(Protocol):
    """Protocol for synchronous key/value string stores."""

    def get(self, key: str) -> str | None:
        """Return the value stored under key, or None if absent."""
        ...

    def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""
        ...

    def remove(self, key: str) -> None:
        """Remove key. Removing an absent key is not an error."""
        ...


class MemorySubstrate:
    """In-process substrate, optionally limited to a byte quota.

    The quota counts the UTF-8 size of all stored values and mimics the
    quota-exceeded failure of browser storage.
    """

    def __init__(self, quota_bytes: int | None = None) -> None:
        self.quota_bytes = quota_bytes
        self._values: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        if self.quota_bytes is not None:
            others = sum(len(v.encode("utf-8")) for k, v in self._values.items() if k != key)
            if others + len(value.encode("utf-8")) > self.quota_bytes:
                raise SubstrateError(f"Quota of {self.quota_bytes} bytes exceeded writing '{key}'")
        self._values[key] = value

    def remove(self, key: str) -> None:
        self._values.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._values)


class FileSubstrate:
    """Substrate storing each key as a JSON file inside a state directory.

    Writes go to a temporary file in the same directory and are moved into
    place with os.replace, so a reader only ever sees a whole value.
    """

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory).expanduser()

    def _path_for(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self._path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise SubstrateError(f"Failed to read {path}: {e}") from e

    def set(self, key: str, value: str) -> None:
        path = self._path_for(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(value)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise SubstrateError(f"Failed to write {path}: {e}") from e
        logger.debug(f"Wrote {len(value)} characters to {path}")

    def remove(self, key: str) -> None:
        path = self._path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise SubstrateError(f"Failed to remove {path}: {e}") from e
