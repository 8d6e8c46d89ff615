"""Data models for RavenDB document storage."""

from dataclasses import dataclass


@dataclass(eq=False)
class StoredValue:
    """One substrate entry stored as a RavenDB document.

    Note: eq=False keeps instances hashable by identity, which RavenDB's
    session entity tracking requires.

    Attributes:
        Id: RavenDB document ID (the substrate key)
        value: The serialized string value
    """

    Id: str | None = None
    value: str = ""

    def __hash__(self) -> int:
        """Hash by object identity for RavenDB session tracking."""
        return id(self)
