"""Local key-value blob store used when no owner is signed in."""

from dataclasses import dataclass
from typing import Protocol


class LocalStore(Protocol):
    """String-keyed blob store with get/set/remove."""

    def get(self, key: str) -> str | None:
        """Return the stored blob, if present."""

    def set(self, key: str, value: str) -> None:
        """Store a blob under a key, replacing any previous value."""

    def remove(self, key: str) -> None:
        """Remove a key; missing keys are ignored."""


@dataclass
class InMemoryLocalStore(LocalStore):
    """Process-local store, lost on restart."""

    _entries: dict[str, str]

    def __init__(self) -> None:
        self._entries = {}

    def get(self, key: str) -> str | None:
        """Return the stored blob, if present."""
        return self._entries.get(key)

    def set(self, key: str, value: str) -> None:
        """Store a blob."""
        self._entries[key] = value

    def remove(self, key: str) -> None:
        """Remove a blob if present."""
        self._entries.pop(key, None)
