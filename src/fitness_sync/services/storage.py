"""Key-value storage abstractions."""

from dataclasses import dataclass
from typing import Protocol


class KeyValueStorage(Protocol):
    """Durable string storage addressed by key."""

    def get(self, key: str) -> str | None:
        """Return the stored value, if present."""

    def set(self, key: str, value: str) -> None:
        """Overwrite the value stored under a key."""


@dataclass
class InMemoryStorage(KeyValueStorage):
    """Process-local storage, used when no data directory is configured."""

    _values: dict[str, str]

    def __init__(self) -> None:
        self._values = {}

    def get(self, key: str) -> str | None:
        """Return the stored value, if present."""
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        """Store a value under a key."""
        self._values[key] = value
