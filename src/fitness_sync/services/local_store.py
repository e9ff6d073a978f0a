"""Best-effort local persistence of record collections."""

import json
import logging
from dataclasses import dataclass
from typing import Generic, Protocol, TypeVar

from fitness_sync.services.storage import KeyValueStorage

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RecordCodec(Protocol[T]):
    """Converts records to and from JSON-compatible documents."""

    def to_document(self, record: T) -> dict[str, object]:
        """Return the document form of a record."""

    def from_document(self, document: dict[str, object]) -> T:
        """Build a record from its document form."""


@dataclass
class LocalStore(Generic[T]):
    """Loads and saves whole collections; never raises to the caller.

    A missing, unreadable or non-list value loads as an empty collection;
    documents that fail to decode are skipped one by one.
    A failed save is logged and dropped, leaving in-memory state untouched.
    """

    storage: KeyValueStorage
    codec: RecordCodec[T]

    def load(self, key: str) -> list[T]:
        """Return the collection stored under a key."""
        try:
            raw = self.storage.get(key)
        except Exception:
            logger.exception("Failed to read local collection %s", key)
            return []
        if not raw:
            return []
        try:
            documents = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Discarding corrupt local collection %s", key)
            return []
        if not isinstance(documents, list):
            logger.warning("Local collection %s is not a list", key)
            return []
        records: list[T] = []
        for index, document in enumerate(documents):
            try:
                records.append(self.codec.from_document(document))
            except (KeyError, TypeError, ValueError, AttributeError):
                logger.warning("Skipping undecodable record %d in %s", index, key)
        return records

    def save(self, key: str, records: list[T]) -> bool:
        """Overwrite the collection under a key; return False if it failed."""
        try:
            payload = json.dumps([self.codec.to_document(record) for record in records])
            self.storage.set(key, payload)
        except Exception:
            logger.exception("Failed to persist local collection %s", key)
            return False
        return True

    def load_ids(self, key: str) -> set[str]:
        """Return a persisted set of record ids."""
        try:
            raw = self.storage.get(key)
            values = json.loads(raw) if raw else []
        except Exception:
            logger.warning("Discarding unreadable id set %s", key)
            return set()
        if not isinstance(values, list):
            return set()
        return {str(value) for value in values}

    def save_ids(self, key: str, ids: set[str]) -> bool:
        """Persist a set of record ids."""
        try:
            self.storage.set(key, json.dumps(sorted(ids)))
        except Exception:
            logger.exception("Failed to persist id set %s", key)
            return False
        return True
