"""Offline-first synchronization of a record collection.

Every mutation commits to memory and to the local store before returning,
then reconciles with the remote collection in a detached task. Remote
failures are logged and leave local state as it is: an add keeps its
provisional record, a delete stays deleted, a fetch keeps the cached data.
"""

import asyncio
import logging
from collections.abc import Callable, Coroutine
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Any, Generic, Protocol

from fitness_sync.config import SyncConfig
from fitness_sync.domain.identity import is_provisional, new_provisional_id
from fitness_sync.domain.sync import (
    Applied,
    AppliedLocalOnly,
    PendingSync,
    RecordT,
    SyncOutcome,
    SyncPhase,
)
from fitness_sync.services.credentials import CredentialProvider
from fitness_sync.services.local_store import LocalStore

logger = logging.getLogger(__name__)

Listener = Callable[[list[Any]], None]


class RemoteCollection(Protocol[RecordT]):
    """Remote source of truth for one collection."""

    async def list(self, owner_key: str, credential: str) -> list[RecordT]:
        """Return every record the remote holds for an owner."""

    async def create(self, record: RecordT, credential: str) -> RecordT:
        """Store a record and return it with its confirmed identity."""

    async def delete(self, record_id: str, credential: str) -> None:
        """Delete a record by its confirmed id."""


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class SyncEngine(Generic[RecordT]):
    """Optimistic local mutation with background remote reconciliation."""

    config: SyncConfig
    local_store: LocalStore[RecordT]
    remote: RemoteCollection[RecordT]
    credentials: CredentialProvider
    clock: Callable[[], datetime] = _utc_now
    last_error: str | None = field(default=None, init=False)
    _records: list[RecordT] | None = field(default=None, init=False, repr=False)
    _tombstones: set[str] = field(default_factory=set, init=False, repr=False)
    _loaded_key: str | None = field(default=None, init=False, repr=False)
    _creating: set[str] = field(default_factory=set, init=False, repr=False)
    _pending: set[asyncio.Task] = field(default_factory=set, init=False, repr=False)
    _listeners: list[Listener] = field(default_factory=list, init=False, repr=False)
    _fetch_watchers: list[set[str]] = field(
        default_factory=list, init=False, repr=False
    )

    @property
    def records(self) -> list[RecordT]:
        """Return a snapshot of the in-memory collection."""
        return list(self._current())

    @property
    def pending_count(self) -> int:
        """Return the number of reconciliations still running."""
        return len(self._pending)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call a listener with the collection after every change."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def report_input_error(self, message: str) -> None:
        """Record a rejected caller input for transient display."""
        self.last_error = message

    async def fetch(self) -> list[RecordT]:
        """Show cached records, then refresh them from the remote collection.

        A successful list also forgets tombstones for ids the remote no
        longer holds.
        """
        self.last_error = None
        key = self._storage_key()
        cached = self._current()
        self._notify(cached)
        confirmed_meanwhile: set[str] = set()
        self._fetch_watchers.append(confirmed_meanwhile)
        try:
            remote_records = await self.remote.list(
                self.credentials.owner_key(), self.credentials.credential()
            )
        except Exception:
            logger.warning(
                "Remote list failed for %s, using cached data", key, exc_info=True
            )
            return list(self._records_for(key))
        finally:
            self._fetch_watchers = [
                watcher
                for watcher in self._fetch_watchers
                if watcher is not confirmed_meanwhile
            ]
        merged = self._merge_remote(key, remote_records, confirmed_meanwhile)
        self._prune_tombstones(key, remote_records, confirmed_meanwhile)
        self._store_records(key, merged)
        return list(merged)

    async def add(self, record: RecordT) -> PendingSync[RecordT]:
        """Commit a new record locally and start its remote creation."""
        self.last_error = None
        now = self.clock()
        provisional = replace(
            record, id=new_provisional_id(now), created_at=now, updated_at=now
        )
        key = self._storage_key()
        if self.config.singleton:
            records = [provisional]
        else:
            records = [*self._current(), provisional]
        self._store_records(key, records)
        return self._start_create(key, provisional)

    async def upsert(self, record: RecordT) -> PendingSync[RecordT]:
        """Commit a record under its id, allocating one if it has none."""
        self.last_error = None
        now = self.clock()
        staged = replace(
            record,
            id=record.id or new_provisional_id(now),
            created_at=record.created_at or now,
            updated_at=now,
        )
        key = self._storage_key()
        if self.config.singleton:
            records = [staged]
        else:
            records = _replace_or_append(self._current(), staged)
        self._store_records(key, records)
        return self._start_create(key, staged)

    async def delete(self, record_id: str) -> PendingSync[RecordT]:
        """Remove a record locally and start its remote deletion."""
        self.last_error = None
        key = self._storage_key()
        current = self._current()
        removed = next((item for item in current if item.id == record_id), None)
        self._store_records(key, [item for item in current if item.id != record_id])
        pending: PendingSync[RecordT] = PendingSync(
            record=removed, phase=SyncPhase.OPTIMISTIC_COMMIT
        )
        if is_provisional(record_id):
            if record_id in self._creating:
                self._add_tombstone(key, record_id)
            pending.phase = SyncPhase.RECONCILED
            return pending
        self._add_tombstone(key, record_id)
        pending.task = self._spawn(self._reconcile_delete(key, record_id, pending))
        return pending

    async def drain(self) -> None:
        """Wait until every in-flight reconciliation has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def _start_create(self, key: str, staged: RecordT) -> PendingSync[RecordT]:
        pending: PendingSync[RecordT] = PendingSync(
            record=staged, phase=SyncPhase.OPTIMISTIC_COMMIT
        )
        self._creating.add(staged.id)
        pending.task = self._spawn(self._reconcile_create(key, staged, pending))
        return pending

    async def _reconcile_create(
        self, key: str, staged: RecordT, pending: PendingSync[RecordT]
    ) -> SyncOutcome:
        pending.phase = SyncPhase.REMOTE_ATTEMPT
        try:
            confirmed = await self.remote.create(staged, self.credentials.credential())
            if not confirmed.id:
                raise ValueError("Remote create returned a record without an id")
        except Exception as exc:
            logger.warning(
                "Remote create failed for %s in %s, kept locally",
                staged.id,
                key,
                exc_info=True,
            )
            if is_provisional(staged.id):
                self._drop_tombstone(key, staged.id)
            pending.phase = SyncPhase.DEGRADED
            return AppliedLocalOnly(staged, error=str(exc))
        finally:
            self._creating.discard(staged.id)
        for watcher in self._fetch_watchers:
            watcher.add(confirmed.id)

        tombstones = self._tombstones_for(key)
        if staged.id in tombstones:
            # Deleted locally while the create was in flight.
            self._replace_tombstone(key, staged.id, confirmed.id)
            outcome = await self._reconcile_delete(key, confirmed.id, pending)
            if isinstance(outcome, AppliedLocalOnly):
                return AppliedLocalOnly(None, error=outcome.error)
            return Applied(None)

        records = self._records_for(key)
        self._store_records(key, _swap(records, staged, confirmed))
        pending.phase = SyncPhase.RECONCILED
        return Applied(confirmed)

    async def _reconcile_delete(
        self, key: str, record_id: str, pending: PendingSync[RecordT]
    ) -> SyncOutcome:
        pending.phase = SyncPhase.REMOTE_ATTEMPT
        try:
            await self.remote.delete(record_id, self.credentials.credential())
        except Exception as exc:
            logger.warning(
                "Remote delete failed for %s in %s, deleted locally only",
                record_id,
                key,
                exc_info=True,
            )
            pending.phase = SyncPhase.DEGRADED
            return AppliedLocalOnly(pending.record, error=str(exc))
        self._drop_tombstone(key, record_id)
        pending.phase = SyncPhase.RECONCILED
        return Applied(pending.record)

    def _merge_remote(
        self,
        key: str,
        remote_records: list[RecordT],
        confirmed_meanwhile: set[str],
    ) -> list[RecordT]:
        tombstones = self._tombstones_for(key)
        confirmed = [item for item in remote_records if item.id not in tombstones]
        seen = {item.id for item in confirmed}
        # Records the list could not have seen yet stay.
        unlisted = [
            item
            for item in self._records_for(key)
            if item.id not in seen
            and (is_provisional(item.id) or item.id in confirmed_meanwhile)
        ]
        if self.config.singleton:
            return (unlisted or confirmed)[-1:]
        return confirmed + unlisted

    def _prune_tombstones(
        self,
        key: str,
        remote_records: list[RecordT],
        confirmed_meanwhile: set[str],
    ) -> None:
        listed = {item.id for item in remote_records}
        tombstones = self._tombstones_for(key)
        kept = {
            record_id
            for record_id in tombstones
            if record_id in listed
            or record_id in confirmed_meanwhile
            or is_provisional(record_id)
        }
        if kept != tombstones:
            self._store_tombstones(key, kept)

    def _spawn(self, coro: Coroutine[Any, Any, SyncOutcome]) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    def _storage_key(self) -> str:
        return self.config.storage_key(self.credentials.owner_key())

    def _current(self) -> list[RecordT]:
        key = self._storage_key()
        if self._records is None or self._loaded_key != key:
            self._loaded_key = key
            self._records = self.local_store.load(key)
            self._tombstones = self.local_store.load_ids(_tombstone_key(key))
        return self._records

    def _records_for(self, key: str) -> list[RecordT]:
        if key == self._loaded_key and self._records is not None:
            return self._records
        return self.local_store.load(key)

    def _store_records(self, key: str, records: list[RecordT]) -> None:
        self.local_store.save(key, records)
        if key == self._loaded_key:
            self._records = records
            self._notify(records)

    def _tombstones_for(self, key: str) -> set[str]:
        if key == self._loaded_key:
            return self._tombstones
        return self.local_store.load_ids(_tombstone_key(key))

    def _store_tombstones(self, key: str, ids: set[str]) -> None:
        self.local_store.save_ids(_tombstone_key(key), ids)
        if key == self._loaded_key:
            self._tombstones = ids

    def _add_tombstone(self, key: str, record_id: str) -> None:
        self._store_tombstones(key, self._tombstones_for(key) | {record_id})

    def _drop_tombstone(self, key: str, record_id: str) -> None:
        ids = self._tombstones_for(key)
        if record_id in ids:
            self._store_tombstones(key, ids - {record_id})

    def _replace_tombstone(self, key: str, old_id: str, new_id: str) -> None:
        self._store_tombstones(key, (self._tombstones_for(key) - {old_id}) | {new_id})

    def _notify(self, records: list[RecordT]) -> None:
        snapshot = list(records)
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Collection listener failed")


def _swap(
    records: list[RecordT], staged: RecordT, confirmed: RecordT
) -> list[RecordT]:
    staged_id = staged.id
    swapped: list[RecordT] = []
    placed = False
    for item in records:
        if item.id == staged_id and not placed:
            # A newer local edit of the same record keeps its content.
            if item == staged:
                swapped.append(confirmed)
            else:
                swapped.append(replace(item, id=confirmed.id))
            placed = True
        elif item.id == confirmed.id or item.id == staged_id:
            continue
        else:
            swapped.append(item)
    if not placed:
        return records
    return swapped


def _replace_or_append(records: list[RecordT], staged: RecordT) -> list[RecordT]:
    replaced = False
    updated: list[RecordT] = []
    for item in records:
        if item.id == staged.id:
            updated.append(staged)
            replaced = True
        else:
            updated.append(item)
    if not replaced:
        updated.append(staged)
    return updated


def _tombstone_key(key: str) -> str:
    return f"{key}:deleted"
