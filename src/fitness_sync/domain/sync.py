"""Outcome and phase types for optimistic mutations."""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, Protocol, TypeVar


class SyncableRecord(Protocol):
    """Shape every record handled by the sync engine must expose.

    Records are frozen dataclasses; the engine assigns identity and
    timestamps with ``dataclasses.replace``.
    """

    id: str | None
    created_at: object | None
    updated_at: object | None


RecordT = TypeVar("RecordT", bound=SyncableRecord)


class SyncPhase(str, Enum):
    """Lifecycle of a single mutation."""

    IDLE = "idle"
    OPTIMISTIC_COMMIT = "optimistic_commit"
    REMOTE_ATTEMPT = "remote_attempt"
    RECONCILED = "reconciled"
    DEGRADED = "degraded"


@dataclass(frozen=True)
class Applied(Generic[RecordT]):
    """The remote source agreed with the local mutation."""

    record: RecordT | None


@dataclass(frozen=True)
class AppliedLocalOnly(Generic[RecordT]):
    """The local mutation stands; the remote attempt failed."""

    record: RecordT | None
    error: str | None = None


SyncOutcome = Applied | AppliedLocalOnly


@dataclass
class PendingSync(Generic[RecordT]):
    """Handle for a committed mutation and its detached reconciliation."""

    record: RecordT | None
    phase: SyncPhase = SyncPhase.IDLE
    task: "asyncio.Task[SyncOutcome] | None" = field(default=None, repr=False)

    async def outcome(self) -> SyncOutcome:
        """Wait for the reconciliation and return its outcome."""
        if self.task is None:
            return Applied(self.record)
        return await self.task

    @property
    def done(self) -> bool:
        """Return True once reconciliation finished."""
        return self.task is None or self.task.done()
