"""Body-weight log backed by the offline-first sync engine."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import date

from fitness_sync.domain.errors import ValidationError
from fitness_sync.domain.progress import WeightEntry
from fitness_sync.domain.sync import PendingSync
from fitness_sync.services.sync_engine import SyncEngine
from fitness_sync.services.validation import parse_day, validate_weight


@dataclass
class WeightProgressService:
    """Application service for weight tracking."""

    engine: SyncEngine[WeightEntry]
    today: Callable[[], date] = date.today

    @property
    def entries(self) -> list[WeightEntry]:
        """Return the weight entries currently shown."""
        return self.engine.records

    async def fetch_entries(self) -> list[WeightEntry]:
        """Return cached entries refreshed from the remote log when reachable."""
        return await self.engine.fetch()

    async def add_entry(
        self, weight: float, day: date | str | None = None
    ) -> PendingSync[WeightEntry]:
        """Record a weight; every call creates a new entry, even on the same day."""
        try:
            entry = WeightEntry(
                user_email=self.engine.credentials.owner_key(),
                weight=validate_weight(weight),
                date=parse_day(day) if day is not None else self.today(),
            )
        except ValidationError as exc:
            self.engine.report_input_error(str(exc))
            raise
        return await self.engine.add(entry)

    async def delete_entry(self, entry_id: str) -> PendingSync[WeightEntry]:
        """Delete a weight entry."""
        return await self.engine.delete(entry_id)

    def current_weight(self) -> float | None:
        """Return the weight of the most recently dated entry."""
        entries = self.engine.records
        if not entries:
            return None
        return max(entries, key=lambda entry: entry.date).weight

    def starting_weight(self) -> float | None:
        """Return the weight of the earliest dated entry."""
        entries = self.engine.records
        if not entries:
            return None
        return min(entries, key=lambda entry: entry.date).weight

    def weight_change(self) -> float | None:
        """Return current minus starting weight."""
        current = self.current_weight()
        start = self.starting_weight()
        if current is None or start is None:
            return None
        return current - start
