"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime

import pytest

from fitness_sync.adapters.documents import (
    FoodEntryCodec,
    GoalSetCodec,
    WeightEntryCodec,
)
from fitness_sync.config import SyncConfig
from fitness_sync.domain.errors import RemoteCollectionError
from fitness_sync.domain.identity import is_provisional
from fitness_sync.domain.nutrition import FoodEntry, MealType
from fitness_sync.services.credentials import StaticCredentialProvider
from fitness_sync.services.local_store import LocalStore, RecordCodec
from fitness_sync.services.storage import InMemoryStorage, KeyValueStorage
from fitness_sync.services.sync_engine import RemoteCollection, SyncEngine

FIXED_NOW = datetime(2024, 1, 8, 12, 0, tzinfo=UTC)


@dataclass
class FakeRemoteCollection(RemoteCollection):
    """In-memory remote collection with switchable failures."""

    records: list = field(default_factory=list)
    fail: bool = False
    gate: asyncio.Event | None = None
    created: list = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    credentials_seen: list[str] = field(default_factory=list)
    next_id: int = 0

    async def create(self, record, credential: str):  # type: ignore[no-untyped-def]
        await self._wait(credential)
        self.next_id += 1
        record_id = record.id
        if not record_id or is_provisional(record_id):
            record_id = f"srv-{self.next_id}"
        confirmed = replace(record, id=record_id)
        self.records = [item for item in self.records if item.id != record_id]
        self.records.append(confirmed)
        self.created.append(record)
        return confirmed

    async def delete(self, record_id: str, credential: str) -> None:
        await self._wait(credential)
        self.records = [item for item in self.records if item.id != record_id]
        self.deleted.append(record_id)

    async def _wait(self, credential: str) -> None:
        self.credentials_seen.append(credential)
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise RemoteCollectionError("network unavailable")

    async def list(self, owner_key: str, credential: str):  # type: ignore[no-untyped-def]
        await self._wait(credential)
        return [item for item in self.records if item.user_email == owner_key]


@dataclass
class FailingStorage(KeyValueStorage):
    """Storage whose writes always fail."""

    values: dict[str, str] = field(default_factory=dict)

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        raise OSError("disk full")


def build_engine(
    remote: FakeRemoteCollection,
    storage: KeyValueStorage | None = None,
    config: SyncConfig | None = None,
    codec: RecordCodec | None = None,
    credentials: StaticCredentialProvider | None = None,
) -> SyncEngine:
    return SyncEngine(
        config=config or SyncConfig(collection_key="foods"),
        local_store=LocalStore(storage or InMemoryStorage(), codec or FoodEntryCodec()),
        remote=remote,
        credentials=credentials or StaticCredentialProvider("ana@example.com", "tok"),
        clock=lambda: FIXED_NOW,
    )


def make_food(name: str = "Oats", calories: float = 150, **overrides) -> FoodEntry:  # type: ignore[no-untyped-def]
    values = {
        "user_email": "ana@example.com",
        "name": name,
        "calories": calories,
        "protein": 5.0,
        "meal_type": MealType.BREAKFAST,
        "date": date(2024, 1, 8),
    }
    values.update(overrides)
    return FoodEntry(**values)


@pytest.fixture
def credentials() -> StaticCredentialProvider:
    return StaticCredentialProvider(account="ana@example.com", token="tok")


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def remote() -> FakeRemoteCollection:
    return FakeRemoteCollection()


@pytest.fixture
def food_codec() -> FoodEntryCodec:
    return FoodEntryCodec()


@pytest.fixture
def weight_codec() -> WeightEntryCodec:
    return WeightEntryCodec()


@pytest.fixture
def goal_codec() -> GoalSetCodec:
    return GoalSetCodec()
