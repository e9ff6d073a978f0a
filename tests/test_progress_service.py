"""Tests for the weight progress service."""

import asyncio
from datetime import date

import pytest

from fitness_sync.adapters.documents import WeightEntryCodec
from fitness_sync.domain.errors import ValidationError
from fitness_sync.services.progress import WeightProgressService
from tests.conftest import FakeRemoteCollection, build_engine


def _service(remote: FakeRemoteCollection) -> WeightProgressService:
    return WeightProgressService(
        build_engine(remote, codec=WeightEntryCodec()),
        today=lambda: date(2024, 1, 8),
    )


def test_weight_summary_uses_entry_dates(remote: FakeRemoteCollection) -> None:
    service = _service(remote)

    async def scenario() -> None:
        await service.add_entry(80.5, "2024-01-08")
        await service.add_entry(82.0, "2024-01-01")
        await service.add_entry(81.2, date(2024, 1, 4))
        await service.engine.drain()

    asyncio.run(scenario())

    assert service.current_weight() == 80.5
    assert service.starting_weight() == 82.0
    assert service.weight_change() == pytest.approx(-1.5)


def test_same_day_entries_are_all_kept(remote: FakeRemoteCollection) -> None:
    remote.fail = True
    service = _service(remote)

    async def scenario() -> None:
        await service.add_entry(80.0)
        await service.add_entry(79.8)
        await service.engine.drain()

    asyncio.run(scenario())

    assert [entry.weight for entry in service.entries] == [80.0, 79.8]
    assert all(entry.date == date(2024, 1, 8) for entry in service.entries)


def test_empty_log_has_no_summary(remote: FakeRemoteCollection) -> None:
    service = _service(remote)

    assert service.current_weight() is None
    assert service.weight_change() is None


@pytest.mark.parametrize("weight", [0, -3, 1000, 1500])
def test_add_entry_rejects_out_of_range_weight(
    remote: FakeRemoteCollection, weight: float
) -> None:
    service = _service(remote)

    with pytest.raises(ValidationError):
        asyncio.run(service.add_entry(weight))

    assert service.entries == []


def test_fetch_entries_falls_back_to_cache(remote: FakeRemoteCollection) -> None:
    service = _service(remote)

    async def scenario():  # type: ignore[no-untyped-def]
        remote.fail = True
        await service.add_entry(80.0)
        await service.engine.drain()
        return await service.fetch_entries()

    entries = asyncio.run(scenario())

    assert [entry.weight for entry in entries] == [80.0]
