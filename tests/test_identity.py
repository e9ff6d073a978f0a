"""Tests for provisional record identity."""

from datetime import UTC, datetime

from fitness_sync.domain.identity import (
    PROVISIONAL_PREFIX,
    is_provisional,
    new_provisional_id,
)


def test_provisional_id_carries_prefix_and_timestamp() -> None:
    moment = datetime(2024, 1, 1, tzinfo=UTC)

    record_id = new_provisional_id(moment)

    assert record_id.startswith(f"{PROVISIONAL_PREFIX}1704067200000-")
    assert is_provisional(record_id)


def test_provisional_ids_differ_within_same_millisecond() -> None:
    moment = datetime(2024, 1, 1, tzinfo=UTC)

    assert new_provisional_id(moment) != new_provisional_id(moment)


def test_confirmed_ids_are_not_provisional() -> None:
    assert not is_provisional("65a1f0c2e4b0a1b2c3d4e5f6")
    assert not is_provisional("")
    assert not is_provisional(None)
