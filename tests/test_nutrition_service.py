"""Tests for the food log service."""

import asyncio
from datetime import date

import pytest

from fitness_sync.domain.errors import ValidationError
from fitness_sync.domain.nutrition import MealType
from fitness_sync.domain.sync import Applied
from fitness_sync.services.nutrition import NutritionLogService
from tests.conftest import FakeRemoteCollection, build_engine


def test_add_food_builds_entry_for_current_account(
    remote: FakeRemoteCollection,
) -> None:
    service = NutritionLogService(build_engine(remote), today=lambda: date(2024, 1, 8))

    async def scenario():  # type: ignore[no-untyped-def]
        pending = await service.add_food(
            name=" Greek Yogurt ",
            calories=120,
            protein=15,
            meal_type="snack",
            fat=0,
        )
        return await pending.outcome()

    outcome = asyncio.run(scenario())

    assert isinstance(outcome, Applied)
    food = service.foods[0]
    assert food.name == "Greek Yogurt"
    assert food.meal_type == MealType.SNACK
    assert food.date == date(2024, 1, 8)
    assert food.user_email == "ana@example.com"
    assert food.fat == 0
    assert food.carbs is None


@pytest.mark.parametrize(
    ("overrides", "message"),
    [
        ({"name": "  "}, "name is required"),
        ({"calories": -5}, "calories must not be negative"),
        ({"meal_type": "brunch"}, "Unknown meal type"),
        ({"day": "08/01/2024"}, "date must be an ISO date"),
    ],
)
def test_add_food_rejects_invalid_input(
    remote: FakeRemoteCollection, overrides: dict[str, object], message: str
) -> None:
    engine = build_engine(remote)
    service = NutritionLogService(engine)
    values: dict[str, object] = {
        "name": "Oats",
        "calories": 150,
        "protein": 5,
        "meal_type": MealType.BREAKFAST,
    }
    values.update(overrides)

    with pytest.raises(ValidationError, match=message):
        asyncio.run(service.add_food(**values))

    assert engine.records == []
    assert engine.last_error is not None
    assert remote.created == []


def test_last_error_clears_on_next_operation(remote: FakeRemoteCollection) -> None:
    engine = build_engine(remote)
    service = NutritionLogService(engine)

    async def scenario() -> None:
        with pytest.raises(ValidationError):
            await service.add_food(
                name="", calories=1, protein=1, meal_type=MealType.LUNCH
            )
        assert engine.last_error == "name is required"
        await service.fetch_foods()

    asyncio.run(scenario())

    assert engine.last_error is None


def test_today_totals_only_count_today(remote: FakeRemoteCollection) -> None:
    remote.fail = True
    service = NutritionLogService(build_engine(remote), today=lambda: date(2024, 1, 8))

    async def scenario() -> None:
        await service.add_food(
            name="Oats", calories=150, protein=5, meal_type=MealType.BREAKFAST
        )
        await service.add_food(
            name="Chicken", calories=330, protein=62, meal_type=MealType.DINNER
        )
        await service.add_food(
            name="Pizza",
            calories=800,
            protein=30,
            meal_type=MealType.DINNER,
            day="2024-01-07",
        )
        await service.engine.drain()

    asyncio.run(scenario())
    totals = service.get_today_totals()

    assert totals.calories == 480
    assert totals.protein == 67


def test_delete_food_removes_entry(remote: FakeRemoteCollection) -> None:
    service = NutritionLogService(build_engine(remote))

    async def scenario() -> None:
        added = await service.add_food(
            name="Oats", calories=150, protein=5, meal_type=MealType.BREAKFAST
        )
        confirmed = await added.outcome()
        removed = await service.delete_food(confirmed.record.id)
        await removed.outcome()

    asyncio.run(scenario())

    assert service.foods == []
    assert remote.deleted == ["srv-1"]
