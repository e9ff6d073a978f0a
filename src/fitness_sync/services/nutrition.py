"""Food log backed by the offline-first sync engine."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import date

from fitness_sync.domain.errors import ValidationError
from fitness_sync.domain.nutrition import FoodEntry, MealType, NutritionTotals
from fitness_sync.domain.sync import PendingSync
from fitness_sync.services.sync_engine import SyncEngine
from fitness_sync.services.validation import (
    parse_day,
    require_non_negative,
    require_text,
)


@dataclass
class NutritionLogService:
    """Application service for logging foods."""

    engine: SyncEngine[FoodEntry]
    today: Callable[[], date] = date.today

    @property
    def foods(self) -> list[FoodEntry]:
        """Return the food entries currently shown."""
        return self.engine.records

    async def fetch_foods(self) -> list[FoodEntry]:
        """Return cached foods refreshed from the remote log when reachable."""
        return await self.engine.fetch()

    async def add_food(  # noqa: PLR0913
        self,
        *,
        name: str,
        calories: float,
        protein: float,
        meal_type: MealType | str,
        day: date | str | None = None,
        carbs: float | None = None,
        fat: float | None = None,
    ) -> PendingSync[FoodEntry]:
        """Log a food entry; it is stored locally before this returns."""
        try:
            entry = FoodEntry(
                user_email=self.engine.credentials.owner_key(),
                name=require_text(name, "name"),
                calories=require_non_negative(calories, "calories") or 0.0,
                protein=require_non_negative(protein, "protein") or 0.0,
                carbs=require_non_negative(carbs, "carbs"),
                fat=require_non_negative(fat, "fat"),
                meal_type=_parse_meal_type(meal_type),
                date=parse_day(day) if day is not None else self.today(),
            )
        except ValidationError as exc:
            self.engine.report_input_error(str(exc))
            raise
        return await self.engine.add(entry)

    async def delete_food(self, food_id: str) -> PendingSync[FoodEntry]:
        """Delete a food entry locally and from the remote log."""
        return await self.engine.delete(food_id)

    def get_today_totals(self, today: date | None = None) -> NutritionTotals:
        """Sum calories and protein of the entries dated today."""
        day = today or self.today()
        todays = [food for food in self.engine.records if food.date == day]
        return NutritionTotals(
            calories=sum(food.calories for food in todays),
            protein=sum(food.protein for food in todays),
        )


def _parse_meal_type(value: MealType | str) -> MealType:
    try:
        return MealType(value)
    except ValueError as exc:
        raise ValidationError(f"Unknown meal type: {value}") from exc
