"""Domain models for the food log."""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum


class MealType(str, Enum):
    """Meal a food entry belongs to."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"


@dataclass(frozen=True)
class FoodEntry:
    """A logged food item."""

    user_email: str
    name: str
    calories: float
    protein: float
    meal_type: MealType
    date: date
    carbs: float | None = None
    fat: float | None = None
    id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class NutritionTotals:
    """Calorie and protein totals for a day."""

    calories: float
    protein: float
