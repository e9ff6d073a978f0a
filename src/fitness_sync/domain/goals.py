"""Domain models for fitness goals."""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum


class WeightGoalType(str, Enum):
    """Direction of the body-weight goal."""

    LOSE = "lose"
    GAIN = "gain"
    MAINTAIN = "maintain"


@dataclass(frozen=True)
class GoalSet:
    """The user's current nutrition and training targets."""

    user_email: str
    daily_calories: float | None = None
    daily_protein: float | None = None
    daily_carbs: float | None = None
    daily_fat: float | None = None
    track_protein: bool | None = None
    track_carbs: bool | None = None
    track_fat: bool | None = None
    weekly_workouts: int | None = None
    current_weight: float | None = None
    target_weight: float | None = None
    weight_goal_type: WeightGoalType | None = None
    deadline: date | None = None
    id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
