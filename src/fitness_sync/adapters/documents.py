"""Document codecs shared by the local store and the remote adapters.

Documents keep the field names used by the mobile client and its REST
backend (``_id``, ``userEmail``, ``createdAt`` ...).
"""

from dataclasses import dataclass
from datetime import date, datetime

from fitness_sync.domain.goals import GoalSet, WeightGoalType
from fitness_sync.domain.nutrition import FoodEntry, MealType
from fitness_sync.domain.progress import WeightEntry
from fitness_sync.domain.workouts import ExerciseLog, SetLog, WorkoutHistoryEntry


@dataclass(frozen=True)
class FoodEntryCodec:
    """Codec for food log entries."""

    owner_field: str = "userEmail"

    def to_document(self, record: FoodEntry) -> dict[str, object]:
        document: dict[str, object] = {
            "userEmail": record.user_email,
            "name": record.name,
            "calories": record.calories,
            "protein": record.protein,
            "mealType": record.meal_type.value,
            "date": record.date.isoformat(),
        }
        if record.carbs is not None:
            document["carbs"] = record.carbs
        if record.fat is not None:
            document["fat"] = record.fat
        _put_identity(document, record.id, record.created_at, record.updated_at)
        return document

    def from_document(self, document: dict[str, object]) -> FoodEntry:
        return FoodEntry(
            id=_optional_str(document.get("_id")),
            user_email=str(document.get("userEmail") or ""),
            name=str(document["name"]),
            calories=_to_float(document.get("calories")),
            protein=_to_float(document.get("protein")),
            carbs=_optional_float(document.get("carbs")),
            fat=_optional_float(document.get("fat")),
            meal_type=MealType(str(document.get("mealType") or MealType.SNACK.value)),
            date=_parse_date(document["date"]),
            created_at=_parse_datetime(document.get("createdAt")),
            updated_at=_parse_datetime(document.get("updatedAt")),
        )


@dataclass(frozen=True)
class WeightEntryCodec:
    """Codec for body-weight entries."""

    owner_field: str = "userEmail"

    def to_document(self, record: WeightEntry) -> dict[str, object]:
        document: dict[str, object] = {
            "userEmail": record.user_email,
            "weight": record.weight,
            "date": record.date.isoformat(),
        }
        _put_identity(document, record.id, record.created_at, record.updated_at)
        return document

    def from_document(self, document: dict[str, object]) -> WeightEntry:
        return WeightEntry(
            id=_optional_str(document.get("_id")),
            user_email=str(document.get("userEmail") or ""),
            weight=_to_float(document["weight"]),
            date=_parse_date(document["date"]),
            created_at=_parse_datetime(document.get("createdAt")),
            updated_at=_parse_datetime(document.get("updatedAt")),
        )


_GOAL_FIELDS = {
    "daily_calories": "dailyCalories",
    "daily_protein": "dailyProtein",
    "daily_carbs": "dailyCarbs",
    "daily_fat": "dailyFat",
    "current_weight": "currentWeight",
    "target_weight": "targetWeight",
}
_GOAL_FLAGS = {
    "track_protein": "trackProtein",
    "track_carbs": "trackCarbs",
    "track_fat": "trackFat",
}


@dataclass(frozen=True)
class GoalSetCodec:
    """Codec for the goals document."""

    owner_field: str = "userEmail"

    def to_document(self, record: GoalSet) -> dict[str, object]:
        document: dict[str, object] = {"userEmail": record.user_email}
        for attribute, key in {**_GOAL_FIELDS, **_GOAL_FLAGS}.items():
            value = getattr(record, attribute)
            if value is not None:
                document[key] = value
        if record.weekly_workouts is not None:
            document["weeklyWorkouts"] = record.weekly_workouts
        if record.weight_goal_type is not None:
            document["weightGoalType"] = record.weight_goal_type.value
        if record.deadline is not None:
            document["deadline"] = record.deadline.isoformat()
        _put_identity(document, record.id, record.created_at, record.updated_at)
        return document

    def from_document(self, document: dict[str, object]) -> GoalSet:
        numbers = {
            attribute: _optional_float(document.get(key))
            for attribute, key in _GOAL_FIELDS.items()
        }
        flags = {
            attribute: _optional_bool(document.get(key))
            for attribute, key in _GOAL_FLAGS.items()
        }
        workouts = _optional_float(document.get("weeklyWorkouts"))
        goal_type = document.get("weightGoalType")
        deadline = document.get("deadline")
        return GoalSet(
            id=_optional_str(document.get("_id")),
            user_email=str(document.get("userEmail") or ""),
            weekly_workouts=int(workouts) if workouts is not None else None,
            weight_goal_type=WeightGoalType(str(goal_type)) if goal_type else None,
            deadline=_parse_date(deadline) if deadline else None,
            created_at=_parse_datetime(document.get("createdAt")),
            updated_at=_parse_datetime(document.get("updatedAt")),
            **numbers,
            **flags,
        )


@dataclass(frozen=True)
class WorkoutHistoryCodec:
    """Codec for finished workouts."""

    owner_field: str = "userEmail"

    def to_document(self, record: WorkoutHistoryEntry) -> dict[str, object]:
        return {
            "id": record.id,
            "date": record.date,
            "exercises": [
                {
                    "name": exercise.name,
                    "sets": [
                        _set_document(item) for item in exercise.sets or []
                    ],
                }
                for exercise in record.exercises or []
            ],
        }

    def from_document(self, document: dict[str, object]) -> WorkoutHistoryEntry:
        exercises = document.get("exercises")
        return WorkoutHistoryEntry(
            id=str(document.get("id") or document.get("_id") or ""),
            date=str(document.get("date") or ""),
            exercises=(
                [_parse_exercise(item) for item in exercises]
                if isinstance(exercises, list)
                else None
            ),
        )


def _set_document(item: SetLog) -> dict[str, object]:
    document: dict[str, object] = {}
    if item.weight is not None:
        document["weight"] = item.weight
    if item.reps is not None:
        document["reps"] = item.reps
    if item.completed is not None:
        document["completed"] = item.completed
    return document


def _parse_exercise(document: dict[str, object]) -> ExerciseLog:
    sets = document.get("sets")
    return ExerciseLog(
        name=str(document.get("name") or ""),
        sets=(
            [
                SetLog(
                    weight=_optional_float(item.get("weight")),
                    reps=_optional_int(item.get("reps")),
                    completed=_optional_bool(item.get("completed")),
                )
                for item in sets
            ]
            if isinstance(sets, list)
            else None
        ),
    )


def _put_identity(
    document: dict[str, object],
    record_id: str | None,
    created_at: datetime | None,
    updated_at: datetime | None,
) -> None:
    if record_id:
        document["_id"] = record_id
    if created_at is not None:
        document["createdAt"] = created_at.isoformat()
    if updated_at is not None:
        document["updatedAt"] = updated_at.isoformat()


def _optional_str(value: object) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def _to_float(value: object) -> float:
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return 0.0
    return 0.0


def _optional_float(value: object) -> float | None:
    if value is None or value == "":
        return None
    return _to_float(value)


def _optional_int(value: object) -> int | None:
    number = _optional_float(value)
    return int(number) if number is not None else None


def _optional_bool(value: object) -> bool | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value.strip().lower() in {"true", "1", "yes"}
    return bool(value)


def _parse_date(value: object) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _parse_datetime(value: object) -> datetime | None:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))
