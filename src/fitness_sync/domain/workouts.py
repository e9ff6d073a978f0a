"""Domain models for completed workouts and exercise progress."""

from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class SetLog:
    """One performed set. A missing completed flag counts as completed."""

    weight: float | None = None
    reps: int | None = None
    completed: bool | None = None

    @property
    def counts(self) -> bool:
        return self.completed is not False


@dataclass(frozen=True)
class ExerciseLog:
    """An exercise within a workout."""

    name: str
    sets: list[SetLog] | None = None


@dataclass(frozen=True)
class WorkoutHistoryEntry:
    """A finished workout session."""

    id: str
    date: str
    exercises: list[ExerciseLog] | None = None
    created_at: object | None = None
    updated_at: object | None = None


class ProgressMetric(str, Enum):
    """Per-workout reduction used to chart an exercise."""

    WEIGHT = "weight"
    VOLUME = "volume"
    REPS = "reps"
    ESTIMATED_MAX = "estimated_max"


@dataclass(frozen=True)
class ExerciseDataPoint:
    """One workout's reduced value for an exercise."""

    date: str
    value: float
    reps: int | None = None
    sets: int | None = None


@dataclass(frozen=True)
class ExerciseProgress:
    """Time series and lifetime totals for one exercise."""

    exercise_name: str
    data_points: list[ExerciseDataPoint] = field(default_factory=list)
    personal_best: float = 0.0
    current_value: float = 0.0
    total_sets: int = 0
    total_reps: int = 0
    total_volume: float = 0.0


@dataclass(frozen=True)
class PersonalRecord:
    """Best weight lifted for an exercise inside a recent window."""

    exercise_name: str
    value: float
    date: str
    metric: ProgressMetric = ProgressMetric.WEIGHT
