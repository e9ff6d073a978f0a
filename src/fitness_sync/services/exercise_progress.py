"""Exercise progress derived from workout history.

All functions are pure: they read a history snapshot, keep no state between
calls and can be re-run over a changed history.
"""

import re
from collections import Counter
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import date, timedelta

from fitness_sync.config import WORKOUT_HISTORY
from fitness_sync.domain.workouts import (
    ExerciseDataPoint,
    ExerciseLog,
    ExerciseProgress,
    PersonalRecord,
    ProgressMetric,
    SetLog,
    WorkoutHistoryEntry,
)
from fitness_sync.services.local_store import LocalStore

EPLEY_MAX_REPS = 12
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def calculate_estimated_max(weight: float, reps: int) -> float:
    """Estimate a one-repetition max with the Epley formula.

    Above 12 reps the formula is unreliable and the weight itself is used.
    """
    if reps == 1:
        return weight
    if reps > EPLEY_MAX_REPS:
        return weight
    return weight * (1 + reps / 30)


def reduce_exercise(
    exercise: ExerciseLog, metric: ProgressMetric
) -> ExerciseDataPoint | None:
    """Reduce one workout's sets of an exercise to a single value.

    Returns None when the exercise has no completed sets. Weight, reps and
    estimated max keep the first set reaching the maximum.
    """
    completed = [item for item in exercise.sets or [] if item.counts]
    if not completed:
        return None
    if metric == ProgressMetric.VOLUME:
        total = sum(_weight(item) * _reps(item) for item in completed)
        return ExerciseDataPoint(date="", value=total, sets=len(completed))
    if metric == ProgressMetric.WEIGHT:
        best = _first_max(completed, _weight)
        return ExerciseDataPoint(date="", value=_weight(best), reps=best.reps)
    if metric == ProgressMetric.REPS:
        best = _first_max(completed, _reps)
        return ExerciseDataPoint(date="", value=float(_reps(best)), reps=best.reps)
    best = _first_max(completed, _estimated_max)
    return ExerciseDataPoint(date="", value=_estimated_max(best), reps=_reps(best))


def iter_exercise_data_points(
    history: Iterable[WorkoutHistoryEntry],
    exercise_name: str,
    metric: ProgressMetric | str = ProgressMetric.WEIGHT,
) -> Iterator[ExerciseDataPoint]:
    """Yield one data point per workout, in workout id order."""
    resolved = ProgressMetric(metric)
    for workout, exercise in _matching_exercises(history, exercise_name):
        if exercise.sets is None:
            continue
        reduced = reduce_exercise(exercise, resolved)
        if reduced is None or reduced.value <= 0:
            continue
        yield ExerciseDataPoint(
            date=workout.date,
            value=reduced.value,
            reps=reduced.reps,
            sets=reduced.sets,
        )


def aggregate_exercise_data(
    history: Iterable[WorkoutHistoryEntry],
    exercise_name: str,
    metric: ProgressMetric | str = ProgressMetric.WEIGHT,
) -> ExerciseProgress:
    """Build the chart series and lifetime totals for an exercise."""
    snapshot = list(history)
    points = list(iter_exercise_data_points(snapshot, exercise_name, metric))
    total_sets = 0
    total_reps = 0
    total_volume = 0.0
    for _workout, exercise in _matching_exercises(snapshot, exercise_name):
        if exercise.sets is None:
            continue
        completed = [item for item in exercise.sets if item.counts]
        total_sets += len(completed)
        for item in completed:
            total_reps += _reps(item)
            total_volume += _weight(item) * _reps(item)
    return ExerciseProgress(
        exercise_name=exercise_name,
        data_points=points,
        personal_best=max((point.value for point in points), default=0.0),
        current_value=points[-1].value if points else 0.0,
        total_sets=total_sets,
        total_reps=total_reps,
        total_volume=total_volume,
    )


def get_unique_exercises(history: Iterable[WorkoutHistoryEntry]) -> list[str]:
    """Return every exercise name seen, sorted."""
    names = {
        exercise.name for workout in history for exercise in workout.exercises or []
    }
    return sorted(names)


def get_exercise_frequency(
    history: Iterable[WorkoutHistoryEntry], exercise_name: str
) -> int:
    """Count workouts that include an exercise."""
    target = exercise_name.lower()
    return sum(
        1
        for workout in history
        if any(item.name.lower() == target for item in workout.exercises or [])
    )


def get_top_exercises(
    history: Iterable[WorkoutHistoryEntry], limit: int = 10
) -> list[tuple[str, int]]:
    """Return the most performed exercises with their counts."""
    counts: Counter[str] = Counter()
    for workout in history:
        for exercise in workout.exercises or []:
            counts[exercise.name] += 1
    ranked = sorted(counts.items(), key=lambda pair: pair[1], reverse=True)
    return ranked[:limit]


def calculate_progress(points: list[ExerciseDataPoint]) -> float:
    """Return the percent change from the first to the last data point."""
    if len(points) < 2:  # noqa: PLR2004
        return 0.0
    first = points[0].value
    if first == 0:
        return 0.0
    return (points[-1].value - first) / first * 100


def get_recent_prs(
    history: Iterable[WorkoutHistoryEntry],
    days_back: int = 30,
    today: date | None = None,
) -> list[PersonalRecord]:
    """Return the best weight per exercise over the last ``days_back`` days."""
    cutoff = (today or date.today()) - timedelta(days=days_back)
    best: dict[str, PersonalRecord] = {}
    for workout in history:
        workout_day = _parse_workout_day(workout.date)
        if workout_day is None or workout_day < cutoff:
            continue
        for exercise in workout.exercises or []:
            reduced = reduce_exercise(exercise, ProgressMetric.WEIGHT)
            value = reduced.value if reduced else 0.0
            existing = best.get(exercise.name)
            if existing is None or value > existing.value:
                best[exercise.name] = PersonalRecord(
                    exercise_name=exercise.name, value=value, date=workout.date
                )
    records = [record for record in best.values() if record.value > 0]
    return sorted(
        records,
        key=lambda record: _parse_workout_day(record.date) or date.min,
        reverse=True,
    )


@dataclass
class ExerciseProgressService:
    """Reads the stored workout history and derives exercise statistics."""

    local_store: LocalStore[WorkoutHistoryEntry]
    storage_key: str = WORKOUT_HISTORY.collection_key

    def history(self) -> list[WorkoutHistoryEntry]:
        """Return the current workout history snapshot."""
        return self.local_store.load(self.storage_key)

    def progress(
        self, exercise_name: str, metric: ProgressMetric | str = ProgressMetric.WEIGHT
    ) -> ExerciseProgress:
        """Return the progress series for an exercise."""
        return aggregate_exercise_data(self.history(), exercise_name, metric)

    def exercises(self) -> list[str]:
        """Return every exercise name in the history."""
        return get_unique_exercises(self.history())

    def top_exercises(self, limit: int = 10) -> list[tuple[str, int]]:
        """Return the most performed exercises."""
        return get_top_exercises(self.history(), limit)

    def recent_prs(
        self, days_back: int = 30, today: date | None = None
    ) -> list[PersonalRecord]:
        """Return recent personal records."""
        return get_recent_prs(self.history(), days_back, today)


def _matching_exercises(
    history: Iterable[WorkoutHistoryEntry], exercise_name: str
) -> Iterator[tuple[WorkoutHistoryEntry, ExerciseLog]]:
    target = exercise_name.lower()
    for workout in sorted(history, key=lambda item: _workout_order(item.id)):
        if not workout.exercises:
            continue
        exercise = next(
            (item for item in workout.exercises if item.name.lower() == target), None
        )
        if exercise is not None:
            yield workout, exercise


def _workout_order(workout_id: str) -> int:
    match = _LEADING_INT.match(str(workout_id))
    return int(match.group(1)) if match else 0


def _first_max(sets: list[SetLog], key) -> SetLog:  # type: ignore[no-untyped-def]
    best = sets[0]
    for item in sets[1:]:
        if key(item) > key(best):
            best = item
    return best


def _weight(item: SetLog) -> float:
    return item.weight or 0.0


def _reps(item: SetLog) -> int:
    return item.reps or 0


def _estimated_max(item: SetLog) -> float:
    return calculate_estimated_max(_weight(item), _reps(item))


def _parse_workout_day(value: str) -> date | None:
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None
