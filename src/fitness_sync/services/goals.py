"""Goals document backed by the offline-first sync engine."""

from dataclasses import dataclass, replace
from datetime import date

from fitness_sync.domain.errors import ValidationError
from fitness_sync.domain.goals import GoalSet, WeightGoalType
from fitness_sync.domain.identity import is_provisional
from fitness_sync.domain.sync import PendingSync
from fitness_sync.services.sync_engine import SyncEngine
from fitness_sync.services.validation import (
    parse_day,
    require_non_negative,
    validate_weight,
)

_TARGET_FIELDS = ("daily_calories", "daily_protein", "daily_carbs", "daily_fat")


@dataclass
class GoalsService:
    """Application service for the user's goals."""

    engine: SyncEngine[GoalSet]

    @property
    def goals(self) -> GoalSet | None:
        """Return the goals currently shown, if any."""
        records = self.engine.records
        return records[-1] if records else None

    async def fetch_goals(self) -> GoalSet | None:
        """Return cached goals refreshed from the remote source when reachable."""
        records = await self.engine.fetch()
        return records[-1] if records else None

    async def save_goals(self, goals: GoalSet) -> PendingSync[GoalSet]:
        """Store goals locally, replacing the previous set, then sync them.

        Goals without an id reuse the confirmed id of the stored set, or get
        a provisional one while nothing has been confirmed yet.
        """
        try:
            validated = _validate(goals)
        except ValidationError as exc:
            self.engine.report_input_error(str(exc))
            raise
        previous = self.goals
        if (
            validated.id is None
            and previous is not None
            and not is_provisional(previous.id)
        ):
            validated = replace(validated, id=previous.id)
        return await self.engine.upsert(
            replace(validated, user_email=self.engine.credentials.owner_key())
        )


def _validate(goals: GoalSet) -> GoalSet:
    for name in _TARGET_FIELDS:
        require_non_negative(getattr(goals, name), name)
    if goals.weekly_workouts is not None:
        workouts = require_non_negative(goals.weekly_workouts, "weekly_workouts")
        if workouts is not None and workouts != int(workouts):
            raise ValidationError("weekly_workouts must be a whole number")
    for name in ("current_weight", "target_weight"):
        value = getattr(goals, name)
        if value is not None:
            validate_weight(value, name)
    goal_type = goals.weight_goal_type
    if goal_type is not None and not isinstance(goal_type, WeightGoalType):
        try:
            goal_type = WeightGoalType(goal_type)
        except ValueError as exc:
            raise ValidationError(f"Unknown weight goal type: {goal_type}") from exc
    deadline = goals.deadline
    if deadline is not None and not isinstance(deadline, date):
        deadline = parse_day(deadline, "deadline")
    return replace(goals, weight_goal_type=goal_type, deadline=deadline)
