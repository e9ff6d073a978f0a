"""Caller input checks run before any local mutation."""

from datetime import date

from fitness_sync.domain.errors import ValidationError

MAX_BODY_WEIGHT = 1000


def require_text(value: str | None, field_name: str) -> str:
    """Return the stripped value or reject an empty one."""
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError(f"{field_name} is required")
    return cleaned


def require_non_negative(value: float | None, field_name: str) -> float | None:
    """Reject negative or non-finite numbers; None passes through."""
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ValidationError(f"{field_name} must be a number")
    if value != value or value in {float("inf"), float("-inf")}:
        raise ValidationError(f"{field_name} must be a finite number")
    if value < 0:
        raise ValidationError(f"{field_name} must not be negative")
    return float(value)


def validate_weight(value: float, field_name: str = "weight") -> float:
    """Accept body weights strictly between 0 and 1000."""
    number = require_non_negative(value, field_name)
    if number is None or not 0 < number < MAX_BODY_WEIGHT:
        raise ValidationError(
            f"{field_name} must be between 0 and {MAX_BODY_WEIGHT}"
        )
    return number


def parse_day(value: date | str, field_name: str = "date") -> date:
    """Return a calendar day from a date or an ISO string."""
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{field_name} must be an ISO date") from exc
