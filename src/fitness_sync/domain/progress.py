"""Domain models for body-weight progress."""

from dataclasses import dataclass
from datetime import date, datetime


@dataclass(frozen=True)
class WeightEntry:
    """A single body-weight measurement."""

    user_email: str
    weight: float
    date: date
    id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
