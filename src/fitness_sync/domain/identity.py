"""Identity rules for locally created and server-confirmed records."""

from datetime import UTC, datetime
from uuid import uuid4

PROVISIONAL_PREFIX = "local-"


def new_provisional_id(now: datetime | None = None) -> str:
    """Return a provisional id built from the epoch milliseconds and a random tag."""
    moment = now or datetime.now(tz=UTC)
    millis = int(moment.timestamp() * 1000)
    return f"{PROVISIONAL_PREFIX}{millis}-{uuid4().hex[:6]}"


def is_provisional(record_id: str | None) -> bool:
    """Return True when the id was allocated on this device."""
    return bool(record_id) and record_id.startswith(PROVISIONAL_PREFIX)
