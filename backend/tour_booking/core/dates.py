"""
Calendar-day normalization.

Bookings are counted per calendar day, so every date entering the system is
reduced to a ``datetime.date`` first. Timezone-aware datetimes are converted
to UTC before truncation; naive ones are truncated as-is.
"""

from datetime import date, datetime, timezone
from typing import Union

DayLike = Union[date, datetime, str]


def to_day(value: DayLike) -> date:
    """Reduce a date, datetime or ISO string to its calendar day. Raises ValueError."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if len(text) == 10:
            return date.fromisoformat(text)
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        return to_day(datetime.fromisoformat(text))
    raise ValueError(f"Unsupported date value: {value!r}")
