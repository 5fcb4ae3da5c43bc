"""Calendar-day helpers.

A calendar day is a plain :class:`datetime.date`: no time-of-day, no zone.
Instants coming from outside (API payloads, legacy UTC-noon timestamps) are
reduced to a day through their UTC components, so the same instant lands on
the same day whatever timezone the process runs in.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time, timezone
from typing import Any, Union

DayLike = Union[date, datetime]

DAY_KEY_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def weekday_index(day: date) -> int:
    """Return the weekday with 0=Sunday .. 6=Saturday."""

    return day.isoweekday() % 7


def to_calendar_day(value: Any) -> date:
    """Reduce a date, an instant, or a log-like object to its calendar day.

    Aware datetimes are converted to UTC first; naive datetimes are read as
    UTC. Objects exposing ``occurred_on`` are unwrapped.
    """

    if hasattr(value, "occurred_on"):
        value = value.occurred_on
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    raise TypeError(f"Cannot derive a calendar day from {type(value).__name__}")


def day_key(value: Any) -> str:
    """Return the ``YYYY-MM-DD`` key for a day, instant or log."""

    return to_calendar_day(value).isoformat()


def parse_day_key(raw: str) -> date:
    """Parse a ``YYYY-MM-DD`` string into a calendar day.

    Raises:
        ValueError: if the string is not in that shape or is not a real date.
    """

    if not DAY_KEY_PATTERN.match(raw or ""):
        raise ValueError("Invalid date format (expected YYYY-MM-DD)")
    return date.fromisoformat(raw)


def utc_noon(day: date) -> datetime:
    """Return the UTC-noon instant representing ``day``."""

    return datetime.combine(day, time(12, 0), tzinfo=timezone.utc)
