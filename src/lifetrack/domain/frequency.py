"""Habit frequency rules and the expected-day check."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Union

from ..constants.habits import DAYS_OF_WEEK
from ..models.habit import FrequencyType
from .calendar import weekday_index


@dataclass(frozen=True, slots=True)
class Daily:
    """Every day is expected."""


@dataclass(frozen=True, slots=True)
class TimesPerWeek:
    """A weekly target; every day still counts as expected."""

    count: int


@dataclass(frozen=True, slots=True)
class SpecificDays:
    """Only the listed weekdays (0=Sunday .. 6=Saturday) are expected."""

    days: frozenset[int] = field(default_factory=frozenset)


Frequency = Union[Daily, TimesPerWeek, SpecificDays]


def is_expected(day: date, frequency: Frequency) -> bool:
    """Return True when completion is expected on ``day``."""

    if isinstance(frequency, (Daily, TimesPerWeek)):
        # The weekly count is a display target only; it never gates a day.
        return True
    if isinstance(frequency, SpecificDays):
        return weekday_index(day) in frequency.days
    raise TypeError(f"Unsupported frequency: {frequency!r}")


def parse_frequency_days(raw: str | None) -> frozenset[int]:
    """Decode a comma-joined weekday list, ignoring malformed tokens."""

    if not raw:
        return frozenset()
    days: set[int] = set()
    for token in raw.split(","):
        token = token.strip()
        if not token.isdigit():
            continue
        value = int(token)
        if 0 <= value <= 6:
            days.add(value)
    return frozenset(days)


def encode_frequency_days(days: Iterable[int] | None) -> str | None:
    """Encode weekday numbers as the stored comma-joined string."""

    if days is None:
        return None
    unique = sorted(set(days))
    if not unique:
        return None
    return ",".join(str(day) for day in unique)


def frequency_from_habit(habit) -> Frequency:
    """Build the frequency rule from a stored habit row.

    Unknown frequency types fall back to ``Daily``.
    """

    raw_type = getattr(habit, "frequency_type", None)
    try:
        frequency_type = FrequencyType(getattr(raw_type, "value", raw_type))
    except ValueError:
        return Daily()

    if frequency_type is FrequencyType.SPECIFIC_DAYS:
        return SpecificDays(parse_frequency_days(getattr(habit, "frequency_days", None)))
    if frequency_type is FrequencyType.TIMES_PER_WEEK:
        return TimesPerWeek(getattr(habit, "frequency_value", None) or 0)
    return Daily()


def describe_frequency(frequency: Frequency) -> str:
    """Return a short human label for the frequency."""

    if isinstance(frequency, TimesPerWeek):
        return f"{frequency.count}x per week"
    if isinstance(frequency, SpecificDays):
        if not frequency.days:
            return "No days selected"
        return ", ".join(DAYS_OF_WEEK[day]["short"] for day in sorted(frequency.days))
    return "Every day"
