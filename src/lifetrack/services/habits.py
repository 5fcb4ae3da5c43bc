"""Habit streak and completion engine.

Everything here is pure: callers hand in the frequency rule, the habit's
logs and the reference ``today``; nothing reads the wall clock or storage.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date, timedelta
from typing import Any, Iterable, Optional

from ..domain.calendar import day_key, to_calendar_day
from ..domain.frequency import Frequency, is_expected

STREAK_LOOKBACK_DAYS = 365
COMPLETION_WINDOW_DAYS = 30


@dataclass(frozen=True, slots=True)
class HabitStats:
    """Derived statistics for one habit."""

    current_streak: int = 0
    longest_streak: int = 0
    completion_rate: int = 0
    total_completed: int = 0
    total_expected: int = 0
    last_completed_date: Optional[date] = None

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        last = payload["last_completed_date"]
        payload["last_completed_date"] = last.isoformat() if last else None
        return payload


@dataclass(frozen=True, slots=True)
class DayStatus:
    """One cell of a habit's checkbox grid."""

    day: date
    day_key: str
    completed: bool
    is_expected: bool
    is_today: bool
    is_future: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.day_key,
            "completed": self.completed,
            "is_expected": self.is_expected,
            "is_today": self.is_today,
            "is_future": self.is_future,
        }


def build_completed_set(logs: Iterable[Any]) -> set[str]:
    """Return the ``YYYY-MM-DD`` keys of every completed day."""

    return {day_key(log) for log in logs}


def percentage(part: int, whole: int) -> int:
    """Return ``100 * part / whole`` rounded half up, or 0 for an empty whole."""

    if whole <= 0:
        return 0
    return (200 * part + whole) // (2 * whole)


def compute_streaks(
    frequency: Frequency, completed: set[str], *, today: date
) -> tuple[int, int]:
    """Return (current_streak, longest_streak) walking back from ``today``.

    Days that are not expected neither extend nor break a run. A missing
    ``today`` (the first expected day) does not break the current streak;
    the next missed expected day ends the scan, so only runs up to that
    point are candidates for the longest streak.
    """

    current = 0
    longest = 0
    run = 0
    first_expected = True

    for offset in range(STREAK_LOOKBACK_DAYS):
        day = today - timedelta(days=offset)
        if not is_expected(day, frequency):
            continue

        if day.isoformat() in completed:
            run += 1
            current = run
        else:
            longest = max(longest, run)
            run = 0
            if first_expected:
                current = 0
            else:
                break
        first_expected = False

    longest = max(longest, run)
    return current, longest


def compute_completion(
    frequency: Frequency,
    completed: set[str],
    *,
    today: date,
    window_days: int = COMPLETION_WINDOW_DAYS,
) -> tuple[int, int]:
    """Return (total_completed, total_expected) over the trailing window."""

    total_expected = 0
    total_completed = 0
    start = today - timedelta(days=window_days - 1)
    for offset in range(window_days):
        day = start + timedelta(days=offset)
        if not is_expected(day, frequency):
            continue
        total_expected += 1
        if day.isoformat() in completed:
            total_completed += 1
    return total_completed, total_expected


def compute_stats(frequency: Frequency, logs: Iterable[Any], *, today: date) -> HabitStats:
    """Compute streaks, completion rate and totals for a habit."""

    logs = list(logs)
    completed = build_completed_set(logs)
    current, longest = compute_streaks(frequency, completed, today=today)
    total_completed, total_expected = compute_completion(frequency, completed, today=today)

    return HabitStats(
        current_streak=current,
        longest_streak=longest,
        completion_rate=percentage(total_completed, total_expected),
        total_completed=total_completed,
        total_expected=total_expected,
        last_completed_date=max((to_calendar_day(log) for log in logs), default=None),
    )


def day_statuses(
    frequency: Frequency, logs: Iterable[Any], *, today: date, days: int = 7
) -> list[DayStatus]:
    """Project the trailing ``days`` window into grid cells, oldest first."""

    completed = build_completed_set(logs)
    statuses: list[DayStatus] = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        key = day.isoformat()
        statuses.append(
            DayStatus(
                day=day,
                day_key=key,
                completed=key in completed,
                is_expected=is_expected(day, frequency),
                is_today=day == today,
                is_future=day > today,
            )
        )
    return statuses


__all__ = [
    "COMPLETION_WINDOW_DAYS",
    "DayStatus",
    "HabitStats",
    "STREAK_LOOKBACK_DAYS",
    "build_completed_set",
    "compute_completion",
    "compute_stats",
    "compute_streaks",
    "day_statuses",
    "percentage",
]
