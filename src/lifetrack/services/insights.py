"""Cross-habit aggregates for the habits dashboard."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Optional, Sequence

from ..constants.habits import DEFAULT_HABIT_COLOR
from ..domain.calendar import weekday_index
from .habits import build_completed_set, percentage
from .tracking import HabitSnapshot

HEATMAP_DAYS = 90
DAILY_SERIES_DAYS = 30
CHART_LABEL_LENGTH = 12


@dataclass(frozen=True, slots=True)
class HabitSummary:
    total_habits: int
    completed_today: int
    longest_streak: int
    average_completion_rate: int


@dataclass(frozen=True, slots=True)
class HeatmapDay:
    day: date
    count: int
    total: int
    intensity: int


@dataclass(frozen=True, slots=True)
class DailyCompletion:
    day: date
    label: str
    completed: int


@dataclass(frozen=True, slots=True)
class BestHabit:
    habit_id: int
    name: str
    streak: int
    color: str


@dataclass(frozen=True, slots=True)
class CompletionPoint:
    habit_id: int
    name: str
    label: str
    color: str
    completion_rate: int
    completed: int
    expected: int


def summarize(snapshots: Sequence[HabitSnapshot], *, today: date) -> HabitSummary:
    """Headline numbers across all active habits."""

    if not snapshots:
        return HabitSummary(0, 0, 0, 0)

    today_key = today.isoformat()
    completed_today = sum(
        1 for snapshot in snapshots if today_key in build_completed_set(snapshot.logs)
    )
    longest = max(snapshot.stats.longest_streak for snapshot in snapshots)
    rate_total = sum(snapshot.stats.completion_rate for snapshot in snapshots)

    return HabitSummary(
        total_habits=len(snapshots),
        completed_today=completed_today,
        longest_streak=longest,
        average_completion_rate=percentage(rate_total, len(snapshots) * 100),
    )


def intensity_for(count: int, total: int) -> int:
    """Bucket a day's completion ratio into 0..4."""

    if count <= 0 or total <= 0:
        return 0
    ratio = count / total
    if ratio >= 0.9:
        return 4
    if ratio >= 0.7:
        return 3
    if ratio >= 0.4:
        return 2
    return 1


def _completed_counts(snapshots: Iterable[HabitSnapshot]) -> dict[str, int]:
    counts: dict[str, int] = {}
    for snapshot in snapshots:
        for key in build_completed_set(snapshot.logs):
            counts[key] = counts.get(key, 0) + 1
    return counts


def heatmap(
    snapshots: Sequence[HabitSnapshot], *, today: date, days: int = HEATMAP_DAYS
) -> list[HeatmapDay]:
    """Per-day completion counts over the trailing window, oldest first."""

    if not snapshots:
        return []

    total = len(snapshots)
    counts = _completed_counts(snapshots)
    start = today - timedelta(days=days - 1)
    cells: list[HeatmapDay] = []
    for offset in range(days):
        day = start + timedelta(days=offset)
        count = counts.get(day.isoformat(), 0)
        cells.append(
            HeatmapDay(day=day, count=count, total=total, intensity=intensity_for(count, total))
        )
    return cells


def heatmap_weeks(cells: Sequence[HeatmapDay]) -> list[list[Optional[HeatmapDay]]]:
    """Arrange heatmap cells into Sunday-first week columns padded with None."""

    if not cells:
        return []

    weeks: list[list[Optional[HeatmapDay]]] = []
    current: list[Optional[HeatmapDay]] = [None] * weekday_index(cells[0].day)
    for cell in cells:
        current.append(cell)
        if len(current) == 7:
            weeks.append(current)
            current = []
    if current:
        current.extend([None] * (7 - len(current)))
        weeks.append(current)
    return weeks


def daily_completions(
    snapshots: Sequence[HabitSnapshot], *, today: date, days: int = DAILY_SERIES_DAYS
) -> list[DailyCompletion]:
    """Number of habits completed on each of the trailing ``days``."""

    if not snapshots:
        return []

    counts = _completed_counts(snapshots)
    start = today - timedelta(days=days - 1)
    series: list[DailyCompletion] = []
    for offset in range(days):
        day = start + timedelta(days=offset)
        series.append(
            DailyCompletion(
                day=day,
                label=day.strftime("%b %d"),
                completed=counts.get(day.isoformat(), 0),
            )
        )
    return series


def best_habit(snapshots: Sequence[HabitSnapshot]) -> Optional[BestHabit]:
    """The habit with the longest streak; earliest habit wins ties."""

    best: Optional[HabitSnapshot] = None
    for snapshot in snapshots:
        if best is None or snapshot.stats.longest_streak > best.stats.longest_streak:
            best = snapshot
    if best is None:
        return None
    return BestHabit(
        habit_id=best.habit_id,
        name=best.habit.name,
        streak=best.stats.longest_streak,
        color=best.habit.color or DEFAULT_HABIT_COLOR,
    )


def _chart_label(name: str) -> str:
    if len(name) > CHART_LABEL_LENGTH:
        return name[:CHART_LABEL_LENGTH] + "..."
    return name


def completion_chart(snapshots: Sequence[HabitSnapshot]) -> list[CompletionPoint]:
    """30-day completion rate per habit."""

    return [
        CompletionPoint(
            habit_id=snapshot.habit_id,
            name=snapshot.habit.name,
            label=_chart_label(snapshot.habit.name),
            color=snapshot.habit.color or DEFAULT_HABIT_COLOR,
            completion_rate=snapshot.stats.completion_rate,
            completed=snapshot.stats.total_completed,
            expected=snapshot.stats.total_expected,
        )
        for snapshot in snapshots
    ]
