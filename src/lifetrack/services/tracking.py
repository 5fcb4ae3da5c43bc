"""Load habits with their logs and derive stats for a profile."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from ..domain.frequency import Frequency, frequency_from_habit
from ..domain.repositories.habit import HabitNotFoundError, HabitRepository
from ..models.habit import Habit, HabitLog
from .habits import DayStatus, HabitStats, compute_stats, day_statuses


@dataclass(slots=True)
class HabitSnapshot:
    """A habit, its frequency rule, its logs and the stats derived from them."""

    habit: Habit
    frequency: Frequency
    logs: list[HabitLog] = field(default_factory=list)
    stats: HabitStats = field(default_factory=HabitStats)

    @property
    def habit_id(self) -> int:
        return self.habit.id  # type: ignore[return-value]

    def grid(self, *, today: date, days: int) -> list[DayStatus]:
        return day_statuses(self.frequency, self.logs, today=today, days=days)


def habit_stats(
    repository: HabitRepository, habit_id: int, *, user_id: int, today: date
) -> HabitStats:
    """Compute stats for a single habit from all of its logs."""

    habit = repository.get_by_id(habit_id, user_id=user_id)
    if habit is None:
        raise HabitNotFoundError(habit_id)
    logs = repository.get_logs(habit_id, user_id=user_id)
    return compute_stats(frequency_from_habit(habit), logs, today=today)


def load_snapshots(
    repository: HabitRepository, *, user_id: int, today: date
) -> list[HabitSnapshot]:
    """Return a snapshot for every active habit, in creation order."""

    habits = repository.list_active(user_id=user_id)
    habit_ids = [habit.id for habit in habits if habit.id is not None]
    logs_by_habit = repository.logs_for_habits(habit_ids, user_id=user_id)

    snapshots: list[HabitSnapshot] = []
    for habit in habits:
        if habit.id is None:
            continue
        frequency = frequency_from_habit(habit)
        logs = logs_by_habit.get(habit.id, [])
        snapshots.append(
            HabitSnapshot(
                habit=habit,
                frequency=frequency,
                logs=logs,
                stats=compute_stats(frequency, logs, today=today),
            )
        )
    return snapshots


def all_habit_stats(
    repository: HabitRepository, *, user_id: int, today: date
) -> dict[int, HabitStats]:
    """Map every active habit id to its stats."""

    return {
        snapshot.habit_id: snapshot.stats
        for snapshot in load_snapshots(repository, user_id=user_id, today=today)
    }
