"""Demo data for trying the habits pages locally."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Callable, ContextManager

from sqlalchemy import func
from sqlmodel import Session, select

from ..domain.calendar import weekday_index
from ..logging_config import get_logger
from ..models.habit import FrequencyType, Habit, HabitLog, HabitType

SessionFactory = Callable[[], ContextManager[Session]]

logger = get_logger(__name__)

SEED_HISTORY_DAYS = 60


@dataclass(frozen=True)
class SeedSummary:
    """Counts returned after demo seeding."""

    habits: int
    logs: int


_DEMO_HABITS = [
    {
        "name": "Morning Walk",
        "description": "20 minutes outside before work",
        "color": "#22c55e",
        "frequency_type": FrequencyType.DAILY,
        # Completed on every day except each fifth one.
        "pattern": lambda offset, day: offset % 5 != 4,
    },
    {
        "name": "Strength Training",
        "description": "Gym sessions on Mon/Wed/Fri",
        "color": "#3b82f6",
        "frequency_type": FrequencyType.SPECIFIC_DAYS,
        "frequency_days": "1,3,5",
        "pattern": lambda offset, day: weekday_index(day) in {1, 3, 5},
    },
    {
        "name": "Read 30 Minutes",
        "description": "Books, not feeds",
        "color": "#8b5cf6",
        "frequency_type": FrequencyType.TIMES_PER_WEEK,
        "frequency_value": 4,
        "pattern": lambda offset, day: offset % 2 == 0,
    },
    {
        "name": "No Late-Night Snacks",
        "description": "Clean day when nothing after 21:00",
        "color": "#ef4444",
        "habit_type": HabitType.BAD,
        "frequency_type": FrequencyType.DAILY,
        "pattern": lambda offset, day: offset % 7 not in {5, 6},
    },
]


def run_demo_seed(
    session_factory: SessionFactory, *, user_id: int, today: date | None = None
) -> SeedSummary:
    """Seed demo habits and their history idempotently for ``user_id``."""

    today = today or date.today()
    with session_factory() as session:
        for entry in _DEMO_HABITS:
            fields = {key: value for key, value in entry.items() if key != "pattern"}
            existing = session.exec(
                select(Habit).where(Habit.name == fields["name"], Habit.user_id == user_id)
            ).first()
            if existing is not None:
                continue

            habit = Habit(user_id=user_id, **fields)
            session.add(habit)
            session.flush()
            pattern = entry["pattern"]
            for offset in range(SEED_HISTORY_DAYS):
                day = today - timedelta(days=offset)
                if pattern(offset, day):
                    session.add(HabitLog(habit_id=habit.id, occurred_on=day))
        session.commit()
        summary = _build_seed_summary(session, user_id=user_id)

    logger.info(
        "Demo data seeded",
        extra={"user_id": user_id, "habits": summary.habits, "logs": summary.logs},
    )
    return summary


def _build_seed_summary(session: Session, *, user_id: int) -> SeedSummary:
    """Compile counts for tables populated by the demo seed."""

    habit_count = session.exec(select(func.count(Habit.id)).where(Habit.user_id == user_id)).one()
    log_count = session.exec(
        select(func.count(HabitLog.id))
        .join(Habit, Habit.id == HabitLog.habit_id)
        .where(Habit.user_id == user_id)
    ).one()
    return SeedSummary(habits=habit_count, logs=log_count)
