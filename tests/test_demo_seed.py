from __future__ import annotations

from datetime import date

from sqlmodel import select

from lifetrack.infra.repositories.habit import SQLModelHabitRepository
from lifetrack.models import Habit, HabitType
from lifetrack.services.demo_seed import run_demo_seed
from lifetrack.services.tracking import all_habit_stats

TODAY = date(2024, 3, 15)


def test_run_demo_seed_populates_habits_and_history(session_factory, profile):
    summary = run_demo_seed(session_factory, user_id=profile.id, today=TODAY)

    assert summary.habits == 4
    assert summary.logs > 0
    with session_factory() as session:
        habits = session.exec(select(Habit).where(Habit.user_id == profile.id)).all()
        assert {habit.habit_type for habit in habits} == {HabitType.GOOD, HabitType.BAD}


def test_run_demo_seed_is_idempotent(session_factory, profile):
    first = run_demo_seed(session_factory, user_id=profile.id, today=TODAY)
    second = run_demo_seed(session_factory, user_id=profile.id, today=TODAY)

    assert first == second


def test_seeded_habits_have_streaks(session_factory, profile):
    run_demo_seed(session_factory, user_id=profile.id, today=TODAY)
    repo = SQLModelHabitRepository(session_factory)

    stats = all_habit_stats(repo, user_id=profile.id, today=TODAY)

    assert len(stats) == 4
    assert all(item.total_expected > 0 for item in stats.values())
    assert max(item.current_streak for item in stats.values()) > 0


def test_seed_is_scoped_to_profile(session_factory, profile, other_profile):
    run_demo_seed(session_factory, user_id=profile.id, today=TODAY)

    summary = run_demo_seed(session_factory, user_id=other_profile.id, today=TODAY)

    assert summary.habits == 4
