"""Tests for cross-habit dashboard aggregates."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from lifetrack.domain.calendar import weekday_index
from lifetrack.domain.frequency import Daily
from lifetrack.models import Habit
from lifetrack.services import insights
from lifetrack.services.habits import compute_stats
from lifetrack.services.tracking import HabitSnapshot

TODAY = date(2024, 3, 15)


def make_snapshot(habit_id: int, name: str, *offsets: int, color: str | None = None) -> HabitSnapshot:
    habit = Habit(id=habit_id, user_id=1, name=name, color=color)
    logs = [TODAY - timedelta(days=offset) for offset in offsets]
    return HabitSnapshot(
        habit=habit,
        frequency=Daily(),
        logs=logs,  # type: ignore[arg-type]
        stats=compute_stats(Daily(), logs, today=TODAY),
    )


@pytest.fixture
def snapshots():
    return [
        make_snapshot(1, "Walk", 0, 1, 2, color="#3b82f6"),
        make_snapshot(2, "Read", 1),
    ]


class TestSummary:
    def test_empty(self):
        assert insights.summarize([], today=TODAY) == insights.HabitSummary(0, 0, 0, 0)

    def test_headline_numbers(self, snapshots):
        summary = insights.summarize(snapshots, today=TODAY)

        assert summary.total_habits == 2
        assert summary.completed_today == 1
        assert summary.longest_streak == 3
        # Rates 10% and 3%; the 6.5% mean rounds half up.
        assert summary.average_completion_rate == 7


@pytest.mark.parametrize(
    "count, total, expected",
    [(0, 4, 0), (1, 4, 1), (2, 4, 2), (3, 4, 3), (4, 4, 4), (9, 10, 4), (1, 0, 0)],
)
def test_intensity_buckets(count, total, expected):
    assert insights.intensity_for(count, total) == expected


class TestHeatmap:
    def test_covers_ninety_days_ending_today(self, snapshots):
        cells = insights.heatmap(snapshots, today=TODAY)

        assert len(cells) == insights.HEATMAP_DAYS
        assert cells[-1].day == TODAY
        assert cells[-1].count == 1
        assert cells[-2].count == 2
        assert cells[-2].intensity == 4
        assert all(cell.total == 2 for cell in cells)

    def test_no_habits_no_cells(self):
        assert insights.heatmap([], today=TODAY) == []
        assert insights.heatmap_weeks([]) == []

    def test_weeks_are_sunday_first_and_padded(self):
        wednesday = date(2024, 3, 13)
        cells = [
            insights.HeatmapDay(day=wednesday + timedelta(days=offset), count=0, total=1, intensity=0)
            for offset in range(3)
        ]

        weeks = insights.heatmap_weeks(cells)

        assert len(weeks) == 1
        assert weeks[0][:3] == [None, None, None]
        assert weeks[0][3:6] == cells
        assert weeks[0][6] is None

    def test_full_heatmap_weeks_hold_every_cell(self, snapshots):
        cells = insights.heatmap(snapshots, today=TODAY)
        weeks = insights.heatmap_weeks(cells)

        assert all(len(week) == 7 for week in weeks)
        assert sum(1 for week in weeks for cell in week if cell is not None) == len(cells)
        assert weeks[0][weekday_index(cells[0].day)] == cells[0]


class TestDailyCompletions:
    def test_series_counts_habits_per_day(self, snapshots):
        series = insights.daily_completions(snapshots, today=TODAY)

        assert len(series) == insights.DAILY_SERIES_DAYS
        assert series[-1].label == "Mar 15"
        assert [point.completed for point in series[-3:]] == [1, 2, 1]

    def test_empty(self):
        assert insights.daily_completions([], today=TODAY) == []


class TestBestHabit:
    def test_longest_streak_wins(self, snapshots):
        best = insights.best_habit(snapshots)

        assert best is not None
        assert best.name == "Walk"
        assert best.streak == 3
        assert best.color == "#3b82f6"

    def test_ties_keep_earliest_habit(self):
        first = make_snapshot(1, "First", 0)
        second = make_snapshot(2, "Second", 0)

        assert insights.best_habit([first, second]).habit_id == 1

    def test_none_without_habits(self):
        assert insights.best_habit([]) is None


def test_completion_chart_truncates_long_names(snapshots):
    long_name = make_snapshot(3, "Very Long Habit Name")

    points = insights.completion_chart(snapshots + [long_name])

    assert [point.completion_rate for point in points] == [10, 3, 0]
    assert points[1].color == "#22c55e"
    assert points[2].label == "Very Long Ha..."
    assert points[2].name == "Very Long Habit Name"
