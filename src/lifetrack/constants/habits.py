"""Habit presentation constants."""

from __future__ import annotations

from typing import Final

# Indexed by weekday number, 0=Sunday .. 6=Saturday.
DAYS_OF_WEEK: Final[tuple[dict, ...]] = (
    {"value": 0, "label": "Sunday", "short": "Sun"},
    {"value": 1, "label": "Monday", "short": "Mon"},
    {"value": 2, "label": "Tuesday", "short": "Tue"},
    {"value": 3, "label": "Wednesday", "short": "Wed"},
    {"value": 4, "label": "Thursday", "short": "Thu"},
    {"value": 5, "label": "Friday", "short": "Fri"},
    {"value": 6, "label": "Saturday", "short": "Sat"},
)

HABIT_COLORS: Final[tuple[str, ...]] = (
    "#ef4444",  # red
    "#f97316",  # orange
    "#eab308",  # yellow
    "#22c55e",  # green
    "#14b8a6",  # teal
    "#3b82f6",  # blue
    "#8b5cf6",  # violet
    "#ec4899",  # pink
)

DEFAULT_HABIT_COLOR: Final[str] = "#22c55e"

# Day-grid periods offered on the habits page.
PERIOD_DAYS: Final[dict[str, int]] = {"week": 7, "month": 30}
DEFAULT_PERIOD: Final[str] = "week"
