"""SQLModel table exports."""

from .habit import FrequencyType, Habit, HabitLog, HabitType
from .user import UserProfile

__all__ = [
    "FrequencyType",
    "Habit",
    "HabitLog",
    "HabitType",
    "UserProfile",
]
