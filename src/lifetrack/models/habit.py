"""Habits tracking data structures."""

from __future__ import annotations

from datetime import date, datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, ClassVar, Optional

from sqlalchemy import UniqueConstraint
from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

from ..domain.calendar import utc_noon

if TYPE_CHECKING:  # pragma: no cover
    from .user import UserProfile


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class HabitType(str, Enum):
    """Display polarity; GOOD habits are built, BAD habits are avoided."""

    GOOD = "GOOD"
    BAD = "BAD"


class FrequencyType(str, Enum):
    """How often a habit is meant to be completed."""

    DAILY = "DAILY"
    TIMES_PER_WEEK = "TIMES_PER_WEEK"
    SPECIFIC_DAYS = "SPECIFIC_DAYS"


class Habit(SQLModel, table=True):
    """A user-defined habit with a frequency rule."""

    __tablename__: ClassVar[str] = "habit"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user_profile.id", nullable=False, index=True)
    name: str = Field(nullable=False, max_length=100, index=True)
    description: Optional[str] = Field(default=None, max_length=500)
    color: Optional[str] = Field(default=None, max_length=7)
    icon: Optional[str] = Field(default=None, max_length=50)
    habit_type: HabitType = Field(default=HabitType.GOOD, nullable=False)
    frequency_type: FrequencyType = Field(default=FrequencyType.DAILY, nullable=False)
    frequency_value: Optional[int] = Field(default=None)
    # Comma-joined weekday numbers, 0=Sunday..6=Saturday (e.g. "1,3,5").
    frequency_days: Optional[str] = Field(default=None, max_length=32)
    is_archived: bool = Field(default=False, nullable=False, index=True)
    created_at: datetime = Field(default_factory=_utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=_utcnow, nullable=False)

    logs: list["HabitLog"] = Relationship(
        back_populates="habit",
        sa_relationship=relationship(
            "HabitLog",
            back_populates="habit",
            cascade="all, delete-orphan",
        ),
    )

    user: "UserProfile" = Relationship(
        sa_relationship=relationship("UserProfile", back_populates="habits")
    )


class HabitLog(SQLModel, table=True):
    """Completion of a habit on one calendar day; presence means done."""

    __tablename__: ClassVar[str] = "habit_log"
    __table_args__ = (UniqueConstraint("habit_id", "occurred_on", name="uq_habit_log_day"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    habit_id: int = Field(
        foreign_key="habit.id", nullable=False, index=True, ondelete="CASCADE"
    )
    occurred_on: date = Field(nullable=False, index=True)
    completed: bool = Field(default=True, nullable=False)
    created_at: datetime = Field(default_factory=_utcnow, nullable=False)

    habit: "Habit" = Relationship(
        back_populates="logs",
        sa_relationship=relationship("Habit", back_populates="logs"),
    )

    @property
    def logged_at(self) -> datetime:
        """The calendar day as a UTC-noon instant, for API consumers."""

        return utc_noon(self.occurred_on)
