"""Owner profile for tracked habits."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, ClassVar, Optional

from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:  # pragma: no cover
    from .habit import Habit


class UserProfile(SQLModel, table=True):
    """Profile that owns habits; the app runs with a single local profile."""

    __tablename__: ClassVar[str] = "user_profile"

    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(nullable=False, unique=True, index=True, max_length=64)
    display_name: str = Field(default="", max_length=100)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    habits: list["Habit"] = Relationship(
        back_populates="user",
        sa_relationship=relationship(
            "Habit", back_populates="user", cascade="all, delete-orphan"
        ),
    )
