"""Habit repository protocol."""

from __future__ import annotations

from datetime import date
from typing import Any, Optional, Protocol, Sequence

from ...models.habit import Habit, HabitLog


class HabitNotFoundError(LookupError):
    """Raised when a habit does not exist or belongs to another profile."""

    def __init__(self, habit_id: int) -> None:
        super().__init__(f"Habit {habit_id} not found")
        self.habit_id = habit_id


class HabitRepository(Protocol):
    """Repository for managing habits and their completion logs."""

    def get_by_id(self, habit_id: int, *, user_id: int) -> Optional[Habit]:
        """Retrieve a habit by ID."""
        ...

    def list_all(self, *, user_id: int, include_archived: bool = False) -> list[Habit]:
        """List habits in creation order, optionally including archived ones."""
        ...

    def list_active(self, *, user_id: int) -> list[Habit]:
        """List only non-archived habits."""
        ...

    def create(self, habit: Habit, *, user_id: int) -> Habit:
        """Create a new habit."""
        ...

    def update(self, habit_id: int, changes: dict[str, Any], *, user_id: int) -> Habit:
        """Apply field changes to an existing habit."""
        ...

    def archive(self, habit_id: int, *, user_id: int) -> Habit:
        """Soft-delete a habit."""
        ...

    def delete(self, habit_id: int, *, user_id: int) -> None:
        """Delete a habit and its logs."""
        ...

    # Habit log operations
    def get_log(self, habit_id: int, occurred_on: date, *, user_id: int) -> Optional[HabitLog]:
        """Get the log for a habit on a calendar day."""
        ...

    def get_logs(
        self,
        habit_id: int,
        *,
        user_id: int,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[HabitLog]:
        """Get logs for a habit, newest first, optionally bounded by day."""
        ...

    def logs_for_habits(
        self, habit_ids: Sequence[int], *, user_id: int, since: Optional[date] = None
    ) -> dict[int, list[HabitLog]]:
        """Group logs by habit for a batch of habits."""
        ...

    def toggle_log(self, habit_id: int, occurred_on: date, *, user_id: int) -> bool:
        """Flip completion for a day; return the new completed state."""
        ...
