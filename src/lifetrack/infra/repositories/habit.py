"""SQLModel implementation of Habit repository."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Callable, ContextManager, Optional, Sequence

from sqlmodel import Session, select

from ...domain.repositories.habit import HabitNotFoundError
from ...logging_config import get_logger
from ...models.habit import Habit, HabitLog

logger = get_logger(__name__)

UPDATABLE_FIELDS = frozenset(
    {
        "name",
        "description",
        "color",
        "icon",
        "habit_type",
        "frequency_type",
        "frequency_value",
        "frequency_days",
    }
)


class SQLModelHabitRepository:
    """SQLModel-based habit repository implementation."""

    def __init__(self, session_factory: Callable[[], ContextManager[Session]]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    @staticmethod
    def _owned_habit(session: Session, habit_id: int, user_id: int) -> Optional[Habit]:
        return session.exec(
            select(Habit).where(Habit.id == habit_id, Habit.user_id == user_id)
        ).first()

    def _require_habit(self, session: Session, habit_id: int, user_id: int) -> Habit:
        habit = self._owned_habit(session, habit_id, user_id)
        if habit is None:
            raise HabitNotFoundError(habit_id)
        return habit

    def get_by_id(self, habit_id: int, *, user_id: int) -> Optional[Habit]:
        """Retrieve a habit by ID."""
        with self.session_factory() as session:
            obj = self._owned_habit(session, habit_id, user_id)
            if obj:
                session.expunge(obj)
            return obj

    def list_all(self, *, user_id: int, include_archived: bool = False) -> list[Habit]:
        """List habits in creation order, optionally including archived ones."""
        with self.session_factory() as session:
            statement = (
                select(Habit)
                .where(Habit.user_id == user_id)
                .order_by(Habit.created_at, Habit.id)  # type: ignore[arg-type]
            )

            if not include_archived:
                statement = statement.where(Habit.is_archived == False)  # noqa: E712

            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def list_active(self, *, user_id: int) -> list[Habit]:
        """List only non-archived habits."""
        return self.list_all(user_id=user_id, include_archived=False)

    def create(self, habit: Habit, *, user_id: int) -> Habit:
        """Create a new habit."""
        with self.session_factory() as session:
            habit.user_id = user_id
            session.add(habit)
            session.commit()
            session.refresh(habit)
            session.expunge(habit)
        logger.info("Habit created", extra={"habit_id": habit.id, "user_id": user_id})
        return habit

    def update(self, habit_id: int, changes: dict[str, Any], *, user_id: int) -> Habit:
        """Apply field changes to an existing habit."""
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        with self.session_factory() as session:
            habit = self._require_habit(session, habit_id, user_id)
            for key, value in changes.items():
                setattr(habit, key, value)
            habit.updated_at = datetime.now(timezone.utc)
            session.add(habit)
            session.commit()
            session.refresh(habit)
            session.expunge(habit)
        logger.info(
            "Habit updated",
            extra={"habit_id": habit_id, "user_id": user_id, "fields": sorted(changes)},
        )
        return habit

    def archive(self, habit_id: int, *, user_id: int) -> Habit:
        """Soft-delete a habit."""
        with self.session_factory() as session:
            habit = self._require_habit(session, habit_id, user_id)
            habit.is_archived = True
            habit.updated_at = datetime.now(timezone.utc)
            session.add(habit)
            session.commit()
            session.refresh(habit)
            session.expunge(habit)
        logger.info("Habit archived", extra={"habit_id": habit_id, "user_id": user_id})
        return habit

    def delete(self, habit_id: int, *, user_id: int) -> None:
        """Delete a habit and its logs."""
        with self.session_factory() as session:
            habit = self._require_habit(session, habit_id, user_id)
            session.delete(habit)
            session.commit()
        logger.info("Habit deleted", extra={"habit_id": habit_id, "user_id": user_id})

    # Habit log operations
    def get_log(self, habit_id: int, occurred_on: date, *, user_id: int) -> Optional[HabitLog]:
        """Get the log for a habit on a calendar day."""
        with self.session_factory() as session:
            self._require_habit(session, habit_id, user_id)
            obj = session.exec(
                select(HabitLog)
                .where(HabitLog.habit_id == habit_id)
                .where(HabitLog.occurred_on == occurred_on)
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def get_logs(
        self,
        habit_id: int,
        *,
        user_id: int,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[HabitLog]:
        """Get logs for a habit, newest first, optionally bounded by day."""
        with self.session_factory() as session:
            self._require_habit(session, habit_id, user_id)
            statement = select(HabitLog).where(HabitLog.habit_id == habit_id)
            if start is not None:
                statement = statement.where(HabitLog.occurred_on >= start)
            if end is not None:
                statement = statement.where(HabitLog.occurred_on <= end)
            statement = statement.order_by(HabitLog.occurred_on.desc())  # type: ignore[attr-defined]
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def logs_for_habits(
        self, habit_ids: Sequence[int], *, user_id: int, since: Optional[date] = None
    ) -> dict[int, list[HabitLog]]:
        """Group logs by habit for a batch of habits, newest first."""
        grouped: dict[int, list[HabitLog]] = {habit_id: [] for habit_id in habit_ids}
        if not habit_ids:
            return grouped

        with self.session_factory() as session:
            statement = (
                select(HabitLog)
                .join(Habit, Habit.id == HabitLog.habit_id)  # type: ignore[arg-type]
                .where(Habit.user_id == user_id)
                .where(HabitLog.habit_id.in_(habit_ids))  # type: ignore[attr-defined]
            )
            if since is not None:
                statement = statement.where(HabitLog.occurred_on >= since)
            statement = statement.order_by(HabitLog.occurred_on.desc())  # type: ignore[attr-defined]
            rows = list(session.exec(statement).all())
            session.expunge_all()

        for row in rows:
            grouped.setdefault(row.habit_id, []).append(row)
        return grouped

    def toggle_log(self, habit_id: int, occurred_on: date, *, user_id: int) -> bool:
        """Flip completion for a day; return the new completed state.

        The (habit_id, occurred_on) unique constraint rejects a concurrent
        duplicate insert; the resulting IntegrityError propagates.
        """
        with self.session_factory() as session:
            self._require_habit(session, habit_id, user_id)
            existing = session.exec(
                select(HabitLog)
                .where(HabitLog.habit_id == habit_id)
                .where(HabitLog.occurred_on == occurred_on)
            ).first()

            if existing is not None:
                session.delete(existing)
                session.commit()
                completed = False
            else:
                session.add(HabitLog(habit_id=habit_id, occurred_on=occurred_on, completed=True))
                session.commit()
                completed = True

        logger.info(
            "Habit log toggled",
            extra={
                "habit_id": habit_id,
                "user_id": user_id,
                "day": occurred_on.isoformat(),
                "completed": completed,
            },
        )
        return completed
