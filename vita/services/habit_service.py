"""Habit use cases: owner-scoped CRUD, daily logging and progress."""

from __future__ import annotations

from datetime import date
from typing import Any, Callable, Mapping

from vita.core.errors import NotFoundError, NothingToUpdateError
from vita.repositories.base import HABIT_FIELDS, Repository, pick_fields

HABIT_NOT_FOUND = "Habit not found"


class HabitService:
    def __init__(self, repository: Repository, today: Callable[[], date] = date.today) -> None:
        self.repository = repository
        self._today = today

    def today(self) -> date:
        """The server's local calendar date, used as the log day."""
        return self._today()

    def list(self, user_id: str) -> list[dict]:
        return self.repository.list_habits(user_id)

    def get(self, user_id: str, habit_id: str) -> dict:
        habit = self.repository.get_habit(user_id, habit_id)
        if habit is None:
            raise NotFoundError(HABIT_NOT_FOUND)
        return habit

    def create(self, user_id: str, fields: Mapping[str, Any]) -> dict:
        return self.repository.create_habit(user_id, fields)

    def update(self, user_id: str, habit_id: str, fields: Mapping[str, Any]) -> dict:
        values = pick_fields(fields, HABIT_FIELDS)
        if not values:
            raise NothingToUpdateError()
        habit = self.repository.update_habit(user_id, habit_id, values)
        if habit is None:
            raise NotFoundError(HABIT_NOT_FOUND)
        return habit

    def delete(self, user_id: str, habit_id: str) -> None:
        if not self.repository.delete_habit(user_id, habit_id):
            raise NotFoundError(HABIT_NOT_FOUND)

    def log(self, user_id: str, habit_id: str, count: int = 1) -> dict:
        """Add to today's log for the habit; repeated calls on one day accumulate."""
        log = self.repository.append_habit_log(user_id, habit_id, count, self.today())
        if log is None:
            raise NotFoundError(HABIT_NOT_FOUND)
        return log

    @staticmethod
    def progress(habit: Mapping[str, Any], day: date) -> dict:
        day_value = day.isoformat()
        today_count = sum(int(log.get("count") or 0) for log in habit.get("logs") or [] if log.get("date") == day_value)
        target = habit.get("target_count")
        percent = min(today_count / target * 100, 100) if target else 0
        return {
            "id": habit["id"],
            "name": habit["name"],
            "target_count": target,
            "today_count": today_count,
            "progress": round(percent, 1),
        }
