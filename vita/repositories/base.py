"""Repository contract shared by the SQL and demo backends."""

from __future__ import annotations

import abc
import uuid
from datetime import date, datetime, timezone
from typing import Any, Mapping, Optional

from vita.core.errors import ValidationError

TASK_FIELDS = ("title", "description", "due_date", "status")
HABIT_FIELDS = ("name", "description", "target_count")
# counts are stored in 32-bit integer columns
MAX_COUNT = 2_147_483_647


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex}"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def merged_count(current: int | None, count: int) -> int:
    """Same-day total after adding `count`, bounded by MAX_COUNT."""
    total = int(current or 0) + count
    if total > MAX_COUNT:
        raise ValidationError({"count": [f"Daily total cannot exceed {MAX_COUNT}"]})
    return total


def iso_datetime(value: datetime | str | None) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def iso_date(value: date | datetime | str | None) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()


def pick_fields(fields: Mapping[str, Any], allowed: tuple[str, ...]) -> dict:
    """Keep only known columns that are present in a partial update."""
    return {key: fields[key] for key in allowed if key in fields}


class Repository(abc.ABC):
    """
    CRUD operations for users, tasks, habits and habit logs.

    Every task/habit/log operation takes the requesting user's id and only
    ever sees rows owned by that user. Lookups of missing or foreign rows
    return None (or False for deletes); they never raise.

    Results are plain dicts with ISO-8601 date strings:

    - user: id, email, name, password_hash, created_at
    - task: id, title, description, due_date, status, created_at
    - habit: id, name, description, target_count, created_at, logs
    - log: id, habit_id, date, count, created_at
    """

    backend_name = "abstract"

    # -------------------------- users --------------------------
    @abc.abstractmethod
    def get_user(self, user_id: str) -> Optional[dict]: ...

    @abc.abstractmethod
    def get_user_by_email(self, email: str) -> Optional[dict]: ...

    @abc.abstractmethod
    def create_user(self, email: str, name: str, password_hash: str) -> dict:
        """Persist a new user; raises UserExistsError when the email is taken."""

    # -------------------------- tasks --------------------------
    @abc.abstractmethod
    def list_tasks(self, user_id: str) -> list[dict]: ...

    @abc.abstractmethod
    def get_task(self, user_id: str, task_id: str) -> Optional[dict]: ...

    @abc.abstractmethod
    def create_task(self, user_id: str, fields: Mapping[str, Any]) -> dict: ...

    @abc.abstractmethod
    def update_task(self, user_id: str, task_id: str, fields: Mapping[str, Any]) -> Optional[dict]:
        """Apply only the supplied fields; raises NothingToUpdateError when none are."""

    @abc.abstractmethod
    def delete_task(self, user_id: str, task_id: str) -> bool: ...

    # -------------------------- habits --------------------------
    @abc.abstractmethod
    def list_habits(self, user_id: str) -> list[dict]: ...

    @abc.abstractmethod
    def get_habit(self, user_id: str, habit_id: str) -> Optional[dict]: ...

    @abc.abstractmethod
    def create_habit(self, user_id: str, fields: Mapping[str, Any]) -> dict: ...

    @abc.abstractmethod
    def update_habit(self, user_id: str, habit_id: str, fields: Mapping[str, Any]) -> Optional[dict]: ...

    @abc.abstractmethod
    def delete_habit(self, user_id: str, habit_id: str) -> bool:
        """Delete the habit and all of its logs."""

    @abc.abstractmethod
    def append_habit_log(self, user_id: str, habit_id: str, count: int, day: date) -> Optional[dict]:
        """Add `count` to the habit's log for `day`, creating the row if needed."""

    # -------------------------- lifecycle --------------------------
    def close(self) -> None:
        """Release pooled resources. Called once at application shutdown."""
