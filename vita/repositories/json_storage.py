"""
Demo-mode persistence adapter.

The whole dataset lives in one JSON document with four flat arrays (users,
tasks, habits, habit_logs). Every write loads the document, mutates it in
memory and writes it back. A lock serializes writers inside one process;
separate processes sharing the file can still overwrite each other.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from datetime import date
from pathlib import Path
from typing import Any, Iterator, Mapping, Optional

from vita.core.errors import NothingToUpdateError, StorageError, UserExistsError

from .base import (
    HABIT_FIELDS,
    TASK_FIELDS,
    Repository,
    iso_date,
    iso_datetime,
    new_id,
    merged_count,
    pick_fields,
    utcnow,
)

logger = logging.getLogger(__name__)

COLLECTIONS = ("users", "tasks", "habits", "habit_logs")
TASK_KEYS = ("id", "title", "description", "due_date", "status", "created_at")
HABIT_KEYS = ("id", "name", "description", "target_count", "created_at")
LOG_KEYS = ("id", "habit_id", "date", "count", "created_at")


def empty_dataset() -> dict:
    return {name: [] for name in COLLECTIONS}


def db_defaults(db: dict) -> dict:
    for name in COLLECTIONS:
        db.setdefault(name, [])
    return db


def _public(row: Mapping[str, Any], keys: tuple[str, ...]) -> dict:
    return {key: row.get(key) for key in keys}


def _to_storage(fields: Mapping[str, Any]) -> dict:
    """Dates become ISO strings so the document stays plain JSON."""
    out = dict(fields)
    if "due_date" in out:
        out["due_date"] = iso_date(out["due_date"])
    return out


class JSONRepository(Repository):
    backend_name = "demo"

    def __init__(self, path: str | os.PathLike) -> None:
        self.path = Path(path)
        self._lock = threading.RLock()

    # -------------------------- file I/O --------------------------
    def load(self) -> dict:
        """Read the document, creating an empty one if the file is missing."""
        with self._lock:
            if not self.path.exists():
                logger.info("Demo data file %s not found; initializing an empty dataset", self.path)
                data = empty_dataset()
                self.save(data)
                return data
            try:
                with self.path.open("r", encoding="utf-8") as f:
                    data = json.load(f)
            except json.JSONDecodeError as exc:
                raise StorageError(f"Demo data file {self.path} is corrupt: {exc}") from exc
            except OSError as exc:
                raise StorageError(f"Cannot read demo data file {self.path}: {exc}") from exc
            if not isinstance(data, dict):
                raise StorageError(f"Demo data file {self.path} must contain a JSON object")
            data = db_defaults(data)
            for name in COLLECTIONS:
                if not isinstance(data[name], list) or not all(isinstance(row, dict) for row in data[name]):
                    raise StorageError(f"Demo data file {self.path}: \"{name}\" must be a list of objects")
            return data

    def save(self, db: dict) -> None:
        with self._lock:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(prefix=".vita-", suffix=".json", dir=str(self.path.parent))
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(db, f, ensure_ascii=False, indent=2)
                os.replace(tmp_name, self.path)
            except OSError as exc:
                raise StorageError(f"Cannot write demo data file {self.path}: {exc}") from exc

    @contextmanager
    def _transaction(self) -> Iterator[dict]:
        """Load, let the caller mutate, then persist. Nothing is written if the body raises."""
        with self._lock:
            data = self.load()
            yield data
            self.save(data)

    # -------------------------- helpers --------------------------
    @staticmethod
    def _find(rows: list[dict], **match: Any) -> Optional[dict]:
        for row in rows:
            if all(row.get(key) == value for key, value in match.items()):
                return row
        return None

    @staticmethod
    def _habit_view(habit: Mapping[str, Any], logs: list[dict]) -> dict:
        view = _public(habit, HABIT_KEYS)
        own = [log for log in logs if log.get("habit_id") == habit.get("id")]
        own.sort(key=lambda log: log.get("date") or "")
        view["logs"] = [_public(log, LOG_KEYS) for log in own]
        return view

    # -------------------------- users --------------------------
    def get_user(self, user_id: str) -> Optional[dict]:
        user = self._find(self.load()["users"], id=user_id)
        return dict(user) if user else None

    def get_user_by_email(self, email: str) -> Optional[dict]:
        user = self._find(self.load()["users"], email=email)
        return dict(user) if user else None

    def create_user(self, email: str, name: str, password_hash: str) -> dict:
        with self._transaction() as data:
            if self._find(data["users"], email=email):
                raise UserExistsError()
            user = {
                "id": new_id("u"),
                "email": email,
                "name": name,
                "password_hash": password_hash,
                "created_at": iso_datetime(utcnow()),
            }
            data["users"].append(user)
        return dict(user)

    # -------------------------- tasks --------------------------
    def list_tasks(self, user_id: str) -> list[dict]:
        rows = [row for row in self.load()["tasks"] if row.get("user_id") == user_id]
        rows.sort(key=lambda row: row.get("created_at") or "", reverse=True)
        return [_public(row, TASK_KEYS) for row in rows]

    def get_task(self, user_id: str, task_id: str) -> Optional[dict]:
        row = self._find(self.load()["tasks"], id=task_id, user_id=user_id)
        return _public(row, TASK_KEYS) if row else None

    def create_task(self, user_id: str, fields: Mapping[str, Any]) -> dict:
        values = _to_storage(fields)
        task = {
            "id": new_id("t"),
            "user_id": user_id,
            "title": values["title"],
            "description": values.get("description"),
            "due_date": values.get("due_date"),
            "status": values.get("status") or "pending",
            "created_at": iso_datetime(utcnow()),
        }
        with self._transaction() as data:
            data["tasks"].insert(0, task)
        return _public(task, TASK_KEYS)

    def update_task(self, user_id: str, task_id: str, fields: Mapping[str, Any]) -> Optional[dict]:
        values = _to_storage(pick_fields(fields, TASK_FIELDS))
        if not values:
            raise NothingToUpdateError()
        with self._lock:
            data = self.load()
            row = self._find(data["tasks"], id=task_id, user_id=user_id)
            if row is None:
                return None
            row.update(values)
            self.save(data)
            return _public(row, TASK_KEYS)

    def delete_task(self, user_id: str, task_id: str) -> bool:
        with self._lock:
            data = self.load()
            kept = [row for row in data["tasks"] if not (row.get("id") == task_id and row.get("user_id") == user_id)]
            if len(kept) == len(data["tasks"]):
                return False
            data["tasks"] = kept
            self.save(data)
            return True

    # -------------------------- habits --------------------------
    def list_habits(self, user_id: str) -> list[dict]:
        data = self.load()
        habits = [row for row in data["habits"] if row.get("user_id") == user_id]
        habits.sort(key=lambda row: row.get("created_at") or "", reverse=True)
        return [self._habit_view(habit, data["habit_logs"]) for habit in habits]

    def get_habit(self, user_id: str, habit_id: str) -> Optional[dict]:
        data = self.load()
        habit = self._find(data["habits"], id=habit_id, user_id=user_id)
        return self._habit_view(habit, data["habit_logs"]) if habit else None

    def create_habit(self, user_id: str, fields: Mapping[str, Any]) -> dict:
        habit = {
            "id": new_id("h"),
            "user_id": user_id,
            "name": fields["name"],
            "description": fields.get("description"),
            "target_count": fields.get("target_count"),
            "created_at": iso_datetime(utcnow()),
        }
        with self._transaction() as data:
            data["habits"].insert(0, habit)
        return self._habit_view(habit, [])

    def update_habit(self, user_id: str, habit_id: str, fields: Mapping[str, Any]) -> Optional[dict]:
        values = pick_fields(fields, HABIT_FIELDS)
        if not values:
            raise NothingToUpdateError()
        with self._lock:
            data = self.load()
            habit = self._find(data["habits"], id=habit_id, user_id=user_id)
            if habit is None:
                return None
            habit.update(values)
            self.save(data)
            return self._habit_view(habit, data["habit_logs"])

    def delete_habit(self, user_id: str, habit_id: str) -> bool:
        with self._lock:
            data = self.load()
            if self._find(data["habits"], id=habit_id, user_id=user_id) is None:
                return False
            data["habits"] = [row for row in data["habits"] if row.get("id") != habit_id]
            data["habit_logs"] = [row for row in data["habit_logs"] if row.get("habit_id") != habit_id]
            self.save(data)
            return True

    def append_habit_log(self, user_id: str, habit_id: str, count: int, day: date) -> Optional[dict]:
        day_value = iso_date(day)
        with self._lock:
            data = self.load()
            if self._find(data["habits"], id=habit_id, user_id=user_id) is None:
                return None
            log = self._find(data["habit_logs"], habit_id=habit_id, date=day_value)
            if log is not None:
                log["count"] = merged_count(log.get("count"), count)
            else:
                log = {
                    "id": new_id("hl"),
                    "habit_id": habit_id,
                    "date": day_value,
                    "count": count,
                    "created_at": iso_datetime(utcnow()),
                }
                data["habit_logs"].append(log)
            self.save(data)
            return _public(log, LOG_KEYS)
