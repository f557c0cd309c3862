"""High-level data access helpers backed by SQLAlchemy."""
from __future__ import annotations

from contextlib import contextmanager
from datetime import date, datetime
from typing import Any, Iterator, Mapping, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from vita.core.errors import NothingToUpdateError, UserExistsError
from vita.db.models import Habit, HabitLog, Task, User
from vita.db.session import Base, build_engine, build_sessionmaker

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


def _user_to_dict(entity: User) -> dict:
    return {
        "id": entity.id,
        "email": entity.email,
        "name": entity.name,
        "password_hash": entity.password_hash,
        "created_at": iso_datetime(entity.created_at),
    }


def _task_to_dict(entity: Task) -> dict:
    return {
        "id": entity.id,
        "title": entity.title,
        "description": entity.description,
        "due_date": iso_date(entity.due_date),
        "status": entity.status,
        "created_at": iso_datetime(entity.created_at),
    }


def _log_to_dict(entity: HabitLog) -> dict:
    return {
        "id": entity.id,
        "habit_id": entity.habit_id,
        "date": iso_date(entity.date),
        "count": int(entity.count or 0),
        "created_at": iso_datetime(entity.created_at),
    }


def _habit_to_dict(entity: Habit) -> dict:
    return {
        "id": entity.id,
        "name": entity.name,
        "description": entity.description,
        "target_count": entity.target_count,
        "created_at": iso_datetime(entity.created_at),
        "logs": [_log_to_dict(log) for log in entity.logs],
    }


class SQLRepository(Repository):
    """Repository over a pooled SQLAlchemy engine; one session per call."""

    backend_name = "sql"

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._sessionmaker = build_sessionmaker(engine)

    @classmethod
    def from_url(cls, url: str) -> "SQLRepository":
        return cls(build_engine(url))

    @contextmanager
    def _session(self) -> Iterator[Session]:
        session: Session = self._sessionmaker()
        try:
            yield session
        finally:
            session.close()

    def create_schema(self) -> None:
        Base.metadata.create_all(bind=self.engine)

    def close(self) -> None:
        self.engine.dispose()

    # -------------------------- users --------------------------
    def get_user(self, user_id: str) -> Optional[dict]:
        with self._session() as session:
            entity = session.get(User, user_id)
            return _user_to_dict(entity) if entity else None

    def get_user_by_email(self, email: str) -> Optional[dict]:
        with self._session() as session:
            stmt = select(User).where(User.email == email)
            entity = session.execute(stmt).scalar_one_or_none()
            return _user_to_dict(entity) if entity else None

    def create_user(self, email: str, name: str, password_hash: str) -> dict:
        entity = User(
            id=new_id("u"),
            email=email,
            name=name,
            password_hash=password_hash,
            created_at=utcnow(),
        )
        with self._session() as session:
            session.add(entity)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise UserExistsError() from exc
            return _user_to_dict(entity)

    # -------------------------- tasks --------------------------
    def list_tasks(self, user_id: str) -> list[dict]:
        with self._session() as session:
            stmt = select(Task).where(Task.user_id == user_id).order_by(Task.created_at.desc())
            return [_task_to_dict(entity) for entity in session.execute(stmt).scalars().all()]

    def get_task(self, user_id: str, task_id: str) -> Optional[dict]:
        with self._session() as session:
            stmt = select(Task).where(Task.id == task_id, Task.user_id == user_id)
            entity = session.execute(stmt).scalar_one_or_none()
            return _task_to_dict(entity) if entity else None

    def create_task(self, user_id: str, fields: Mapping[str, Any]) -> dict:
        entity = Task(
            id=new_id("t"),
            user_id=user_id,
            title=fields["title"],
            description=fields.get("description"),
            due_date=fields.get("due_date"),
            status=fields.get("status") or "pending",
            created_at=utcnow(),
        )
        with self._session() as session:
            session.add(entity)
            session.commit()
            return _task_to_dict(entity)

    def update_task(self, user_id: str, task_id: str, fields: Mapping[str, Any]) -> Optional[dict]:
        values = pick_fields(fields, TASK_FIELDS)
        if not values:
            raise NothingToUpdateError()
        with self._session() as session:
            stmt = update(Task).where(Task.id == task_id, Task.user_id == user_id).values(**values)
            result = session.execute(stmt)
            if result.rowcount == 0:
                session.rollback()
                return None
            session.commit()
            entity = session.get(Task, task_id, populate_existing=True)
            return _task_to_dict(entity)

    def delete_task(self, user_id: str, task_id: str) -> bool:
        with self._session() as session:
            result = session.execute(delete(Task).where(Task.id == task_id, Task.user_id == user_id))
            session.commit()
            return result.rowcount > 0

    # -------------------------- habits --------------------------
    def _owned_habit(self, session: Session, user_id: str, habit_id: str, *, for_update: bool = False) -> Optional[Habit]:
        stmt = select(Habit).where(Habit.id == habit_id, Habit.user_id == user_id)
        if for_update:
            stmt = stmt.with_for_update()
        return session.execute(stmt).scalar_one_or_none()

    def list_habits(self, user_id: str) -> list[dict]:
        with self._session() as session:
            stmt = (
                select(Habit)
                .where(Habit.user_id == user_id)
                .options(selectinload(Habit.logs))
                .order_by(Habit.created_at.desc())
            )
            return [_habit_to_dict(entity) for entity in session.execute(stmt).scalars().all()]

    def get_habit(self, user_id: str, habit_id: str) -> Optional[dict]:
        with self._session() as session:
            entity = self._owned_habit(session, user_id, habit_id)
            return _habit_to_dict(entity) if entity else None

    def create_habit(self, user_id: str, fields: Mapping[str, Any]) -> dict:
        entity = Habit(
            id=new_id("h"),
            user_id=user_id,
            name=fields["name"],
            description=fields.get("description"),
            target_count=fields.get("target_count"),
            created_at=utcnow(),
        )
        with self._session() as session:
            session.add(entity)
            session.commit()
            return _habit_to_dict(entity)

    def update_habit(self, user_id: str, habit_id: str, fields: Mapping[str, Any]) -> Optional[dict]:
        values = pick_fields(fields, HABIT_FIELDS)
        if not values:
            raise NothingToUpdateError()
        with self._session() as session:
            stmt = update(Habit).where(Habit.id == habit_id, Habit.user_id == user_id).values(**values)
            result = session.execute(stmt)
            if result.rowcount == 0:
                session.rollback()
                return None
            session.commit()
            entity = session.get(Habit, habit_id, populate_existing=True)
            return _habit_to_dict(entity)

    def delete_habit(self, user_id: str, habit_id: str) -> bool:
        with self._session() as session:
            entity = self._owned_habit(session, user_id, habit_id)
            if entity is None:
                return False
            session.execute(delete(HabitLog).where(HabitLog.habit_id == habit_id))
            session.execute(delete(Habit).where(Habit.id == habit_id, Habit.user_id == user_id))
            session.commit()
            return True

    def append_habit_log(self, user_id: str, habit_id: str, count: int, day: date) -> Optional[dict]:
        with self._session() as session:
            # row lock serializes concurrent appends to the same habit (no-op on SQLite)
            habit = self._owned_habit(session, user_id, habit_id, for_update=True)
            if habit is None:
                return None
            stmt = select(HabitLog).where(HabitLog.habit_id == habit_id, HabitLog.date == day)
            log = session.execute(stmt).scalar_one_or_none()
            if log is not None:
                log.count = merged_count(log.count, count)
            else:
                log = HabitLog(
                    id=new_id("hl"),
                    habit_id=habit_id,
                    date=day,
                    count=count,
                    created_at=utcnow(),
                )
                session.add(log)
            session.commit()
            return _log_to_dict(log)

    # -------------------------- bulk import --------------------------
    def import_dataset(self, data: Mapping[str, Any]) -> dict:
        """
        Copy a demo-mode document into the database, keeping ids.

        Rows whose id already exists are skipped; logs sharing a habit and day
        are merged by summing their counts. Returns per-table insert counts.
        """
        def _dt(value):
            if not value:
                return utcnow()
            return datetime.fromisoformat(str(value).replace("Z", "+00:00"))

        def _d(value):
            if not value:
                return None
            return date.fromisoformat(str(value)[:10])

        inserted = {"users": 0, "tasks": 0, "habits": 0, "habit_logs": 0}
        with self._session() as session:
            for row in data.get("users") or []:
                if session.get(User, row["id"]):
                    continue
                session.add(
                    User(
                        id=row["id"],
                        email=(row.get("email") or "").strip().lower(),
                        name=row.get("name") or "",
                        password_hash=row.get("password_hash") or "",
                        created_at=_dt(row.get("created_at")),
                    )
                )
                inserted["users"] += 1
            session.flush()
            for row in data.get("tasks") or []:
                if session.get(Task, row["id"]):
                    continue
                session.add(
                    Task(
                        id=row["id"],
                        user_id=row["user_id"],
                        title=row.get("title") or "",
                        description=row.get("description"),
                        due_date=_d(row.get("due_date")),
                        status=row.get("status") or "pending",
                        created_at=_dt(row.get("created_at")),
                    )
                )
                inserted["tasks"] += 1
            for row in data.get("habits") or []:
                if session.get(Habit, row["id"]):
                    continue
                session.add(
                    Habit(
                        id=row["id"],
                        user_id=row["user_id"],
                        name=row.get("name") or "",
                        description=row.get("description"),
                        target_count=row.get("target_count"),
                        created_at=_dt(row.get("created_at")),
                    )
                )
                inserted["habits"] += 1
            session.flush()
            merged: dict[tuple[str, date], HabitLog] = {}
            for row in data.get("habit_logs") or []:
                day = _d(row.get("date"))
                key = (row["habit_id"], day)
                count = int(row.get("count") or 0)
                if key in merged:
                    merged[key].count += count
                    continue
                stmt = select(HabitLog).where(HabitLog.habit_id == key[0], HabitLog.date == day)
                if session.execute(stmt).scalar_one_or_none() is not None:
                    continue
                log = HabitLog(
                    id=row.get("id") or new_id("hl"),
                    habit_id=row["habit_id"],
                    date=day,
                    count=count,
                    created_at=_dt(row.get("created_at")),
                )
                session.add(log)
                merged[key] = log
                inserted["habit_logs"] += 1
            session.commit()
        return inserted
