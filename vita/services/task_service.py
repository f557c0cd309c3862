"""Task use cases: owner-scoped CRUD."""

from __future__ import annotations

from typing import Any, Mapping

from vita.core.errors import NotFoundError, NothingToUpdateError
from vita.repositories.base import TASK_FIELDS, Repository, pick_fields

TASK_NOT_FOUND = "Task not found"


class TaskService:
    def __init__(self, repository: Repository) -> None:
        self.repository = repository

    def list(self, user_id: str) -> list[dict]:
        return self.repository.list_tasks(user_id)

    def get(self, user_id: str, task_id: str) -> dict:
        task = self.repository.get_task(user_id, task_id)
        if task is None:
            raise NotFoundError(TASK_NOT_FOUND)
        return task

    def create(self, user_id: str, fields: Mapping[str, Any]) -> dict:
        return self.repository.create_task(user_id, fields)

    def update(self, user_id: str, task_id: str, fields: Mapping[str, Any]) -> dict:
        values = pick_fields(fields, TASK_FIELDS)
        if not values:
            raise NothingToUpdateError()
        task = self.repository.update_task(user_id, task_id, values)
        if task is None:
            raise NotFoundError(TASK_NOT_FOUND)
        return task

    def delete(self, user_id: str, task_id: str) -> None:
        if not self.repository.delete_task(user_id, task_id):
            raise NotFoundError(TASK_NOT_FOUND)
