"""Daily overview: remaining tasks and today's habit progress."""

from __future__ import annotations

from .habit_service import HabitService
from .task_service import TaskService


class DashboardService:
    def __init__(self, tasks: TaskService, habits: HabitService) -> None:
        self.tasks = tasks
        self.habits = habits

    def summary(self, user_id: str) -> dict:
        tasks = self.tasks.list(user_id)
        total = len(tasks)
        remaining = sum(1 for task in tasks if task.get("status") != "completed")
        day_progress = ((total - remaining) / total * 100) if total else 0
        today = self.habits.today()
        return {
            "date": today.isoformat(),
            "tasks_total": total,
            "tasks_remaining": remaining,
            "day_progress": round(day_progress, 1),
            "habits": [HabitService.progress(habit, today) for habit in self.habits.list(user_id)],
        }
