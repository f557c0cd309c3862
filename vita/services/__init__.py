"""
Use cases for the VITA API.

Each service receives the repository chosen at startup and implements the
business rules (registration, ownership, same-day log merge). Routers call
these services instead of touching the repository directly.
"""

from .auth_service import AuthService
from .dashboard_service import DashboardService
from .habit_service import HabitService
from .task_service import TaskService

__all__ = ["AuthService", "DashboardService", "HabitService", "TaskService"]
