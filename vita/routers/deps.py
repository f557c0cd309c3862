"""Accessors for the services the app factory stores on app.state."""
from __future__ import annotations

from fastapi import Request

from vita.services import AuthService, DashboardService, HabitService, TaskService


def _state_attr(request: Request, name: str):
    svc = getattr(getattr(request.app, "state", None), name, None)
    if svc is None:
        raise RuntimeError(f"{name} is not configured")
    return svc


def get_auth_service(request: Request) -> AuthService:
    return _state_attr(request, "auth_service")


def get_task_service(request: Request) -> TaskService:
    return _state_attr(request, "task_service")


def get_habit_service(request: Request) -> HabitService:
    return _state_attr(request, "habit_service")


def get_dashboard_service(request: Request) -> DashboardService:
    return _state_attr(request, "dashboard_service")
