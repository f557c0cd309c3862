"""
SQL-specific checks against a temporary SQLite database.
"""
from __future__ import annotations

from datetime import date

from fastapi.testclient import TestClient
from sqlalchemy import func, select

from conftest import make_settings
from vita.app import create_app
from vita.db.create_tables import create_all
from vita.db.models import HabitLog
from vita.repositories import JSONRepository, SQLRepository


def _log_rows(repo: SQLRepository) -> int:
    with repo._session() as session:
        return session.execute(select(func.count()).select_from(HabitLog)).scalar_one()


def test_single_row_per_habit_and_day(sql_repo):
    user = sql_repo.create_user("a@example.com", "A", "hash")
    habit = sql_repo.create_habit(user["id"], {"name": "h"})
    for _ in range(3):
        sql_repo.append_habit_log(user["id"], habit["id"], 2, date(2040, 1, 1))
    assert _log_rows(sql_repo) == 1
    assert sql_repo.get_habit(user["id"], habit["id"])["logs"][0]["count"] == 6


def test_delete_habit_removes_log_rows(sql_repo):
    user = sql_repo.create_user("a@example.com", "A", "hash")
    habit = sql_repo.create_habit(user["id"], {"name": "h"})
    sql_repo.append_habit_log(user["id"], habit["id"], 1, date(2040, 1, 1))
    sql_repo.append_habit_log(user["id"], habit["id"], 1, date(2040, 1, 2))
    assert _log_rows(sql_repo) == 2

    sql_repo.delete_habit(user["id"], habit["id"])
    assert _log_rows(sql_repo) == 0


def test_database_failure_is_a_generic_server_error(tmp_path):
    # schema never created: every query fails with "no such table"
    repo = SQLRepository.from_url(f"sqlite:///{tmp_path / 'empty.db'}")
    try:
        client = TestClient(create_app(make_settings(), repository=repo))
        res = client.post("/auth/login", json={"email": "a@example.com", "password": "whatever"})
        assert res.status_code == 500
        assert res.json() == {"errorCode": "SERVER_ERROR", "message": "Internal server error"}
        assert "no such table" not in res.text
    finally:
        repo.close()


def test_import_demo_dataset(sql_repo, tmp_path):
    demo = JSONRepository(tmp_path / "demo-data.json")
    user = demo.create_user("a@example.com", "A", "hash")
    task = demo.create_task(user["id"], {"title": "t", "due_date": date(2099, 1, 1)})
    habit = demo.create_habit(user["id"], {"name": "h", "target_count": 2})
    demo.append_habit_log(user["id"], habit["id"], 3, date(2040, 1, 1))
    data = demo.load()
    # duplicated same-day rows (older demo files) are merged on import
    data["habit_logs"].append({"id": "hl_dup", "habit_id": habit["id"], "date": "2040-01-01", "count": 2})

    inserted = sql_repo.import_dataset(data)
    assert inserted == {"users": 1, "tasks": 1, "habits": 1, "habit_logs": 1}

    assert sql_repo.get_user_by_email("a@example.com")["id"] == user["id"]
    assert sql_repo.get_task(user["id"], task["id"]) == task
    logs = sql_repo.get_habit(user["id"], habit["id"])["logs"]
    assert [(log["date"], log["count"]) for log in logs] == [("2040-01-01", 5)]

    # running the import again is a no-op
    assert sql_repo.import_dataset(data) == {"users": 0, "tasks": 0, "habits": 0, "habit_logs": 0}


def test_create_tables_script_builds_schema(tmp_path):
    url = f"sqlite:///{tmp_path / 'fresh.db'}"
    create_all(url)
    repo = SQLRepository.from_url(url)
    try:
        user = repo.create_user("a@example.com", "A", "hash")
        assert repo.list_tasks(user["id"]) == []
    finally:
        repo.close()
