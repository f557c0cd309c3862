from __future__ import annotations

import json
from datetime import date

import pytest
from fastapi.testclient import TestClient

from conftest import make_settings
from vita.app import create_app
from vita.core.errors import StorageError, UserExistsError
from vita.repositories import JSONRepository


def test_missing_file_is_initialized(tmp_path):
    path = tmp_path / "nested" / "demo-data.json"
    repo = JSONRepository(path)

    assert repo.list_tasks("u_1") == []
    assert json.loads(path.read_text(encoding="utf-8")) == {"users": [], "tasks": [], "habits": [], "habit_logs": []}


def test_document_layout(tmp_path):
    path = tmp_path / "demo-data.json"
    repo = JSONRepository(path)
    user = repo.create_user("a@example.com", "A", "hash")
    habit = repo.create_habit(user["id"], {"name": "h"})
    repo.create_task(user["id"], {"title": "t", "due_date": date(2099, 1, 1)})
    repo.append_habit_log(user["id"], habit["id"], 2, date(2099, 1, 1))

    doc = json.loads(path.read_text(encoding="utf-8"))
    assert set(doc) == {"users", "tasks", "habits", "habit_logs"}
    assert doc["users"][0]["email"] == "a@example.com"
    assert doc["tasks"][0]["user_id"] == user["id"]
    assert doc["tasks"][0]["due_date"] == "2099-01-01"
    assert doc["habits"][0]["user_id"] == user["id"]
    log = doc["habit_logs"][0]
    assert (log["habit_id"], log["date"], log["count"]) == (habit["id"], "2099-01-01", 2)


def test_missing_collections_are_defaulted(tmp_path):
    path = tmp_path / "demo-data.json"
    path.write_text(json.dumps({"users": []}), encoding="utf-8")
    assert JSONRepository(path).list_habits("u_1") == []


@pytest.mark.parametrize(
    "content",
    ["{not json", "[1, 2, 3]", '{"users": {"a": 1}}', '{"users": [], "tasks": ["t_1"]}'],
)
def test_corrupt_file_is_fatal(tmp_path, content):
    path = tmp_path / "demo-data.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(StorageError):
        JSONRepository(path).load()
    assert path.read_text(encoding="utf-8") == content


def test_corrupt_file_surfaces_as_server_error(tmp_path):
    path = tmp_path / "demo-data.json"
    path.write_text("{broken", encoding="utf-8")
    app = create_app(make_settings(demo_mode=True, demo_data_file=str(path)))
    client = TestClient(app)

    res = client.post("/auth/login", json={"email": "a@example.com", "password": "whatever"})
    assert res.status_code == 500
    assert res.json() == {"errorCode": "SERVER_ERROR", "message": "Internal server error"}


def test_failed_mutation_leaves_file_untouched(tmp_path):
    path = tmp_path / "demo-data.json"
    repo = JSONRepository(path)
    repo.create_user("a@example.com", "A", "hash")
    before = path.read_text(encoding="utf-8")

    with pytest.raises(UserExistsError):
        repo.create_user("a@example.com", "B", "hash")
    assert path.read_text(encoding="utf-8") == before


def test_duplicate_registration_keeps_one_record(tmp_path):
    path = tmp_path / "demo-data.json"
    client = TestClient(create_app(make_settings(demo_mode=True, demo_data_file=str(path))))
    payload = {"email": "twice@example.com", "password": "hunter22", "name": "Twice"}

    assert client.post("/auth/register", json=payload).status_code == 201
    assert client.post("/auth/register", json=payload).status_code == 400

    users = json.loads(path.read_text(encoding="utf-8"))["users"]
    assert [u["email"] for u in users] == ["twice@example.com"]
    assert users[0]["password_hash"] != "hunter22"
