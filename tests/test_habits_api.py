from __future__ import annotations

from datetime import date


def _create(client, user, **fields):
    payload = {"name": "Drink water", **fields}
    res = client.post("/habits", json=payload, headers=user.headers)
    assert res.status_code == 201, res.text
    return res.json()


def test_create_habit(client, alice):
    habit = _create(client, alice, description="glasses", target_count=8)
    assert habit["name"] == "Drink water"
    assert habit["description"] == "glasses"
    assert habit["target_count"] == 8
    assert habit["logs"] == []

    listed = client.get("/habits", headers=alice.headers).json()["habits"]
    assert [h["id"] for h in listed] == [habit["id"]]


def test_create_habit_validation(client, alice):
    for payload in (
        {},
        {"name": ""},
        {"name": "x", "target_count": 0},
        {"name": "x", "target_count": -3},
        {"name": "x", "target_count": "5"},
        {"name": "x", "target_count": 2.5},
        {"name": "x", "target_count": True},
        {"name": "x", "target_count": 2**31},
    ):
        res = client.post("/habits", json=payload, headers=alice.headers)
        assert res.status_code == 400, payload
        assert res.json()["errorCode"] == "VALIDATION_ERROR"
    assert client.get("/habits", headers=alice.headers).json() == {"habits": []}


def test_same_day_logs_accumulate(client, alice):
    habit = _create(client, alice, target_count=10)

    first = client.post(f"/habits/{habit['id']}/log", json={"count": 2}, headers=alice.headers)
    second = client.post(f"/habits/{habit['id']}/log", json={"count": 3}, headers=alice.headers)

    assert first.status_code == second.status_code == 201
    log = second.json()["log"]
    assert log["id"] == first.json()["log"]["id"]
    assert log["count"] == 5
    assert log["habit_id"] == habit["id"]
    assert log["date"] == date.today().isoformat()

    logs = client.get(f"/habits/{habit['id']}", headers=alice.headers).json()["logs"]
    assert len(logs) == 1
    assert logs[0]["count"] == 5


def test_log_count_defaults_to_one(client, alice):
    habit = _create(client, alice)
    res = client.post(f"/habits/{habit['id']}/log", headers=alice.headers)
    assert res.status_code == 201
    assert res.json()["log"]["count"] == 1

    res = client.post(f"/habits/{habit['id']}/log", json={}, headers=alice.headers)
    assert res.json()["log"]["count"] == 2


def test_log_rejects_invalid_counts(client, alice):
    habit = _create(client, alice)
    for count in (0, -1, "3", 1.5, 3_000_000_000):
        res = client.post(f"/habits/{habit['id']}/log", json={"count": count}, headers=alice.headers)
        assert res.status_code == 400, count
    assert client.get(f"/habits/{habit['id']}", headers=alice.headers).json()["logs"] == []


def test_log_total_past_column_range_is_rejected(client, alice):
    habit = _create(client, alice)
    url = f"/habits/{habit['id']}/log"
    assert client.post(url, json={"count": 2_000_000_000}, headers=alice.headers).status_code == 201

    res = client.post(url, json={"count": 2_000_000_000}, headers=alice.headers)
    assert res.status_code == 400
    assert res.json()["errorCode"] == "VALIDATION_ERROR"
    assert "count" in res.json()["fields"]

    logs = client.get(f"/habits/{habit['id']}", headers=alice.headers).json()["logs"]
    assert [log["count"] for log in logs] == [2_000_000_000]


def test_other_users_habit_is_not_found(client, alice, bob):
    habit = _create(client, alice)

    assert client.get(f"/habits/{habit['id']}", headers=bob.headers).status_code == 404
    assert client.put(f"/habits/{habit['id']}", json={"name": "x"}, headers=bob.headers).status_code == 404
    assert client.post(f"/habits/{habit['id']}/log", json={"count": 1}, headers=bob.headers).status_code == 404
    assert client.delete(f"/habits/{habit['id']}", headers=bob.headers).status_code == 404

    own = client.get(f"/habits/{habit['id']}", headers=alice.headers).json()
    assert own["name"] == "Drink water"
    assert own["logs"] == []
    assert client.get("/habits", headers=bob.headers).json() == {"habits": []}


def test_update_habit(client, alice):
    habit = _create(client, alice, description="d", target_count=3)

    res = client.put(f"/habits/{habit['id']}", json={"name": "Read"}, headers=alice.headers)
    assert res.status_code == 200
    assert res.json()["name"] == "Read"
    assert res.json()["target_count"] == 3

    res = client.put(f"/habits/{habit['id']}", json={"target_count": None, "description": None}, headers=alice.headers)
    assert res.status_code == 200
    assert res.json()["target_count"] is None
    assert res.json()["description"] is None

    res = client.put(f"/habits/{habit['id']}", json={}, headers=alice.headers)
    assert res.status_code == 400
    assert res.json()["errorCode"] == "NOTHING_TO_UPDATE"

    res = client.put(f"/habits/{habit['id']}", json={"name": None}, headers=alice.headers)
    assert res.status_code == 400
    assert "name" in res.json()["fields"]


def test_delete_habit_removes_logs(client, alice):
    habit = _create(client, alice)
    client.post(f"/habits/{habit['id']}/log", json={"count": 4}, headers=alice.headers)

    res = client.delete(f"/habits/{habit['id']}", headers=alice.headers)
    assert res.status_code == 200
    assert res.json() == {"success": True}
    assert client.get(f"/habits/{habit['id']}", headers=alice.headers).status_code == 404
    assert client.post(f"/habits/{habit['id']}/log", headers=alice.headers).status_code == 404
