from __future__ import annotations

import sys
from datetime import date, timedelta
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# make the vita package importable when running tests from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from vita.app import create_app  # noqa: E402
from vita.core.config import Settings  # noqa: E402
from vita.repositories import JSONRepository, SQLRepository  # noqa: E402

TEST_SECRET = "test-secret"


def make_settings(**overrides) -> Settings:
    values = dict(
        app_env="test",
        database_url="",
        jwt_secret=TEST_SECRET,
        jwt_ttl_seconds=7 * 24 * 60 * 60,
        demo_mode=False,
        demo_data_file="demo-data.json",
        cors_origins=(),
        log_level="WARNING",
        auth_rate_limit=0,
        auth_rate_window_seconds=300,
    )
    values.update(overrides)
    return Settings(**values)


def tomorrow() -> str:
    return (date.today() + timedelta(days=1)).isoformat()


def yesterday() -> str:
    return (date.today() - timedelta(days=1)).isoformat()


@pytest.fixture()
def sql_repo(tmp_path):
    """SQLRepository over a temporary SQLite file, disposed after the test."""
    db_file = tmp_path / "test.db"
    repo = SQLRepository.from_url(f"sqlite:///{db_file}")
    repo.create_schema()
    yield repo
    repo.close()


@pytest.fixture()
def json_repo(tmp_path):
    return JSONRepository(tmp_path / "demo-data.json")


@pytest.fixture(params=["sql", "demo"])
def repo(request, tmp_path):
    """Both backends, so contract tests run against each of them."""
    if request.param == "sql":
        yield request.getfixturevalue("sql_repo")
    else:
        yield request.getfixturevalue("json_repo")


@pytest.fixture()
def settings(repo):
    return make_settings(demo_mode=repo.backend_name == "demo")


@pytest.fixture()
def client(repo, settings):
    app = create_app(settings, repository=repo)
    return TestClient(app)


class ApiUser:
    """A registered user plus the Authorization header for its token."""

    def __init__(self, client: TestClient, email: str, password: str = "secret123", name: str = "Tester"):
        res = client.post("/auth/register", json={"email": email, "password": password, "name": name})
        assert res.status_code == 201, res.text
        self.id = res.json()["id"]
        self.email = email
        res = client.post("/auth/login", json={"email": email, "password": password})
        assert res.status_code == 200, res.text
        self.token = res.json()["token"]
        self.headers = {"Authorization": f"Bearer {self.token}"}


@pytest.fixture()
def alice(client):
    return ApiUser(client, "alice@example.com", name="Alice")


@pytest.fixture()
def bob(client):
    return ApiUser(client, "bob@example.com", name="Bob")
