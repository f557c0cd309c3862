"""
Configuration helpers for the VITA backend.

Settings are read once from the environment so that routers, services and the
persistence layer never fetch os.environ directly.
"""

from dataclasses import dataclass
from functools import lru_cache
import os

DEFAULT_JWT_SECRET = "supersecret"
SEVEN_DAYS = 7 * 24 * 60 * 60


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    database_url: str
    jwt_secret: str
    jwt_ttl_seconds: int
    demo_mode: bool
    demo_data_file: str
    cors_origins: tuple[str, ...]
    log_level: str
    auth_rate_limit: int
    auth_rate_window_seconds: int

    @property
    def backend(self) -> str:
        return "demo" if self.demo_mode else "sql"


def _int(value: str | None, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _csv(value: str | None) -> tuple[str, ...]:
    return tuple(item.strip().rstrip("/") for item in (value or "").split(",") if item.strip())


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        database_url=(os.getenv("DATABASE_URL") or "").strip(),
        jwt_secret=os.getenv("JWT_SECRET") or DEFAULT_JWT_SECRET,
        jwt_ttl_seconds=_int(os.getenv("JWT_TTL_SECONDS"), SEVEN_DAYS),
        demo_mode=_bool(os.getenv("DEMO_MODE"), False),
        demo_data_file=os.getenv("DEMO_DATA_FILE") or "demo-data.json",
        cors_origins=_csv(os.getenv("CORS_ORIGINS")),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        auth_rate_limit=_int(os.getenv("AUTH_RATE_LIMIT"), 20),
        auth_rate_window_seconds=_int(os.getenv("AUTH_RATE_WINDOW_SECONDS"), 300),
    )
