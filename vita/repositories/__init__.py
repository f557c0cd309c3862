"""
Persistence adapters.

Two interchangeable implementations of the `Repository` contract: the SQL
backend (SQLAlchemy) and the demo backend (a single JSON document on disk).
The app factory picks one at startup via `build_repository`.
"""

from __future__ import annotations

from vita.core.config import Settings

from .base import Repository
from .json_storage import JSONRepository
from .sql_repository import SQLRepository


def build_repository(settings: Settings) -> Repository:
    """Return the backend selected by configuration."""
    if settings.demo_mode:
        return JSONRepository(settings.demo_data_file)
    return SQLRepository.from_url(settings.database_url)


__all__ = ["Repository", "JSONRepository", "SQLRepository", "build_repository"]
