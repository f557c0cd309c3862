"""One-off migration script: demo JSON (demo-data.json) -> Postgres."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

# make the vita package importable when run directly
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from vita.core.config import get_settings
from vita.core.errors import StorageError
from vita.repositories import JSONRepository, SQLRepository


def migrate(source: Path, database_url: str) -> dict:
    if not source.exists():
        raise SystemExit(f"File not found: {source}")
    data = JSONRepository(source).load()
    repo = SQLRepository.from_url(database_url)
    try:
        repo.create_schema()
        return repo.import_dataset(data)
    finally:
        repo.close()


def main() -> None:
    settings = get_settings()
    ap = argparse.ArgumentParser(description="Copy the demo JSON dataset into the SQL database")
    ap.add_argument("--source", default=settings.demo_data_file, help="Demo data file (default: DEMO_DATA_FILE)")
    ap.add_argument("--database-url", default=settings.database_url, help="Target database (default: DATABASE_URL)")
    args = ap.parse_args()
    if not args.database_url:
        raise SystemExit("DATABASE_URL must be configured (or pass --database-url)")
    try:
        inserted = migrate(Path(args.source), args.database_url)
    except StorageError as exc:
        raise SystemExit(str(exc)) from exc
    print("Demo data migrated successfully.")
    for table, count in inserted.items():
        print(f"  {table}: {count}")


if __name__ == "__main__":
    main()
