#!/usr/bin/env python3
"""
Populate the demo data file with a user, a task and a habit.

Usage:
  python scripts/seed_demo.py [--email demo@example.com] [--password demo123] [--file demo-data.json]
"""
from __future__ import annotations

import argparse
import sys
from datetime import date, timedelta
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from vita.core.config import get_settings
from vita.core.errors import UserExistsError
from vita.repositories import JSONRepository
from vita.services import AuthService, HabitService, TaskService


def main() -> None:
    settings = get_settings()
    ap = argparse.ArgumentParser(description="Seed the demo JSON dataset")
    ap.add_argument("--email", default="demo@example.com")
    ap.add_argument("--password", default="demo123")
    ap.add_argument("--name", default="Demo")
    ap.add_argument("--file", default=settings.demo_data_file)
    args = ap.parse_args()

    if len(args.password) < 6:
        raise SystemExit("Password must have at least 6 characters")
    repo = JSONRepository(args.file)
    auth = AuthService(repo, settings)
    try:
        user = auth.register(args.email, args.password, args.name)
    except UserExistsError:
        raise SystemExit(f"User '{args.email}' already exists in {args.file}")

    task = TaskService(repo).create(
        user.id,
        {"title": "Pay bills", "due_date": date.today() + timedelta(days=1), "description": None},
    )
    habit = HabitService(repo).create(user.id, {"name": "Drink water", "description": "Glasses per day", "target_count": 8})
    print("OK: demo data seeded")
    print(f"  User: {user.email} ({user.id})")
    print(f"  Task: {task['title']} ({task['id']})")
    print(f"  Habit: {habit['name']} ({habit['id']})")


if __name__ == "__main__":
    try:
        main()
    except Exception as exc:  # pragma: no cover - CLI use
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
