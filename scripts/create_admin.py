"""Provision the admin account. Run once per deploy; safe to re-run.

    ADMIN_EMAIL=admin@example.com ADMIN_PASSWORD=... python scripts/create_admin.py
"""
import argparse
import os
import sys
from pathlib import Path

# Ensure project root is on sys.path
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from sqlmodel import Session

from expense_tracker.config import settings
from expense_tracker.core.provisioning import ensure_admin
from expense_tracker.database import engine, init_db


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Create or promote the admin account.")
    parser.add_argument("--name", default=os.getenv("ADMIN_NAME", "System Administrator"))
    parser.add_argument("--email", default=os.getenv("ADMIN_EMAIL"))
    parser.add_argument("--password", default=os.getenv("ADMIN_PASSWORD"))
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    if not args.email or not args.password:
        print("ADMIN_EMAIL and ADMIN_PASSWORD (or --email/--password) are required.")
        return 1

    print(f"Database URL: {settings.database_url}")
    init_db()
    with Session(engine) as session:
        user, created = ensure_admin(session, args.name, args.email, args.password)

    if created:
        print(f"Admin {user.email} created.")
    else:
        print(f"Admin {user.email} already exists. Nothing to do.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
