#!/usr/bin/env python3
"""Create the gigbook SQLite3 database and optionally register a member."""

import argparse
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core import store
from core.config import ADMIN_ROLE, DB_PATH
from core.database import create_schema, get_connection, transaction
from core.log import setup_logging


def create_database(admin_id: str | None = None, admin_name: str | None = None):
    """Create the database and tables if they don't exist."""
    DB_PATH.parent.mkdir(parents=True, exist_ok=True)

    conn = get_connection(DB_PATH)
    try:
        create_schema(conn)
        print(f"Database created successfully at: {DB_PATH}")

        if admin_id:
            with transaction(conn):
                store.upsert_member(conn, admin_id, admin_name, role=ADMIN_ROLE)
            print(f"Registered app admin: {admin_id}")
    finally:
        conn.close()


if __name__ == "__main__":
    setup_logging()
    parser = argparse.ArgumentParser(description="Create the gigbook database")
    parser.add_argument("--admin-id", help="User id to register as app admin")
    parser.add_argument("--admin-name", help="Display name for the app admin")
    args = parser.parse_args()

    create_database(args.admin_id, args.admin_name)
