#!/usr/bin/env python3
"""
Import Google Calendar events into gigs (30 days back, 90 days ahead).

Usage:
    uv run python src/scripts/pull_calendar.py --user-id <app admin user id>
"""

import argparse
import asyncio
import sys
import traceback
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import DB_PATH
from core.database import get_connection
from core.google_client import GoogleCalendarClient
from core.log import setup_logging
from services.access import resolve_actor
from services.calendar_sync import pull_calendar_to_gigs
from services.tokens import TokenManager, load_connection


async def main(user_id: str):
    """Main entry point for an explicit pull."""
    conn = get_connection(DB_PATH)
    client = GoogleCalendarClient()
    try:
        actor = resolve_actor(conn, user_id)
        connection = load_connection(conn)
        print(f"Pulling events from calendar '{connection['calendar_id']}'...")

        result = await pull_calendar_to_gigs(
            conn, actor, connection, TokenManager(conn, client), client
        )

        print(f"  Created: {result.created}")
        print(f"  Updated: {result.updated}")
        print(f"  Cancelled: {result.cancelled}")
        print(f"  Skipped: {result.skipped}")
        if result.failures:
            print(f"\nFailed events: {len(result.failures)}")
            for failure in result.failures:
                print(f"  {failure.event_id}: {failure.message}")

        print("\nDone!")

    except Exception as e:
        print(f"\nError: {e}")
        traceback.print_exc()
        raise

    finally:
        await client.aclose()
        conn.close()


if __name__ == "__main__":
    setup_logging()
    parser = argparse.ArgumentParser(description="Pull Google Calendar events into gigs")
    parser.add_argument("--user-id", required=True, help="App admin running the pull")
    args = parser.parse_args()

    asyncio.run(main(args.user_id))
