"""
Pytest configuration and shared fixtures.
"""

import sys
from datetime import timedelta
from decimal import Decimal
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from core import store  # noqa: E402
from core.database import create_schema, get_connection, utc_now  # noqa: E402
from core.google_client import EventListing, TokenGrant  # noqa: E402
from services.access import Actor  # noqa: E402

ADMIN_ID = "admin-1"
MEMBER_IDS = ["member-1", "member-2", "member-3", "member-4"]


@pytest.fixture
def conn():
    """In-memory database with the schema applied."""
    connection = get_connection(":memory:")
    create_schema(connection)
    yield connection
    connection.close()


@pytest.fixture
def members(conn):
    """One app admin and four musicians, all active."""
    store.upsert_member(conn, ADMIN_ID, "Asha Admin", role="app_admin")
    for i, user_id in enumerate(MEMBER_IDS, start=1):
        store.upsert_member(conn, user_id, f"Musician {i}", role="musician")
    conn.commit()
    return [ADMIN_ID, *MEMBER_IDS]


@pytest.fixture
def gig_fields():
    """Fields for a confirmed gig with every optional detail populated."""
    return {
        "title": "Sharma Wedding Sangeet",
        "venue": "Taj Lands End",
        "city": "Mumbai",
        "address": "Bandstand, Bandra West",
        "date": "2025-02-14",
        "start_time": "19:00:00",
        "end_time": "23:30:00",
        "organizer_name": "Rohit Sharma",
        "organizer_phone": "+91 98200 00000",
        "organizer_email": "rohit@example.com",
        "status": "confirmed",
        "quoted_amount": Decimal("120000"),
        "confirmed_amount": Decimal("100000"),
        "tds_percentage": Decimal("10"),
        "notes": "Two sets, acoustic opener",
    }


@pytest.fixture
def gig(conn, gig_fields):
    """Stored confirmed gig row."""
    gig_id = store.insert_gig(conn, gig_fields)
    conn.commit()
    return store.get_gig(conn, gig_id)


@pytest.fixture
def confirm_members(conn):
    """Mark members as available ('yes') for a gig."""

    def _confirm(gig_id, user_ids):
        for user_id in user_ids:
            store.upsert_availability(conn, gig_id, user_id, "yes", None)
        conn.commit()

    return _confirm


# =============================================================================
# CALENDAR FAKES
# =============================================================================


class FakeGoogleClient:
    """In-memory stand-in for GoogleCalendarClient that records every call."""

    def __init__(self):
        self.calls = []
        self.grant = TokenGrant(access_token="fresh-access", expires_in=3600, refresh_token="new-refresh")
        self.refresh_error = None
        self.write_error = None
        self.list_error = None
        self.events = []
        self.next_sync_token = "sync-2"
        self.inserted_id = "evt-new"

    def call_names(self):
        return [call[0] for call in self.calls]

    def authorization_url(self, redirect_uri, state):
        return f"https://accounts.example/auth?state={state}"

    async def exchange_code(self, code, redirect_uri):
        self.calls.append(("exchange", code))
        return self.grant

    async def refresh_access_token(self, refresh_token):
        self.calls.append(("refresh", refresh_token))
        if self.refresh_error:
            raise self.refresh_error
        return self.grant

    async def insert_event(self, access_token, calendar_id, body):
        self.calls.append(("insert", access_token, body))
        if self.write_error:
            raise self.write_error
        return {"id": self.inserted_id, **body}

    async def update_event(self, access_token, calendar_id, event_id, body):
        self.calls.append(("update", access_token, event_id, body))
        if self.write_error:
            raise self.write_error
        return {"id": event_id, **body}

    async def list_events(
        self, access_token, calendar_id, sync_token=None, time_min=None, time_max=None, order_by=None
    ):
        self.calls.append((
            "list",
            {"sync_token": sync_token, "time_min": time_min, "time_max": time_max, "order_by": order_by},
        ))
        if self.list_error:
            raise self.list_error
        return EventListing(items=list(self.events), next_sync_token=self.next_sync_token)

    async def watch_events(self, access_token, calendar_id, channel_id, address):
        self.calls.append(("watch", channel_id, address))
        return {"id": channel_id, "resourceId": "res-1", "expiration": "1767225600000"}

    async def stop_channel(self, access_token, channel_id, resource_id):
        self.calls.append(("stop", channel_id, resource_id))


def expiry(minutes: int) -> str:
    return (utc_now() + timedelta(minutes=minutes)).isoformat(timespec="milliseconds")


@pytest.fixture
def fake_client():
    return FakeGoogleClient()


@pytest.fixture
def connection(conn, members):
    """Stored calendar connection with a valid access token."""
    store.save_calendar_connection(
        conn,
        access_token="stored-access",
        refresh_token="refresh-1",
        token_expires_at=expiry(30),
        created_by=ADMIN_ID,
    )
    conn.commit()
    return store.get_calendar_connection(conn)


@pytest.fixture
def admin():
    return Actor(user_id=ADMIN_ID, role="app_admin")


@pytest.fixture
def musician():
    return Actor(user_id="member-1", role="musician")
