"""
Data models for gigs, ledgers and the calendar connection.

Store rows are TypedDicts (plain dicts coming out of sqlite); computed
results live in services as dataclasses.
"""

from decimal import Decimal
from typing import Any, TypedDict


class Member(TypedDict):
    """Band roster entry."""
    user_id: str
    full_name: str | None
    role: str
    active: bool


class Gig(TypedDict):
    """Booking row."""
    id: str
    title: str
    venue: str
    city: str
    address: str | None
    date: str  # YYYY-MM-DD
    start_time: str | None  # HH:MM:SS, local clock
    end_time: str | None
    organizer_name: str | None
    organizer_phone: str | None
    organizer_email: str | None
    status: str
    quoted_amount: Decimal | None
    confirmed_amount: Decimal | None
    tds_percentage: Decimal | None
    notes: str | None
    google_calendar_event_id: str | None
    created_by: str | None
    created_at: str
    updated_at: str


class Expense(TypedDict):
    id: str
    gig_id: str | None
    description: str
    amount: Decimal
    category: str
    date: str
    paid_by: str | None


class Payment(TypedDict):
    id: str
    gig_id: str
    amount: Decimal
    payment_date: str
    payment_mode: str | None
    reference_number: str | None
    tds_deducted: Decimal
    notes: str | None


class Payout(TypedDict):
    id: str
    gig_id: str
    user_id: str
    amount: Decimal
    status: str  # pending | paid
    paid_date: str | None
    notes: str | None
    created_at: str
    updated_at: str


class Availability(TypedDict):
    id: str
    gig_id: str
    user_id: str
    status: str  # yes | no | maybe | pending
    notes: str | None
    updated_at: str


class CalendarConnection(TypedDict):
    """The single band-wide Google Calendar credential."""
    id: int
    calendar_id: str
    access_token: str
    refresh_token: str
    token_expires_at: str  # ISO 8601 UTC
    sync_token: str | None
    channel_id: str | None
    resource_id: str | None
    created_by: str | None
    updated_at: str


class DecodedDescription(TypedDict, total=False):
    """Fields recovered from an event description."""
    organizer_name: str
    organizer_phone: str
    organizer_email: str
    amount: Decimal
    notes: str
    status: str


# Google Calendar event resource, as returned by the REST API
CalendarEvent = dict[str, Any]
