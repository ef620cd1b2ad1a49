"""
Gig records, ledger entries and member availability.
"""

import logging
import sqlite3

from core import store
from core.database import transaction
from core.errors import AuthError, NotFoundError
from core.validation import (
    validate_availability_status,
    validate_expense,
    validate_gig_fields,
    validate_payment,
)
from models.gigs import Availability, Gig
from services.access import Actor
from services.finances import GigFinancials, calculate_for_gig

logger = logging.getLogger(__name__)


def get_gig_or_raise(conn: sqlite3.Connection, gig_id: str) -> Gig:
    gig = store.get_gig(conn, gig_id)
    if gig is None:
        raise NotFoundError(f"Gig not found: {gig_id}")
    return gig


def create_gig(conn: sqlite3.Connection, fields: dict, created_by: str | None = None) -> Gig:
    cleaned = validate_gig_fields(fields)
    cleaned.setdefault("status", "lead")
    cleaned["created_by"] = created_by
    # Links are only ever set by the calendar sync
    cleaned.pop("google_calendar_event_id", None)
    with transaction(conn):
        gig_id = store.insert_gig(conn, cleaned)
    logger.info(f"Created gig {gig_id}: {cleaned['title']}")
    return store.get_gig(conn, gig_id)


def update_gig(conn: sqlite3.Connection, gig_id: str, fields: dict) -> Gig:
    get_gig_or_raise(conn, gig_id)
    cleaned = validate_gig_fields(fields, partial=True)
    cleaned.pop("google_calendar_event_id", None)
    cleaned.pop("created_by", None)
    with transaction(conn):
        store.update_gig(conn, gig_id, cleaned)
    return store.get_gig(conn, gig_id)


def record_expense(conn: sqlite3.Connection, gig_id: str | None, fields: dict, created_by: str | None = None) -> str:
    if gig_id is not None:
        get_gig_or_raise(conn, gig_id)
    cleaned = validate_expense(fields)
    cleaned["gig_id"] = gig_id
    cleaned["created_by"] = created_by
    with transaction(conn):
        return store.insert_expense(conn, cleaned)


def record_payment(conn: sqlite3.Connection, gig_id: str, fields: dict, recorded_by: str | None = None) -> str:
    get_gig_or_raise(conn, gig_id)
    cleaned = validate_payment(fields)
    cleaned["gig_id"] = gig_id
    cleaned["recorded_by"] = recorded_by
    with transaction(conn):
        return store.insert_payment(conn, cleaned)


def set_availability(
    conn: sqlite3.Connection,
    gig_id: str,
    actor: Actor,
    status: str,
    notes: str | None = None,
    user_id: str | None = None,
) -> Availability:
    """Upsert the actor's own availability row for a gig."""
    if user_id is not None and user_id != actor.user_id:
        raise AuthError("Members can only respond for themselves")
    validate_availability_status(status)
    get_gig_or_raise(conn, gig_id)
    with transaction(conn):
        store.upsert_availability(conn, gig_id, actor.user_id, status, notes)
    return store.get_availability(conn, gig_id, actor.user_id)


def get_gig_financials(conn: sqlite3.Connection, gig_id: str) -> GigFinancials:
    gig = get_gig_or_raise(conn, gig_id)
    return calculate_for_gig(
        gig,
        store.list_expense_amounts(conn, gig_id),
        store.list_payment_amounts(conn, gig_id),
        len(store.confirmed_member_ids(conn, gig_id)),
    )
