"""Tests for gig records, ledger entries, availability and role checks."""

from decimal import Decimal

import pytest

from core import store
from core.errors import AuthError, NotFoundError, ValidationError
from services.access import require_admin, resolve_actor
from services.gigs import (
    create_gig,
    get_gig_financials,
    record_expense,
    record_payment,
    set_availability,
    update_gig,
)


def test_create_gig_defaults_to_lead(conn, gig_fields):
    gig_fields.pop("status")

    gig = create_gig(conn, gig_fields, created_by="admin-1")

    assert gig["status"] == "lead"
    assert gig["created_by"] == "admin-1"
    assert gig["confirmed_amount"] == Decimal("100000")


def test_create_gig_ignores_calendar_link(conn, gig_fields):
    gig_fields["google_calendar_event_id"] = "evt-spoofed"

    gig = create_gig(conn, gig_fields)

    assert gig["google_calendar_event_id"] is None


def test_update_gig_touches_updated_at(conn, gig):
    updated = update_gig(conn, gig["id"], {"status": "completed"})

    assert updated["status"] == "completed"
    assert updated["updated_at"] >= gig["updated_at"]
    assert updated["title"] == gig["title"]


def test_update_gig_rejects_unknown_status(conn, gig):
    with pytest.raises(ValidationError):
        update_gig(conn, gig["id"], {"status": "postponed"})


def test_update_missing_gig(conn):
    with pytest.raises(NotFoundError):
        update_gig(conn, "nope", {"notes": "x"})


def test_ledger_entries_feed_gig_financials(conn, gig, members, confirm_members):
    confirm_members(gig["id"], members)
    record_expense(conn, gig["id"], {"description": "Cab", "category": "Travel", "amount": "15000"})
    record_payment(conn, gig["id"], {"amount": "50000", "payment_date": "2025-02-15"})

    financials = get_gig_financials(conn, gig["id"])

    assert financials.net_amount == Decimal("75000.00")
    assert financials.per_member_share == Decimal("15000.00")
    assert financials.balance_due == Decimal("50000.00")


def test_expense_without_gig_is_allowed(conn):
    expense_id = record_expense(conn, None, {"description": "Strings", "category": "Equipment", "amount": 900})

    assert conn.execute("SELECT gig_id FROM expenses WHERE id = ?", (expense_id,)).fetchone()[0] is None


def test_payment_for_missing_gig(conn):
    with pytest.raises(NotFoundError):
        record_payment(conn, "nope", {"amount": 1})


def test_member_sets_own_availability(conn, gig, members, musician):
    set_availability(conn, gig["id"], musician, "maybe", notes="Exams that week")
    row = set_availability(conn, gig["id"], musician, "yes")

    assert row["status"] == "yes"
    assert row["notes"] is None
    assert store.confirmed_member_ids(conn, gig["id"]) == ["member-1"]


def test_member_cannot_answer_for_someone_else(conn, gig, musician):
    with pytest.raises(AuthError):
        set_availability(conn, gig["id"], musician, "yes", user_id="member-2")


def test_invalid_availability_status(conn, gig, musician):
    with pytest.raises(ValidationError):
        set_availability(conn, gig["id"], musician, "sure")


def test_resolve_actor_uses_roster_role(conn, members):
    actor = resolve_actor(conn, "admin-1")

    assert actor.is_admin
    assert not resolve_actor(conn, "member-1").is_admin


def test_resolve_actor_rejects_unknown_and_inactive(conn, members):
    store.upsert_member(conn, "member-4", "Gone", active=False)
    conn.commit()

    with pytest.raises(AuthError):
        resolve_actor(conn, None)
    with pytest.raises(AuthError):
        resolve_actor(conn, "stranger")
    with pytest.raises(AuthError):
        resolve_actor(conn, "member-4")


def test_require_admin(admin, musician):
    require_admin(admin, "do things")
    with pytest.raises(AuthError, match="Only app admins can do things"):
        require_admin(musician, "do things")
