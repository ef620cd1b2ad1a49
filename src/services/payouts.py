"""
Per-member payout generation and payout status changes.
"""

import logging
import sqlite3
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date
from typing import Iterator

from core import store
from core.database import transaction
from core.errors import NotFoundError, ValidationError
from core.validation import validate_payout_status
from models.gigs import Payout
from services.finances import GigFinancials, calculate_for_gig

logger = logging.getLogger(__name__)


@dataclass
class _GigLock:
    lock: threading.Lock = field(default_factory=threading.Lock)
    users: int = 0


# One active generation per gig id within this process; entries live only
# while some thread holds or waits on them
_generation_locks: dict[str, _GigLock] = {}
_locks_guard = threading.Lock()


@dataclass
class PayoutGeneration:
    """Outcome of regenerating a gig's payouts."""

    gig_id: str
    financials: GigFinancials
    target_member_ids: list[str]
    payouts: list[Payout] = field(default_factory=list)
    # Payouts for members outside the target set; kept, never deleted
    orphaned: list[Payout] = field(default_factory=list)


@contextmanager
def _gig_lock(gig_id: str) -> Iterator[None]:
    with _locks_guard:
        entry = _generation_locks.setdefault(gig_id, _GigLock())
        entry.users += 1
    try:
        with entry.lock:
            yield
    finally:
        with _locks_guard:
            entry.users -= 1
            if entry.users == 0:
                del _generation_locks[gig_id]


def resolve_target_members(conn: sqlite3.Connection, gig_id: str) -> tuple[list[str], int]:
    """
    Members owed a share of the gig, plus the count used for the calculator.

    Confirmed ('yes') members when there are any; otherwise the active roster
    receives payouts while the share is computed with the fallback band size.
    """
    confirmed = store.confirmed_member_ids(conn, gig_id)
    if confirmed:
        return confirmed, len(confirmed)
    return store.list_active_member_ids(conn), 0


def find_orphaned_payouts(conn: sqlite3.Connection, gig_id: str) -> list[Payout]:
    """Existing payouts whose member is no longer in the target set."""
    targets, _ = resolve_target_members(conn, gig_id)
    target_set = set(targets)
    return [p for p in store.list_payouts(conn, gig_id) if p["user_id"] not in target_set]


def generate_payouts(conn: sqlite3.Connection, gig_id: str) -> PayoutGeneration:
    """
    Recompute and upsert one payout per target member, atomically.

    Existing rows only get their amount refreshed: status and paid_date are
    never touched, so a paid payout stays paid. Rows for members that left
    the target set are reported as orphaned and left alone.

    Raises:
        NotFoundError: gig does not exist
        StorageError: any write failed; no payout row of this run persists
    """
    with _gig_lock(gig_id):
        gig = store.get_gig(conn, gig_id)
        if gig is None:
            raise NotFoundError(f"Gig not found: {gig_id}")

        targets, member_count = resolve_target_members(conn, gig_id)
        financials = calculate_for_gig(
            gig,
            store.list_expense_amounts(conn, gig_id),
            store.list_payment_amounts(conn, gig_id),
            member_count,
        )

        with transaction(conn):
            for user_id in targets:
                store.upsert_payout_amount(conn, gig_id, user_id, financials.per_member_share)

        payouts = store.list_payouts(conn, gig_id)
        target_set = set(targets)
        result = PayoutGeneration(
            gig_id=gig_id,
            financials=financials,
            target_member_ids=targets,
            payouts=[p for p in payouts if p["user_id"] in target_set],
            orphaned=[p for p in payouts if p["user_id"] not in target_set],
        )

    logger.info(
        f"Generated {len(result.payouts)} payouts for gig {gig_id} "
        f"at {financials.per_member_share} each ({len(result.orphaned)} orphaned)"
    )
    return result


def update_payout_status(
    conn: sqlite3.Connection,
    payout_id: str,
    status: str,
    paid_date: str | None = None,
) -> Payout:
    """
    Move a payout between pending and paid.

    pending -> paid records paid_date (today when not supplied);
    paid -> pending clears it. Re-applying the current status is a no-op
    apart from a new paid_date when one is given.
    """
    validate_payout_status(status, paid_date)

    payout = store.get_payout(conn, payout_id)
    if payout is None:
        raise NotFoundError(f"Payout not found: {payout_id}")

    if status == "paid":
        new_paid_date = paid_date or payout["paid_date"] or date.today().isoformat()
    else:
        if paid_date is not None:
            raise ValidationError("paid_date is only allowed when marking a payout paid")
        new_paid_date = None

    with transaction(conn):
        store.set_payout_status(conn, payout_id, status, new_paid_date)

    logger.info(f"Payout {payout_id}: {payout['status']} -> {status}")
    return store.get_payout(conn, payout_id)
