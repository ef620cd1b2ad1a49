"""Payout generation and status endpoints."""

import sqlite3

from fastapi import APIRouter, Depends, Request

from api.dependencies import get_actor, get_db, verify_api_key
from api.logging import logged_request
from api.models.responses import (
    PayoutGenerationResponse,
    PayoutListResponse,
    PayoutResponse,
    PayoutStatusUpdate,
)
from core import store
from services.access import Actor, require_admin
from services.gigs import get_gig_or_raise
from services.payouts import find_orphaned_payouts, generate_payouts, update_payout_status

router = APIRouter(prefix="/v1", dependencies=[Depends(verify_api_key)])


@router.post("/gigs/{gig_id}/payouts/generate", response_model=PayoutGenerationResponse)
def generate_gig_payouts(
    gig_id: str,
    request: Request,
    conn: sqlite3.Connection = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    """
    Recompute every member's share for the gig.

    Paid payouts keep their status; payouts of members who dropped out are
    returned as orphaned and left in place.
    """
    with logged_request(conn, request, user_id=actor.user_id, gig_id=gig_id) as request_log:
        require_admin(actor, "generate payouts")
        result = generate_payouts(conn, gig_id)
        request_log.events_processed = len(result.payouts)
        return result


@router.get("/gigs/{gig_id}/payouts", response_model=PayoutListResponse)
def list_gig_payouts(gig_id: str, conn: sqlite3.Connection = Depends(get_db)):
    get_gig_or_raise(conn, gig_id)
    orphaned = find_orphaned_payouts(conn, gig_id)
    orphaned_ids = {p["id"] for p in orphaned}
    payouts = [p for p in store.list_payouts(conn, gig_id) if p["id"] not in orphaned_ids]
    return PayoutListResponse(
        payouts=[PayoutResponse.model_validate(p) for p in payouts],
        orphaned=[PayoutResponse.model_validate(p) for p in orphaned],
    )


@router.patch("/payouts/{payout_id}", response_model=PayoutResponse)
def set_payout_status(
    payout_id: str,
    body: PayoutStatusUpdate,
    request: Request,
    conn: sqlite3.Connection = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    with logged_request(conn, request, user_id=actor.user_id):
        require_admin(actor, "update payouts")
        return update_payout_status(conn, payout_id, body.status, body.paid_date)
