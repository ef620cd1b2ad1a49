"""Gig, expense, payment and availability endpoints."""

import sqlite3

from fastapi import APIRouter, Depends, status

from api.dependencies import get_actor, get_db, verify_api_key
from api.models.responses import (
    AvailabilityResponse,
    AvailabilityUpdate,
    CreatedResponse,
    ExpenseCreate,
    FinancialsResponse,
    GigCreate,
    GigResponse,
    GigUpdate,
    PaymentCreate,
)
from services import gigs
from services.access import Actor

router = APIRouter(prefix="/v1/gigs", dependencies=[Depends(verify_api_key)])


@router.post("", response_model=GigResponse, status_code=status.HTTP_201_CREATED)
def create_gig(
    body: GigCreate,
    conn: sqlite3.Connection = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    return gigs.create_gig(conn, body.model_dump(exclude_unset=True), created_by=actor.user_id)


@router.patch("/{gig_id}", response_model=GigResponse)
def update_gig(
    gig_id: str,
    body: GigUpdate,
    conn: sqlite3.Connection = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    """Partial update; only fields present in the body change."""
    return gigs.update_gig(conn, gig_id, body.model_dump(exclude_unset=True))


@router.get("/{gig_id}/financials", response_model=FinancialsResponse)
def get_gig_financials(gig_id: str, conn: sqlite3.Connection = Depends(get_db)):
    return gigs.get_gig_financials(conn, gig_id)


@router.post(
    "/{gig_id}/expenses", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED
)
def record_expense(
    gig_id: str,
    body: ExpenseCreate,
    conn: sqlite3.Connection = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    expense_id = gigs.record_expense(
        conn, gig_id, body.model_dump(exclude_unset=True), created_by=actor.user_id
    )
    return CreatedResponse(id=expense_id)


@router.post(
    "/{gig_id}/payments", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED
)
def record_payment(
    gig_id: str,
    body: PaymentCreate,
    conn: sqlite3.Connection = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    payment_id = gigs.record_payment(
        conn, gig_id, body.model_dump(exclude_unset=True), recorded_by=actor.user_id
    )
    return CreatedResponse(id=payment_id)


@router.put("/{gig_id}/availability", response_model=AvailabilityResponse)
def set_availability(
    gig_id: str,
    body: AvailabilityUpdate,
    conn: sqlite3.Connection = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    """Members answer for themselves only."""
    return gigs.set_availability(
        conn, gig_id, actor, body.status, notes=body.notes, user_id=body.user_id
    )
