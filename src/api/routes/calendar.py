"""Google Calendar connection and sync endpoints."""

import sqlite3

from fastapi import APIRouter, Depends, Request

from api.dependencies import (
    get_actor,
    get_db,
    get_google_client,
    get_token_manager,
    verify_api_key,
)
from api.logging import logged_request
from api.models.responses import (
    AuthorizationUrlResponse,
    CalendarCallback,
    ConnectionStatusResponse,
    ErrorCodes,
    EventFailureResponse,
    OutboundSyncResponse,
    SyncResultResponse,
    WatchResponse,
)
from core.google_client import GoogleCalendarClient
from services import tokens as calendar_tokens
from services.access import Actor, require_admin
from services.calendar_sync import (
    SyncResult,
    pull_calendar_to_gigs,
    sync_gig_to_calendar,
    watch_calendar,
)
from services.tokens import TokenManager

router = APIRouter(prefix="/v1", dependencies=[Depends(verify_api_key)])


def sync_result_response(result: SyncResult) -> SyncResultResponse:
    return SyncResultResponse(
        created=result.created,
        updated=result.updated,
        cancelled=result.cancelled,
        skipped=result.skipped,
        cursor_reset=result.cursor_reset,
        failures=[
            EventFailureResponse(event_id=f.event_id, message=f.message)
            for f in result.failures
        ],
        code=ErrorCodes.PARTIAL_BATCH_FAILURE if result.partial_failure else None,
    )


@router.get("/calendar/status", response_model=ConnectionStatusResponse)
def connection_status(
    conn: sqlite3.Connection = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    return calendar_tokens.get_connection_status(conn)


@router.post("/calendar/connect", response_model=AuthorizationUrlResponse)
def start_connect(
    actor: Actor = Depends(get_actor),
    client: GoogleCalendarClient = Depends(get_google_client),
):
    """Google consent URL; the frontend redirects the admin there."""
    return AuthorizationUrlResponse(
        authorization_url=calendar_tokens.build_authorization_url(actor, client)
    )


@router.post("/calendar/callback", response_model=ConnectionStatusResponse)
async def finish_connect(
    body: CalendarCallback,
    request: Request,
    conn: sqlite3.Connection = Depends(get_db),
    actor: Actor = Depends(get_actor),
    client: GoogleCalendarClient = Depends(get_google_client),
):
    with logged_request(conn, request, user_id=actor.user_id):
        await calendar_tokens.connect_calendar(conn, client, actor, body.code, body.state)
        return calendar_tokens.get_connection_status(conn)


@router.delete("/calendar/connection", response_model=ConnectionStatusResponse)
def disconnect(
    request: Request,
    conn: sqlite3.Connection = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    with logged_request(conn, request, user_id=actor.user_id):
        calendar_tokens.disconnect_calendar(conn, actor)
        return calendar_tokens.get_connection_status(conn)


@router.post("/calendar/watch", response_model=WatchResponse)
async def register_watch(
    request: Request,
    conn: sqlite3.Connection = Depends(get_db),
    actor: Actor = Depends(get_actor),
    client: GoogleCalendarClient = Depends(get_google_client),
    tokens: TokenManager = Depends(get_token_manager),
):
    with logged_request(conn, request, user_id=actor.user_id):
        require_admin(actor, "register calendar notifications")
        connection = calendar_tokens.load_connection(conn)
        return await watch_calendar(conn, actor, connection, tokens, client)


@router.post("/gigs/{gig_id}/calendar-sync", response_model=OutboundSyncResponse)
async def push_gig(
    gig_id: str,
    request: Request,
    conn: sqlite3.Connection = Depends(get_db),
    actor: Actor = Depends(get_actor),
    client: GoogleCalendarClient = Depends(get_google_client),
    tokens: TokenManager = Depends(get_token_manager),
):
    """Create or replace the gig's calendar event."""
    with logged_request(conn, request, user_id=actor.user_id, gig_id=gig_id) as request_log:
        require_admin(actor, "sync gigs to Google Calendar")
        connection = calendar_tokens.load_connection(conn)
        result = await sync_gig_to_calendar(conn, gig_id, actor, connection, tokens, client)
        request_log.events_processed = 1
        return result


@router.post("/calendar/pull", response_model=SyncResultResponse)
async def pull_events(
    request: Request,
    conn: sqlite3.Connection = Depends(get_db),
    actor: Actor = Depends(get_actor),
    client: GoogleCalendarClient = Depends(get_google_client),
    tokens: TokenManager = Depends(get_token_manager),
):
    """
    Import events from 30 days back to 90 days ahead.

    Per-event failures do not fail the request: they are listed in the body
    with code PARTIAL_BATCH_FAILURE.
    """
    with logged_request(conn, request, user_id=actor.user_id) as request_log:
        require_admin(actor, "pull events from Google Calendar")
        connection = calendar_tokens.load_connection(conn)
        result = await pull_calendar_to_gigs(conn, actor, connection, tokens, client)
        request_log.events_processed = result.processed
        for failure in result.failures:
            request_log.details.append(("sync_error", f"{failure.event_id}: {failure.message}"))
        return sync_result_response(result)
