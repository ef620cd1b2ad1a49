"""
Two-way sync between gigs and the shared Google Calendar.

Outbound pushes one gig as a full event body. Inbound applies a batch of
fetched events to gigs: per-event failures are collected and never stop
the rest of the batch. Batches are applied in a worker thread.
"""

import asyncio
import logging
import sqlite3
import uuid
from dataclasses import dataclass, field
from datetime import timedelta

from core import store
from core.config import (
    GOOGLE_WEBHOOK_URL,
    PULL_DAYS_BACK,
    PULL_DAYS_FORWARD,
    SYNC_LOOP_BUFFER_SECONDS,
    WEBHOOK_DAYS_BACK,
)
from core.database import parse_timestamp, transaction, utc_now
from core.errors import SyncError, SyncTokenExpiredError, ValidationError
from core.google_client import GoogleCalendarClient
from core.validation import validate_gig_fields
from models.gigs import CalendarConnection, CalendarEvent, Gig
from services.access import Actor, require_admin
from services.calendar import build_event_body, event_to_gig_fields, has_required_fields
from services.gigs import get_gig_or_raise
from services.tokens import TokenProvider

logger = logging.getLogger(__name__)

WEBHOOK_PROCESS_STATES = ("exists", "update")


@dataclass
class OutboundSync:
    gig_id: str
    event_id: str
    created: bool


@dataclass
class EventFailure:
    event_id: str | None
    message: str


@dataclass
class SyncResult:
    """Counts for one inbound batch plus any per-event failures."""

    created: int = 0
    updated: int = 0
    cancelled: int = 0
    skipped: int = 0
    failures: list[EventFailure] = field(default_factory=list)
    # The stored sync cursor was rejected and has been cleared
    cursor_reset: bool = False

    @property
    def processed(self) -> int:
        return self.created + self.updated + self.cancelled

    @property
    def partial_failure(self) -> bool:
        return bool(self.failures)


@dataclass
class WebhookNotification:
    """Headers of a Google push notification; the body is always empty."""

    resource_state: str | None
    channel_id: str | None = None
    resource_id: str | None = None
    message_number: str | None = None


# =============================================================================
# OUTBOUND
# =============================================================================


async def sync_gig_to_calendar(
    conn: sqlite3.Connection,
    gig_id: str,
    actor: Actor,
    connection: CalendarConnection,
    tokens: TokenProvider,
    client: GoogleCalendarClient,
) -> OutboundSync:
    """
    Create or fully replace the gig's calendar event.

    A gig without an event id gets a new event and is linked to it once. Any
    provider failure raises SyncError and leaves the link untouched.
    """
    require_admin(actor, "sync gigs to Google Calendar")
    gig = get_gig_or_raise(conn, gig_id)
    access_token = await tokens.get_access_token(connection)
    body = build_event_body(gig)
    calendar_id = connection["calendar_id"]

    event_id = gig["google_calendar_event_id"]
    if event_id:
        await client.update_event(access_token, calendar_id, event_id, body)
        with transaction(conn):
            # Stamp the push so its own change notification falls in the loop buffer
            store.update_gig(conn, gig_id, {})
        logger.info(f"Updated calendar event {event_id} for gig {gig_id}")
        return OutboundSync(gig_id=gig_id, event_id=event_id, created=False)

    event = await client.insert_event(access_token, calendar_id, body)
    if not event.get("id"):
        raise SyncError("Calendar API returned an event without an id")
    with transaction(conn):
        store.update_gig(conn, gig_id, {"google_calendar_event_id": event["id"]})
    logger.info(f"Created calendar event {event['id']} for gig {gig_id}")
    return OutboundSync(gig_id=gig_id, event_id=event["id"], created=True)


# =============================================================================
# INBOUND
# =============================================================================


def is_newer_than_gig(event: CalendarEvent, gig: Gig) -> bool:
    """True when the event changed after the gig by more than the loop buffer."""
    if not event.get("updated"):
        return False
    event_updated = parse_timestamp(event["updated"])
    gig_updated = parse_timestamp(gig["updated_at"])
    return event_updated > gig_updated + timedelta(seconds=SYNC_LOOP_BUFFER_SECONDS)


def _apply_event(conn: sqlite3.Connection, event: CalendarEvent, result: SyncResult) -> None:
    event_id = event.get("id")
    if not event_id:
        raise ValidationError("Event has no id")
    linked = store.find_gig_by_event_id(conn, event_id)

    if event.get("status") == "cancelled":
        if linked is None or linked["status"] == "cancelled":
            result.skipped += 1
            return
        with transaction(conn):
            store.update_gig(conn, linked["id"], {"status": "cancelled"})
        logger.info(f"Gig {linked['id']} cancelled from calendar event {event_id}")
        result.cancelled += 1
        return

    if not has_required_fields(event):
        logger.debug(f"Skipping event {event_id}: missing title or start")
        result.skipped += 1
        return

    fields = event_to_gig_fields(event)

    if linked is not None:
        if not is_newer_than_gig(event, linked):
            logger.debug(f"Skipping event {event_id}: not newer than gig {linked['id']}")
            result.skipped += 1
            return
        cleaned = validate_gig_fields(fields, partial=True)
        with transaction(conn):
            store.update_gig(conn, linked["id"], cleaned)
        logger.info(f"Updated gig {linked['id']} from calendar event {event_id}")
        result.updated += 1
        return

    fields.setdefault("status", "lead")
    cleaned = validate_gig_fields(fields)
    cleaned["google_calendar_event_id"] = event_id
    with transaction(conn):
        gig_id = store.insert_gig(conn, cleaned)
    logger.info(f"Created gig {gig_id} from calendar event {event_id}")
    result.created += 1


def apply_calendar_events(conn: sqlite3.Connection, events: list[CalendarEvent]) -> SyncResult:
    """Apply fetched events to gigs; a failing event is recorded and skipped."""
    result = SyncResult()
    for event in events:
        try:
            _apply_event(conn, event, result)
        except Exception as e:
            logger.error(f"Failed to apply calendar event {event.get('id')}: {e}")
            result.failures.append(EventFailure(event_id=event.get("id"), message=str(e)))
    return result


async def pull_calendar_to_gigs(
    conn: sqlite3.Connection,
    actor: Actor,
    connection: CalendarConnection,
    tokens: TokenProvider,
    client: GoogleCalendarClient,
) -> SyncResult:
    """Full scan of a fixed window around today. The sync cursor is not used."""
    require_admin(actor, "pull events from Google Calendar")
    access_token = await tokens.get_access_token(connection)
    now = utc_now()
    listing = await client.list_events(
        access_token,
        connection["calendar_id"],
        time_min=(now - timedelta(days=PULL_DAYS_BACK)).isoformat(),
        time_max=(now + timedelta(days=PULL_DAYS_FORWARD)).isoformat(),
        order_by="startTime",
    )
    result = await asyncio.to_thread(apply_calendar_events, conn, listing.items)
    logger.info(
        f"Pulled {len(listing.items)} events: {result.created} created, "
        f"{result.updated} updated, {result.cancelled} cancelled, "
        f"{result.skipped} skipped, {len(result.failures)} failed"
    )
    return result


async def incremental_sync(
    conn: sqlite3.Connection,
    connection: CalendarConnection,
    tokens: TokenProvider,
    client: GoogleCalendarClient,
) -> SyncResult:
    """
    Fetch changes since the stored cursor and apply them.

    Without a cursor, a bounded window of recent events is scanned. The
    provider's next cursor is persisted after the batch. An expired cursor
    is cleared and reported through cursor_reset instead of raising.
    """
    access_token = await tokens.get_access_token(connection)
    calendar_id = connection["calendar_id"]
    sync_token = connection.get("sync_token")

    try:
        if sync_token:
            listing = await client.list_events(access_token, calendar_id, sync_token=sync_token)
        else:
            time_min = (utc_now() - timedelta(days=WEBHOOK_DAYS_BACK)).isoformat()
            listing = await client.list_events(access_token, calendar_id, time_min=time_min)
    except SyncTokenExpiredError:
        logger.warning("Sync token expired, clearing cursor for a full rescan")
        with transaction(conn):
            store.set_sync_token(conn, None)
        connection["sync_token"] = None
        return SyncResult(cursor_reset=True)

    result = await asyncio.to_thread(apply_calendar_events, conn, listing.items)

    if listing.next_sync_token:
        with transaction(conn):
            store.set_sync_token(conn, listing.next_sync_token)
        connection["sync_token"] = listing.next_sync_token
    return result


async def handle_calendar_webhook(
    conn: sqlite3.Connection,
    notification: WebhookNotification,
    connection: CalendarConnection | None,
    tokens: TokenProvider,
    client: GoogleCalendarClient,
) -> SyncResult | None:
    """
    Process a push notification.

    Never raises: the provider must always receive a 200, so failures are
    logged and None is returned. The handshake ('sync') is acknowledged
    without fetching anything.
    """
    state = (notification.resource_state or "").lower()
    if state == "sync":
        logger.info(f"Webhook channel {notification.channel_id} handshake acknowledged")
        return None
    if state not in WEBHOOK_PROCESS_STATES:
        logger.info(f"Ignoring webhook with resource state '{state}'")
        return None
    if connection is None:
        logger.warning("Webhook received but Google Calendar is not connected")
        return None
    if connection["channel_id"] and notification.channel_id != connection["channel_id"]:
        logger.warning(f"Ignoring webhook from unknown channel {notification.channel_id}")
        return None

    try:
        result = await incremental_sync(conn, connection, tokens, client)
    except Exception as e:
        logger.error(f"Webhook processing failed: {e}")
        return None

    logger.info(
        f"Webhook processed: {result.processed} applied, {result.skipped} skipped, "
        f"{len(result.failures)} failed"
    )
    return result


async def watch_calendar(
    conn: sqlite3.Connection,
    actor: Actor,
    connection: CalendarConnection,
    tokens: TokenProvider,
    client: GoogleCalendarClient,
    address: str = GOOGLE_WEBHOOK_URL,
) -> dict:
    """Register a fresh push channel and store it on the connection."""
    require_admin(actor, "register calendar notifications")
    if not address:
        raise ValidationError("GOOGLE_WEBHOOK_URL is not configured")

    access_token = await tokens.get_access_token(connection)
    if connection["channel_id"] and connection["resource_id"]:
        try:
            await client.stop_channel(access_token, connection["channel_id"], connection["resource_id"])
        except SyncError as e:
            # Old channels expire on their own
            logger.warning(f"Could not stop channel {connection['channel_id']}: {e}")

    channel_id = str(uuid.uuid4())
    channel = await client.watch_events(access_token, connection["calendar_id"], channel_id, address)
    with transaction(conn):
        store.set_watch_channel(conn, channel_id, channel.get("resourceId"))
    connection["channel_id"] = channel_id
    connection["resource_id"] = channel.get("resourceId")
    logger.info(f"Watching calendar {connection['calendar_id']} on channel {channel_id}")
    return {
        "channel_id": channel_id,
        "resource_id": channel.get("resourceId"),
        "expiration": channel.get("expiration"),
    }
