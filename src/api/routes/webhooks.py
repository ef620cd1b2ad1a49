"""Google Calendar push notification receiver."""

import logging
import sqlite3

from fastapi import APIRouter, Depends, Header

from api.dependencies import get_db, get_google_client, get_token_manager
from api.models.responses import WebhookAck
from core import store
from core.google_client import GoogleCalendarClient
from services.calendar_sync import WebhookNotification, handle_calendar_webhook
from services.tokens import TokenManager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks")


@router.post("/google-calendar", response_model=WebhookAck)
async def google_calendar_webhook(
    x_goog_resource_state: str | None = Header(None),
    x_goog_channel_id: str | None = Header(None),
    x_goog_resource_id: str | None = Header(None),
    x_goog_message_number: str | None = Header(None),
    conn: sqlite3.Connection = Depends(get_db),
    client: GoogleCalendarClient = Depends(get_google_client),
    tokens: TokenManager = Depends(get_token_manager),
):
    """
    Always answers 200 so Google does not retry; the body carries nothing
    and changes are re-fetched from the calendar.
    """
    notification = WebhookNotification(
        resource_state=x_goog_resource_state,
        channel_id=x_goog_channel_id,
        resource_id=x_goog_resource_id,
        message_number=x_goog_message_number,
    )
    try:
        connection = store.get_calendar_connection(conn)
    except sqlite3.Error as e:
        logger.error(f"Webhook could not load calendar connection: {e}")
        return WebhookAck()

    await handle_calendar_webhook(conn, notification, connection, tokens, client)
    return WebhookAck()
