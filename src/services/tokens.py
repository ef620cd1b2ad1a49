"""
Google Calendar connection and access-token lifecycle.

The band shares one calendar connection. Sync operations receive it as a
parameter and ask a TokenProvider for a valid access token before every
provider call.
"""

import base64
import binascii
import json
import logging
import sqlite3
from datetime import timedelta
from typing import Protocol

from core import store
from core.config import GOOGLE_REDIRECT_URI
from core.database import parse_timestamp, transaction, utc_now
from core.errors import AuthError, NotConnectedError, ValidationError
from core.google_client import GoogleCalendarClient
from models.gigs import CalendarConnection
from services.access import Actor, require_admin

logger = logging.getLogger(__name__)


class TokenProvider(Protocol):
    async def get_access_token(self, connection: CalendarConnection) -> str:
        ...


def _expiry_from_now(expires_in: int) -> str:
    return (utc_now() + timedelta(seconds=expires_in)).isoformat(timespec="milliseconds")


class TokenManager:
    """Refreshes the stored access token when it has expired."""

    def __init__(self, conn: sqlite3.Connection, client: GoogleCalendarClient):
        self.conn = conn
        self.client = client

    async def get_access_token(self, connection: CalendarConnection) -> str:
        """
        Return a usable access token for the connection.

        An expiry at or before now triggers a refresh; the new access token and
        expiry are persisted together before returning. The refresh token is
        never replaced here. Refresh failure raises AuthError.
        """
        expires_at = parse_timestamp(connection["token_expires_at"])
        if expires_at > utc_now():
            return connection["access_token"]

        logger.info("Access token expired, refreshing")
        grant = await self.client.refresh_access_token(connection["refresh_token"])
        token_expires_at = _expiry_from_now(grant.expires_in)

        with transaction(self.conn):
            store.update_connection_tokens(self.conn, grant.access_token, token_expires_at)

        connection["access_token"] = grant.access_token
        connection["token_expires_at"] = token_expires_at
        return grant.access_token


# =============================================================================
# CONNECT / DISCONNECT
# =============================================================================


def encode_state(user_id: str) -> str:
    payload = {"user_id": user_id, "timestamp": int(utc_now().timestamp() * 1000)}
    return base64.urlsafe_b64encode(json.dumps(payload).encode()).decode()


def decode_state(state: str) -> dict:
    try:
        payload = json.loads(base64.urlsafe_b64decode(state.encode()))
    except (binascii.Error, ValueError) as e:
        raise ValidationError("Invalid OAuth state") from e
    if not isinstance(payload, dict) or not payload.get("user_id"):
        raise ValidationError("Invalid OAuth state")
    return payload


def build_authorization_url(
    actor: Actor,
    client: GoogleCalendarClient,
    redirect_uri: str = GOOGLE_REDIRECT_URI,
) -> str:
    require_admin(actor, "connect Google Calendar")
    return client.authorization_url(redirect_uri, encode_state(actor.user_id))


async def connect_calendar(
    conn: sqlite3.Connection,
    client: GoogleCalendarClient,
    actor: Actor,
    code: str,
    state: str,
    redirect_uri: str = GOOGLE_REDIRECT_URI,
) -> CalendarConnection:
    """Exchange an authorization code for tokens and store the connection."""
    require_admin(actor, "connect Google Calendar")
    payload = decode_state(state)
    if payload["user_id"] != actor.user_id:
        raise AuthError("OAuth state does not belong to this user")

    grant = await client.exchange_code(code, redirect_uri)
    if not grant.refresh_token:
        raise AuthError(
            "Google did not return a refresh token; revoke app access and connect again"
        )

    with transaction(conn):
        store.save_calendar_connection(
            conn,
            access_token=grant.access_token,
            refresh_token=grant.refresh_token,
            token_expires_at=_expiry_from_now(grant.expires_in),
            created_by=actor.user_id,
        )
    logger.info(f"Google Calendar connected by {actor.user_id}")
    return store.get_calendar_connection(conn)


def disconnect_calendar(conn: sqlite3.Connection, actor: Actor) -> None:
    require_admin(actor, "disconnect Google Calendar")
    with transaction(conn):
        store.delete_calendar_connection(conn)
    logger.info(f"Google Calendar disconnected by {actor.user_id}")


def load_connection(conn: sqlite3.Connection) -> CalendarConnection:
    connection = store.get_calendar_connection(conn)
    if connection is None:
        raise NotConnectedError("Google Calendar not connected")
    return connection


def get_connection_status(conn: sqlite3.Connection) -> dict:
    connection = store.get_calendar_connection(conn)
    if connection is None:
        return {"connected": False}
    return {
        "connected": True,
        "calendar_id": connection["calendar_id"],
        "token_expires_at": connection["token_expires_at"],
        "watching": bool(connection["channel_id"]),
        "has_sync_token": bool(connection["sync_token"]),
        "connected_by": connection["created_by"],
        "updated_at": connection["updated_at"],
    }
