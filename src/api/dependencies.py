"""FastAPI dependencies for authentication and shared resources."""

import secrets
import sqlite3
from typing import Iterator

from fastapi import Depends, Header, HTTPException, status

from core.config import GIGBOOK_API_KEY
from core.database import get_connection
from core.google_client import GoogleCalendarClient, get_calendar_client
from services.access import Actor, resolve_actor
from services.tokens import TokenManager


async def verify_api_key(x_api_key: str = Header(..., alias="X-API-Key")) -> str:
    """
    Verify API key from X-API-Key header.

    Raises:
        HTTPException: 401 if key is missing or invalid
    """
    if not GIGBOOK_API_KEY:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "API key not configured on server",
                "code": "INTERNAL_ERROR",
                "details": [],
            },
        )

    if not secrets.compare_digest(x_api_key, GIGBOOK_API_KEY):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error": "Invalid or missing API key",
                "code": "UNAUTHORIZED",
                "details": [],
            },
        )

    return x_api_key


def get_db() -> Iterator[sqlite3.Connection]:
    """One connection per request."""
    conn = get_connection()
    try:
        yield conn
    finally:
        conn.close()


def get_actor(
    x_user_id: str | None = Header(None, alias="X-User-Id"),
    conn: sqlite3.Connection = Depends(get_db),
) -> Actor:
    """
    Resolve the calling member from the X-User-Id header.

    Identity is asserted by the upstream auth provider; the role comes from
    the members table. Unknown members get a 403.
    """
    return resolve_actor(conn, x_user_id)


def get_google_client() -> GoogleCalendarClient:
    return get_calendar_client()


def get_token_manager(
    conn: sqlite3.Connection = Depends(get_db),
    client: GoogleCalendarClient = Depends(get_google_client),
) -> TokenManager:
    return TokenManager(conn, client)
