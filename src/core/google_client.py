"""
Google Calendar / OAuth client over httpx with lazy initialization.
"""

import logging
from dataclasses import dataclass, field
from urllib.parse import quote, urlencode

import httpx

from core.config import (
    GOOGLE_CALENDAR_SCOPES,
    GOOGLE_CLIENT_ID,
    GOOGLE_CLIENT_SECRET,
    HTTP_TIMEOUT_SECONDS,
)
from core.errors import AuthError, SyncError, SyncTokenExpiredError

logger = logging.getLogger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"  # noqa: S105 - OAuth endpoint URL
GOOGLE_CALENDAR_API = "https://www.googleapis.com/calendar/v3"


@dataclass
class TokenGrant:
    """Token endpoint response."""

    access_token: str
    expires_in: int
    refresh_token: str | None = None


@dataclass
class EventListing:
    """All pages of an events.list call."""

    items: list[dict] = field(default_factory=list)
    next_sync_token: str | None = None


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    error = data.get("error")
    if isinstance(error, dict):
        return error.get("message") or str(error)
    return data.get("error_description") or str(error or data)


class GoogleCalendarClient:
    """Thin async wrapper over the Calendar v3 REST API and the token endpoint."""

    def __init__(
        self,
        client_id: str = GOOGLE_CLIENT_ID,
        client_secret: str = GOOGLE_CLIENT_SECRET,
        http: httpx.AsyncClient | None = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.http = http or httpx.AsyncClient(timeout=HTTP_TIMEOUT_SECONDS)

    async def aclose(self):
        await self.http.aclose()

    # -------------------------------------------------------------------------
    # OAuth
    # -------------------------------------------------------------------------

    def authorization_url(self, redirect_uri: str, state: str) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": redirect_uri,
            "response_type": "code",
            "scope": " ".join(GOOGLE_CALENDAR_SCOPES),
            "access_type": "offline",
            "prompt": "consent",
            "state": state,
        }
        return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"

    async def _token_request(self, data: dict, action: str) -> TokenGrant:
        try:
            response = await self.http.post(GOOGLE_TOKEN_URL, data=data)
        except httpx.HTTPError as e:
            logger.error(f"Token {action} request failed: {e}")
            raise AuthError(f"Token {action} failed: {e}") from e

        if response.status_code != 200:
            logger.error(f"Token {action} failed: {response.text}")
            raise AuthError(f"Token {action} failed: {_error_message(response)}")

        tokens = response.json()
        if not tokens.get("access_token"):
            raise AuthError(f"Token {action} failed: no access token in response")
        return TokenGrant(
            access_token=tokens["access_token"],
            expires_in=int(tokens.get("expires_in", 3600)),
            refresh_token=tokens.get("refresh_token"),
        )

    async def exchange_code(self, code: str, redirect_uri: str) -> TokenGrant:
        return await self._token_request(
            {
                "code": code,
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "redirect_uri": redirect_uri,
                "grant_type": "authorization_code",
            },
            "exchange",
        )

    async def refresh_access_token(self, refresh_token: str) -> TokenGrant:
        return await self._token_request(
            {
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "refresh_token": refresh_token,
                "grant_type": "refresh_token",
            },
            "refresh",
        )

    # -------------------------------------------------------------------------
    # Calendar API
    # -------------------------------------------------------------------------

    async def _calendar_request(
        self, method: str, path: str, access_token: str, **kwargs
    ) -> httpx.Response:
        """Send an authorized request; provider errors and timeouts raise SyncError."""
        try:
            response = await self.http.request(
                method,
                f"{GOOGLE_CALENDAR_API}{path}",
                headers={"Authorization": f"Bearer {access_token}"},
                **kwargs,
            )
        except httpx.TimeoutException as e:
            raise SyncError(f"Calendar API timed out: {method} {path}") from e
        except httpx.HTTPError as e:
            raise SyncError(f"Calendar API request failed: {e}") from e

        if response.status_code == 410:
            raise SyncTokenExpiredError(_error_message(response), status_code=410)
        if response.status_code >= 400:
            message = _error_message(response)
            logger.error(f"Calendar API error {response.status_code}: {message}")
            raise SyncError(message, status_code=response.status_code)
        return response

    @staticmethod
    def _events_path(calendar_id: str, event_id: str | None = None) -> str:
        path = f"/calendars/{quote(calendar_id, safe='')}/events"
        if event_id:
            path += f"/{quote(event_id, safe='')}"
        return path

    async def insert_event(self, access_token: str, calendar_id: str, body: dict) -> dict:
        response = await self._calendar_request(
            "POST", self._events_path(calendar_id), access_token, json=body
        )
        return response.json()

    async def update_event(
        self, access_token: str, calendar_id: str, event_id: str, body: dict
    ) -> dict:
        """Full replace (PUT) of an existing event."""
        response = await self._calendar_request(
            "PUT", self._events_path(calendar_id, event_id), access_token, json=body
        )
        return response.json()

    async def list_events(
        self,
        access_token: str,
        calendar_id: str,
        sync_token: str | None = None,
        time_min: str | None = None,
        time_max: str | None = None,
        order_by: str | None = None,
    ) -> EventListing:
        """
        Fetch every page of events.

        With a sync_token only changes since that cursor are returned and the
        time filters are ignored (the API rejects the combination).
        """
        params = {"singleEvents": "true", "maxResults": "250"}
        if sync_token:
            params["syncToken"] = sync_token
        else:
            if time_min:
                params["timeMin"] = time_min
            if time_max:
                params["timeMax"] = time_max
            if order_by:
                params["orderBy"] = order_by

        listing = EventListing()
        page_token = None
        while True:
            page_params = dict(params)
            if page_token:
                page_params["pageToken"] = page_token
            response = await self._calendar_request(
                "GET", self._events_path(calendar_id), access_token, params=page_params
            )
            data = response.json()
            listing.items.extend(data.get("items") or [])
            page_token = data.get("nextPageToken")
            if not page_token:
                listing.next_sync_token = data.get("nextSyncToken")
                return listing

    async def watch_events(
        self, access_token: str, calendar_id: str, channel_id: str, address: str
    ) -> dict:
        """Register a push channel delivering change notifications to address."""
        response = await self._calendar_request(
            "POST",
            f"{self._events_path(calendar_id)}/watch",
            access_token,
            json={"id": channel_id, "type": "web_hook", "address": address},
        )
        return response.json()

    async def stop_channel(self, access_token: str, channel_id: str, resource_id: str) -> None:
        await self._calendar_request(
            "POST",
            "/channels/stop",
            access_token,
            json={"id": channel_id, "resourceId": resource_id},
        )


_calendar_client: GoogleCalendarClient | None = None


def get_calendar_client() -> GoogleCalendarClient:
    """Get or create the shared Google Calendar client (lazy initialization)."""
    global _calendar_client
    if _calendar_client is None:
        _calendar_client = GoogleCalendarClient()
    return _calendar_client
