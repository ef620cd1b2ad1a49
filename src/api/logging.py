"""SQLite request logging for payout and calendar endpoints."""

import logging
import sqlite3
import time
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterator

from fastapi import HTTPException, Request

from api.errors import http_status_for
from api.models.responses import ErrorCodes
from core.errors import GigbookError, SyncError

logger = logging.getLogger(__name__)


@dataclass
class RequestLog:
    """Captured request/response data for logging."""

    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    endpoint: str = ""
    method: str = ""
    client_ip: str | None = None
    user_id: str | None = None
    gig_id: str | None = None
    status_code: int = 0
    error_code: str | None = None
    error_message: str | None = None
    processing_time_ms: int = 0
    events_processed: int | None = None
    details: list[tuple[str, str]] = field(default_factory=list)  # (type, message)


def get_client_ip(request: Request) -> str:
    """Extract client IP from request, handling proxies."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def log_request(conn: sqlite3.Connection, log: RequestLog) -> None:
    """Write request log to SQLite database."""
    cursor = conn.cursor()
    cursor.execute(
        """
        INSERT INTO api_requests (
            request_id, timestamp, endpoint, method, client_ip, user_id, gig_id,
            status_code, error_code, error_message, processing_time_ms, events_processed
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
    """,
        (
            log.request_id,
            log.timestamp,
            log.endpoint,
            log.method,
            log.client_ip,
            log.user_id,
            log.gig_id,
            log.status_code,
            log.error_code,
            log.error_message,
            log.processing_time_ms,
            log.events_processed,
        ),
    )

    for detail_type, message in log.details:
        cursor.execute(
            """
            INSERT INTO api_request_details (request_id, detail_type, message)
            VALUES (?, ?, ?)
        """,
            (log.request_id, detail_type, message),
        )

    conn.commit()


@contextmanager
def logged_request(
    conn: sqlite3.Connection,
    request: Request,
    user_id: str | None = None,
    gig_id: str | None = None,
) -> Iterator[RequestLog]:
    """
    Record one api_requests row for the wrapped endpoint body.

    Errors are captured on the log and re-raised unchanged. A failure to
    write the log never fails the request.
    """
    start_time = time.time()
    request_log = RequestLog(
        endpoint=request.url.path,
        method=request.method,
        client_ip=get_client_ip(request),
        user_id=user_id,
        gig_id=gig_id,
    )

    try:
        yield request_log
        request_log.status_code = request_log.status_code or 200

    except GigbookError as e:
        request_log.status_code = http_status_for(e)
        request_log.error_code = e.code
        request_log.error_message = e.message
        detail_type = "sync_error" if isinstance(e, SyncError) else "validation_error"
        for detail in e.details:
            request_log.details.append((detail_type, detail))
        raise

    except HTTPException as e:
        request_log.status_code = e.status_code
        if isinstance(e.detail, dict):
            request_log.error_code = e.detail.get("code")
            request_log.error_message = e.detail.get("error")
        else:
            request_log.error_message = str(e.detail)
        raise

    except Exception as e:
        request_log.status_code = 500
        request_log.error_code = ErrorCodes.INTERNAL_ERROR
        request_log.error_message = str(e)
        raise

    finally:
        request_log.processing_time_ms = int((time.time() - start_time) * 1000)
        try:
            log_request(conn, request_log)
        except sqlite3.Error as e:
            logger.warning(f"Failed to write request log {request_log.request_id}: {e}")
