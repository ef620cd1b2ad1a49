"""
SQLite connection, schema and transaction handling.
"""

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Iterator

from core.config import DB_PATH
from core.errors import StorageError

logger = logging.getLogger(__name__)

sqlite3.register_adapter(Decimal, str)
sqlite3.register_converter("DECIMAL", lambda raw: Decimal(raw.decode()))

SCHEMA = """
CREATE TABLE IF NOT EXISTS members (
    user_id TEXT PRIMARY KEY,
    full_name TEXT,
    role TEXT NOT NULL DEFAULT 'musician'
        CHECK(role IN ('app_admin', 'admin', 'musician', 'external_viewer')),
    active INTEGER NOT NULL DEFAULT 1,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS gigs (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    venue TEXT NOT NULL,
    city TEXT NOT NULL,
    address TEXT,
    date TEXT NOT NULL,
    start_time TEXT,
    end_time TEXT,
    organizer_name TEXT,
    organizer_phone TEXT,
    organizer_email TEXT,
    status TEXT NOT NULL DEFAULT 'lead'
        CHECK(status IN ('lead', 'quoted', 'confirmed', 'completed', 'paid', 'cancelled')),
    quoted_amount DECIMAL,
    confirmed_amount DECIMAL,
    tds_percentage DECIMAL CHECK(tds_percentage IS NULL OR (tds_percentage >= 0 AND tds_percentage <= 100)),
    notes TEXT,
    google_calendar_event_id TEXT UNIQUE,
    created_by TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS expenses (
    id TEXT PRIMARY KEY,
    gig_id TEXT,
    description TEXT NOT NULL,
    amount DECIMAL NOT NULL CHECK(amount >= 0),
    category TEXT NOT NULL,
    date TEXT NOT NULL,
    paid_by TEXT,
    created_by TEXT,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (gig_id) REFERENCES gigs(id)
);

CREATE TABLE IF NOT EXISTS payments (
    id TEXT PRIMARY KEY,
    gig_id TEXT NOT NULL,
    amount DECIMAL NOT NULL,
    payment_date TEXT NOT NULL,
    payment_mode TEXT,
    reference_number TEXT,
    tds_deducted DECIMAL NOT NULL DEFAULT 0,
    notes TEXT,
    recorded_by TEXT,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (gig_id) REFERENCES gigs(id)
);

CREATE TABLE IF NOT EXISTS payouts (
    id TEXT PRIMARY KEY,
    gig_id TEXT NOT NULL,
    user_id TEXT NOT NULL,
    amount DECIMAL NOT NULL,
    status TEXT NOT NULL DEFAULT 'pending' CHECK(status IN ('pending', 'paid')),
    paid_date TEXT,
    notes TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    UNIQUE (gig_id, user_id),
    FOREIGN KEY (gig_id) REFERENCES gigs(id)
);

CREATE TABLE IF NOT EXISTS gig_availability (
    id TEXT PRIMARY KEY,
    gig_id TEXT NOT NULL,
    user_id TEXT NOT NULL,
    status TEXT NOT NULL DEFAULT 'pending' CHECK(status IN ('yes', 'no', 'maybe', 'pending')),
    notes TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    UNIQUE (gig_id, user_id),
    FOREIGN KEY (gig_id) REFERENCES gigs(id)
);

CREATE TABLE IF NOT EXISTS calendar_connection (
    id INTEGER PRIMARY KEY CHECK(id = 1),
    calendar_id TEXT NOT NULL DEFAULT 'primary',
    access_token TEXT NOT NULL,
    refresh_token TEXT NOT NULL,
    token_expires_at TEXT NOT NULL,
    sync_token TEXT,
    channel_id TEXT,
    resource_id TEXT,
    created_by TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS api_requests (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    request_id TEXT UNIQUE NOT NULL,
    timestamp TEXT NOT NULL,
    endpoint TEXT NOT NULL,
    method TEXT NOT NULL,
    client_ip TEXT,
    user_id TEXT,
    gig_id TEXT,
    status_code INTEGER NOT NULL,
    error_code TEXT,
    error_message TEXT,
    processing_time_ms INTEGER NOT NULL,
    events_processed INTEGER
);

CREATE TABLE IF NOT EXISTS api_request_details (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    request_id TEXT NOT NULL,
    detail_type TEXT NOT NULL CHECK(detail_type IN ('validation_error', 'sync_error', 'warning')),
    message TEXT NOT NULL,
    FOREIGN KEY (request_id) REFERENCES api_requests(request_id)
);

CREATE INDEX IF NOT EXISTS idx_gigs_date ON gigs(date);
CREATE INDEX IF NOT EXISTS idx_gigs_status ON gigs(status);
CREATE INDEX IF NOT EXISTS idx_expenses_gig ON expenses(gig_id);
CREATE INDEX IF NOT EXISTS idx_payments_gig ON payments(gig_id);
CREATE INDEX IF NOT EXISTS idx_api_requests_timestamp ON api_requests(timestamp);
CREATE INDEX IF NOT EXISTS idx_api_request_details_request ON api_request_details(request_id);
"""


def get_connection(db_path: Path | str = DB_PATH) -> sqlite3.Connection:
    """Get a database connection with Decimal columns and dict-like rows."""
    conn = sqlite3.connect(
        db_path, detect_types=sqlite3.PARSE_DECLTYPES, check_same_thread=False
    )
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def create_schema(conn: sqlite3.Connection) -> None:
    """Create all tables and indexes if they don't exist."""
    conn.executescript(SCHEMA)
    conn.commit()


@contextmanager
def transaction(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """
    Commit on success, roll back on any error.

    sqlite errors surface as StorageError so callers never see driver types.
    """
    try:
        yield conn
        conn.commit()
    except sqlite3.Error as e:
        conn.rollback()
        logger.error(f"Transaction rolled back: {e}")
        raise StorageError(f"Storage failure: {e}") from e
    except Exception:
        conn.rollback()
        raise


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    return utc_now().isoformat(timespec="milliseconds")


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO 8601 timestamp; naive values are taken as UTC."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
