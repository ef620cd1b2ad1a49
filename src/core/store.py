"""
Query and mutation functions over the SQLite store.

Writers never commit; wrap them in core.database.transaction().
"""

import sqlite3
import uuid
from collections import defaultdict
from decimal import Decimal

from core.database import utc_now_iso
from models.gigs import Availability, CalendarConnection, Gig, Member, Payout

GIG_COLUMNS = (
    "title", "venue", "city", "address", "date", "start_time", "end_time",
    "organizer_name", "organizer_phone", "organizer_email", "status",
    "quoted_amount", "confirmed_amount", "tds_percentage", "notes",
    "google_calendar_event_id", "created_by",
)


def _to_dict(row: sqlite3.Row | None) -> dict | None:
    return dict(row) if row is not None else None


def new_id() -> str:
    return str(uuid.uuid4())


# =============================================================================
# MEMBERS
# =============================================================================


def get_member(conn: sqlite3.Connection, user_id: str) -> Member | None:
    row = conn.execute("SELECT * FROM members WHERE user_id = ?", (user_id,)).fetchone()
    member = _to_dict(row)
    if member is not None:
        member["active"] = bool(member["active"])
    return member


def list_active_member_ids(conn: sqlite3.Connection) -> list[str]:
    rows = conn.execute(
        "SELECT user_id FROM members WHERE active = 1 ORDER BY user_id"
    ).fetchall()
    return [row["user_id"] for row in rows]


def upsert_member(
    conn: sqlite3.Connection,
    user_id: str,
    full_name: str | None,
    role: str = "musician",
    active: bool = True,
):
    conn.execute(
        """
        INSERT INTO members (user_id, full_name, role, active) VALUES (?, ?, ?, ?)
        ON CONFLICT(user_id) DO UPDATE SET
            full_name = excluded.full_name, role = excluded.role, active = excluded.active
        """,
        (user_id, full_name, role, int(active)),
    )


# =============================================================================
# GIGS
# =============================================================================


def get_gig(conn: sqlite3.Connection, gig_id: str) -> Gig | None:
    row = conn.execute("SELECT * FROM gigs WHERE id = ?", (gig_id,)).fetchone()
    return _to_dict(row)


def find_gig_by_event_id(conn: sqlite3.Connection, event_id: str) -> Gig | None:
    row = conn.execute(
        "SELECT * FROM gigs WHERE google_calendar_event_id = ?", (event_id,)
    ).fetchone()
    return _to_dict(row)


def insert_gig(conn: sqlite3.Connection, fields: dict) -> str:
    """Insert a gig from whitelisted fields and return its id."""
    gig_id = fields.get("id") or new_id()
    now = utc_now_iso()
    values = {k: v for k, v in fields.items() if k in GIG_COLUMNS}
    columns = ["id", *values.keys(), "created_at", "updated_at"]
    placeholders = ", ".join("?" for _ in columns)
    conn.execute(
        f"INSERT INTO gigs ({', '.join(columns)}) VALUES ({placeholders})",
        (gig_id, *values.values(), now, now),
    )
    return gig_id


def update_gig(conn: sqlite3.Connection, gig_id: str, fields: dict) -> None:
    """Update whitelisted gig fields and touch updated_at."""
    values = {k: v for k, v in fields.items() if k in GIG_COLUMNS}
    values["updated_at"] = utc_now_iso()
    assignments = ", ".join(f"{column} = ?" for column in values)
    conn.execute(
        f"UPDATE gigs SET {assignments} WHERE id = ?",
        (*values.values(), gig_id),
    )


def list_gigs_by_status(conn: sqlite3.Connection, statuses: tuple[str, ...]) -> list[Gig]:
    """Gigs in the given statuses, newest date first."""
    placeholders = ", ".join("?" for _ in statuses)
    rows = conn.execute(
        f"SELECT * FROM gigs WHERE status IN ({placeholders}) ORDER BY date DESC, title",
        statuses,
    ).fetchall()
    return [dict(row) for row in rows]


# =============================================================================
# EXPENSES & PAYMENTS
# =============================================================================


def insert_expense(conn: sqlite3.Connection, fields: dict) -> str:
    expense_id = new_id()
    conn.execute(
        """
        INSERT INTO expenses (id, gig_id, description, amount, category, date, paid_by, created_by)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            expense_id,
            fields.get("gig_id"),
            fields["description"],
            fields["amount"],
            fields["category"],
            fields["date"],
            fields.get("paid_by"),
            fields.get("created_by"),
        ),
    )
    return expense_id


def insert_payment(conn: sqlite3.Connection, fields: dict) -> str:
    payment_id = new_id()
    conn.execute(
        """
        INSERT INTO payments (
            id, gig_id, amount, payment_date, payment_mode,
            reference_number, tds_deducted, notes, recorded_by
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            payment_id,
            fields["gig_id"],
            fields["amount"],
            fields["payment_date"],
            fields.get("payment_mode"),
            fields.get("reference_number"),
            fields.get("tds_deducted") or Decimal("0"),
            fields.get("notes"),
            fields.get("recorded_by"),
        ),
    )
    return payment_id


def list_expense_amounts(conn: sqlite3.Connection, gig_id: str) -> list[Decimal]:
    rows = conn.execute("SELECT amount FROM expenses WHERE gig_id = ?", (gig_id,)).fetchall()
    return [row["amount"] for row in rows]


def list_payment_amounts(conn: sqlite3.Connection, gig_id: str) -> list[Decimal]:
    rows = conn.execute("SELECT amount FROM payments WHERE gig_id = ?", (gig_id,)).fetchall()
    return [row["amount"] for row in rows]


def _amounts_by_gig(conn: sqlite3.Connection, table: str) -> dict[str, list[Decimal]]:
    grouped: dict[str, list[Decimal]] = defaultdict(list)
    for row in conn.execute(f"SELECT gig_id, amount FROM {table} WHERE gig_id IS NOT NULL"):
        grouped[row["gig_id"]].append(row["amount"])
    return grouped


def expense_amounts_by_gig(conn: sqlite3.Connection) -> dict[str, list[Decimal]]:
    return _amounts_by_gig(conn, "expenses")


def payment_amounts_by_gig(conn: sqlite3.Connection) -> dict[str, list[Decimal]]:
    return _amounts_by_gig(conn, "payments")


def list_all_expenses(conn: sqlite3.Connection) -> list[dict]:
    rows = conn.execute("SELECT category, amount FROM expenses").fetchall()
    return [dict(row) for row in rows]


def list_all_payment_amounts(conn: sqlite3.Connection) -> list[Decimal]:
    return [row["amount"] for row in conn.execute("SELECT amount FROM payments")]


def list_recent_payments(conn: sqlite3.Connection, limit: int) -> list[dict]:
    rows = conn.execute(
        """
        SELECT p.id, p.gig_id, g.title AS gig_title, p.amount, p.payment_mode,
               p.payment_date, p.tds_deducted
        FROM payments p LEFT JOIN gigs g ON g.id = p.gig_id
        ORDER BY p.payment_date DESC LIMIT ?
        """,
        (limit,),
    ).fetchall()
    return [dict(row) for row in rows]


def list_recent_expenses(conn: sqlite3.Connection, limit: int) -> list[dict]:
    rows = conn.execute(
        """
        SELECT e.id, e.gig_id, g.title AS gig_title, e.category, e.description,
               e.amount, e.date
        FROM expenses e LEFT JOIN gigs g ON g.id = e.gig_id
        ORDER BY e.date DESC LIMIT ?
        """,
        (limit,),
    ).fetchall()
    return [dict(row) for row in rows]


# =============================================================================
# AVAILABILITY
# =============================================================================


def confirmed_member_ids(conn: sqlite3.Connection, gig_id: str) -> list[str]:
    """Members who answered 'yes' for the gig."""
    rows = conn.execute(
        "SELECT user_id FROM gig_availability WHERE gig_id = ? AND status = 'yes' ORDER BY user_id",
        (gig_id,),
    ).fetchall()
    return [row["user_id"] for row in rows]


def confirmed_counts_by_gig(conn: sqlite3.Connection) -> dict[str, int]:
    rows = conn.execute(
        "SELECT gig_id, COUNT(*) AS n FROM gig_availability WHERE status = 'yes' GROUP BY gig_id"
    ).fetchall()
    return {row["gig_id"]: row["n"] for row in rows}


def upsert_availability(
    conn: sqlite3.Connection, gig_id: str, user_id: str, status: str, notes: str | None
) -> None:
    now = utc_now_iso()
    conn.execute(
        """
        INSERT INTO gig_availability (id, gig_id, user_id, status, notes, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT(gig_id, user_id) DO UPDATE SET
            status = excluded.status, notes = excluded.notes, updated_at = excluded.updated_at
        """,
        (new_id(), gig_id, user_id, status, notes, now, now),
    )


def get_availability(conn: sqlite3.Connection, gig_id: str, user_id: str) -> Availability | None:
    row = conn.execute(
        "SELECT * FROM gig_availability WHERE gig_id = ? AND user_id = ?", (gig_id, user_id)
    ).fetchone()
    return _to_dict(row)


# =============================================================================
# PAYOUTS
# =============================================================================


def list_payouts(conn: sqlite3.Connection, gig_id: str) -> list[Payout]:
    rows = conn.execute(
        "SELECT * FROM payouts WHERE gig_id = ? ORDER BY user_id", (gig_id,)
    ).fetchall()
    return [dict(row) for row in rows]


def get_payout(conn: sqlite3.Connection, payout_id: str) -> Payout | None:
    row = conn.execute("SELECT * FROM payouts WHERE id = ?", (payout_id,)).fetchone()
    return _to_dict(row)


def upsert_payout_amount(
    conn: sqlite3.Connection, gig_id: str, user_id: str, amount: Decimal
) -> None:
    """Insert a pending payout, or update only the amount of an existing one."""
    now = utc_now_iso()
    conn.execute(
        """
        INSERT INTO payouts (id, gig_id, user_id, amount, status, created_at, updated_at)
        VALUES (?, ?, ?, ?, 'pending', ?, ?)
        ON CONFLICT(gig_id, user_id) DO UPDATE SET
            amount = excluded.amount, updated_at = excluded.updated_at
        """,
        (new_id(), gig_id, user_id, amount, now, now),
    )


def set_payout_status(
    conn: sqlite3.Connection, payout_id: str, status: str, paid_date: str | None
) -> None:
    conn.execute(
        "UPDATE payouts SET status = ?, paid_date = ?, updated_at = ? WHERE id = ?",
        (status, paid_date, utc_now_iso(), payout_id),
    )


# =============================================================================
# CALENDAR CONNECTION
# =============================================================================


def get_calendar_connection(conn: sqlite3.Connection) -> CalendarConnection | None:
    row = conn.execute("SELECT * FROM calendar_connection WHERE id = 1").fetchone()
    return _to_dict(row)


def save_calendar_connection(
    conn: sqlite3.Connection,
    access_token: str,
    refresh_token: str,
    token_expires_at: str,
    created_by: str | None,
    calendar_id: str = "primary",
) -> None:
    """Create or replace the single connection; a reconnect resets cursor and channel."""
    now = utc_now_iso()
    conn.execute(
        """
        INSERT INTO calendar_connection (
            id, calendar_id, access_token, refresh_token, token_expires_at,
            created_by, created_at, updated_at
        ) VALUES (1, ?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT(id) DO UPDATE SET
            calendar_id = excluded.calendar_id,
            access_token = excluded.access_token,
            refresh_token = excluded.refresh_token,
            token_expires_at = excluded.token_expires_at,
            created_by = excluded.created_by,
            sync_token = NULL,
            channel_id = NULL,
            resource_id = NULL,
            updated_at = excluded.updated_at
        """,
        (calendar_id, access_token, refresh_token, token_expires_at, created_by, now, now),
    )


def update_connection_tokens(
    conn: sqlite3.Connection, access_token: str, token_expires_at: str
) -> None:
    conn.execute(
        """
        UPDATE calendar_connection
        SET access_token = ?, token_expires_at = ?, updated_at = ?
        WHERE id = 1
        """,
        (access_token, token_expires_at, utc_now_iso()),
    )


def set_sync_token(conn: sqlite3.Connection, sync_token: str | None) -> None:
    conn.execute(
        "UPDATE calendar_connection SET sync_token = ?, updated_at = ? WHERE id = 1",
        (sync_token, utc_now_iso()),
    )


def set_watch_channel(
    conn: sqlite3.Connection, channel_id: str | None, resource_id: str | None
) -> None:
    conn.execute(
        "UPDATE calendar_connection SET channel_id = ?, resource_id = ?, updated_at = ? WHERE id = 1",
        (channel_id, resource_id, utc_now_iso()),
    )


def delete_calendar_connection(conn: sqlite3.Connection) -> None:
    conn.execute("DELETE FROM calendar_connection WHERE id = 1")
