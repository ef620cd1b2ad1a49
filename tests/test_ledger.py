"""Tests for band-wide financial rollups."""

from decimal import Decimal

from core import store
from services.ledger import (
    get_expenses_by_category,
    get_financial_summary,
    get_gig_ledger,
    get_recent_transactions,
)


def add_gig(conn, title, date, status, confirmed=None, quoted=None, tds=None):
    gig_id = store.insert_gig(conn, {
        "title": title, "venue": "Venue", "city": "Pune", "date": date,
        "status": status, "confirmed_amount": confirmed, "quoted_amount": quoted,
        "tds_percentage": tds,
    })
    conn.commit()
    return gig_id


def add_expense(conn, gig_id, amount, category, date="2025-01-10", description="Expense"):
    store.insert_expense(conn, {
        "gig_id": gig_id, "description": description, "amount": Decimal(amount),
        "category": category, "date": date,
    })
    conn.commit()


def add_payment(conn, gig_id, amount, payment_date="2025-01-15"):
    store.insert_payment(conn, {
        "gig_id": gig_id, "amount": Decimal(amount), "payment_date": payment_date,
        "payment_mode": "upi",
    })
    conn.commit()


def test_summary_counts_income_statuses_only(conn):
    confirmed = add_gig(conn, "Club Night", "2025-01-05", "confirmed", confirmed=Decimal("100000"))
    add_gig(conn, "Corporate", "2025-01-20", "paid", quoted=Decimal("50000"), tds=Decimal("0"))
    add_gig(conn, "Maybe Wedding", "2025-03-01", "lead", quoted=Decimal("900000"))
    add_expense(conn, confirmed, "15000", "Travel")
    add_payment(conn, confirmed, "40000")

    summary = get_financial_summary(conn)

    assert summary.total_income == Decimal("150000.00")
    assert summary.total_expenses == Decimal("15000.00")
    assert summary.total_tds == Decimal("10000.00")
    assert summary.net_earnings == Decimal("125000.00")
    assert summary.pending_payments == Decimal("110000.00")
    assert summary.member_count == 7
    assert summary.per_member_share == Decimal("17857.14")


def test_summary_of_empty_store_is_zero(conn):
    summary = get_financial_summary(conn)

    assert summary.total_income == Decimal("0.00")
    assert summary.net_earnings == Decimal("0.00")
    assert summary.per_member_share == Decimal("0.00")


def test_expenses_grouped_and_sorted_by_total(conn):
    gig_id = add_gig(conn, "Fest", "2025-02-01", "completed", confirmed=Decimal("80000"))
    add_expense(conn, gig_id, "2000", "Food")
    add_expense(conn, gig_id, "6000", "Travel")
    add_expense(conn, gig_id, "1500", "Food")
    add_expense(conn, None, "9000", "Equipment")

    categories = get_expenses_by_category(conn)

    assert [(c.category, c.amount, c.count) for c in categories] == [
        ("Equipment", Decimal("9000.00"), 1),
        ("Travel", Decimal("6000.00"), 1),
        ("Food", Decimal("3500.00"), 2),
    ]


def test_ledger_rows_sorted_newest_first_with_member_counts(conn, members, confirm_members):
    older = add_gig(conn, "Older", "2025-01-01", "paid", confirmed=Decimal("70000"))
    newer = add_gig(conn, "Newer", "2025-04-01", "confirmed", confirmed=Decimal("100000"))
    add_gig(conn, "Dropped", "2025-05-01", "cancelled", confirmed=Decimal("100000"))
    add_expense(conn, newer, "15000", "Sound")
    add_payment(conn, newer, "50000")
    confirm_members(newer, ["admin-1", "member-1", "member-2", "member-3", "member-4"])

    ledger = get_gig_ledger(conn)

    assert [row.gig_id for row in ledger] == [newer, older]
    first = ledger[0].financials
    assert first.net_amount == Decimal("75000.00")
    assert first.per_member_share == Decimal("15000.00")
    assert first.balance_due == Decimal("50000.00")
    assert first.member_count == 5
    # No confirmations on the older gig: fallback band size
    assert ledger[1].financials.member_count == 7


def test_recent_transactions_merge_income_and_expenses(conn):
    gig_id = add_gig(conn, "Fest", "2025-02-01", "completed", confirmed=Decimal("80000"))
    add_payment(conn, gig_id, "30000", payment_date="2025-02-10")
    add_expense(conn, gig_id, "2000", "Food", date="2025-02-12", description="Dinner")
    add_expense(conn, gig_id, "800", "Travel", date="2025-02-01", description="Cab")

    transactions = get_recent_transactions(conn, limit=2)

    assert [(t["type"], t["date"]) for t in transactions] == [
        ("expense", "2025-02-12"),
        ("income", "2025-02-10"),
    ]
    assert transactions[0]["gig_title"] == "Fest"
    assert transactions[1]["amount"] == Decimal("30000.00")
