"""
Read-only financial rollups across all gigs.

Every view is derived from the store at read time; store errors propagate.
"""

import sqlite3
from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal

from core import store
from core.config import INCOME_STATUSES
from services.finances import (
    ZERO,
    GigFinancials,
    calculate_gig_financials,
    resolve_gross_amount,
    resolve_member_count,
    to_money,
)


@dataclass(frozen=True)
class FinancialSummary:
    total_income: Decimal
    total_expenses: Decimal
    total_tds: Decimal
    net_earnings: Decimal
    pending_payments: Decimal
    member_count: int
    per_member_share: Decimal


@dataclass(frozen=True)
class ExpenseCategory:
    category: str
    amount: Decimal
    count: int


@dataclass(frozen=True)
class LedgerRow:
    gig_id: str
    gig_title: str
    gig_date: str
    gig_status: str
    financials: GigFinancials


def get_financial_summary(conn: sqlite3.Connection) -> FinancialSummary:
    """
    Band-wide totals.

    Income and TDS cover gigs in confirmed/completed/paid; expenses and
    payments cover every recorded row.
    """
    gigs = store.list_gigs_by_status(conn, INCOME_STATUSES)

    total_income = ZERO
    total_tds = ZERO
    for gig in gigs:
        financials = calculate_gig_financials(
            resolve_gross_amount(gig["confirmed_amount"], gig["quoted_amount"]),
            gig["tds_percentage"],
            expenses=[],
            payments=[],
            member_count=None,
        )
        total_income += financials.gross_amount
        total_tds += financials.total_tds

    total_expenses = sum(
        (to_money(e["amount"]) for e in store.list_all_expenses(conn)), ZERO
    )
    total_payments = sum(
        (to_money(amount) for amount in store.list_all_payment_amounts(conn)), ZERO
    )

    net_earnings = total_income - total_expenses - total_tds
    member_count = resolve_member_count(None)
    return FinancialSummary(
        total_income=to_money(total_income),
        total_expenses=to_money(total_expenses),
        total_tds=to_money(total_tds),
        net_earnings=to_money(net_earnings),
        pending_payments=to_money(total_income - total_payments),
        member_count=member_count,
        per_member_share=to_money(net_earnings / Decimal(member_count)),
    )


def get_expenses_by_category(conn: sqlite3.Connection) -> list[ExpenseCategory]:
    """Expense totals per category, largest first."""
    amounts: dict[str, Decimal] = defaultdict(lambda: ZERO)
    counts: dict[str, int] = defaultdict(int)
    for expense in store.list_all_expenses(conn):
        amounts[expense["category"]] += to_money(expense["amount"])
        counts[expense["category"]] += 1

    categories = [
        ExpenseCategory(category=name, amount=to_money(total), count=counts[name])
        for name, total in amounts.items()
    ]
    return sorted(categories, key=lambda c: (-c.amount, c.category))


def get_gig_ledger(conn: sqlite3.Connection) -> list[LedgerRow]:
    """One reconciled row per income-status gig, newest date first."""
    gigs = store.list_gigs_by_status(conn, INCOME_STATUSES)
    expenses = store.expense_amounts_by_gig(conn)
    payments = store.payment_amounts_by_gig(conn)
    confirmed = store.confirmed_counts_by_gig(conn)

    ledger = []
    for gig in gigs:
        financials = calculate_gig_financials(
            resolve_gross_amount(gig["confirmed_amount"], gig["quoted_amount"]),
            gig["tds_percentage"],
            expenses.get(gig["id"], []),
            payments.get(gig["id"], []),
            confirmed.get(gig["id"], 0),
        )
        ledger.append(
            LedgerRow(
                gig_id=gig["id"],
                gig_title=gig["title"],
                gig_date=gig["date"],
                gig_status=gig["status"],
                financials=financials,
            )
        )

    ledger.sort(key=lambda row: row.gig_date, reverse=True)
    return ledger


def get_recent_transactions(conn: sqlite3.Connection, limit: int = 10) -> list[dict]:
    """Payments (income) and expenses merged into one list, newest first."""
    combined = []
    for payment in store.list_recent_payments(conn, limit):
        combined.append({
            "type": "income",
            "id": payment["id"],
            "gig_id": payment["gig_id"],
            "gig_title": payment["gig_title"] or "Unknown Gig",
            "amount": to_money(payment["amount"]),
            "date": payment["payment_date"],
            "description": payment["payment_mode"],
        })
    for expense in store.list_recent_expenses(conn, limit):
        combined.append({
            "type": "expense",
            "id": expense["id"],
            "gig_id": expense["gig_id"],
            "gig_title": expense["gig_title"],
            "amount": to_money(expense["amount"]),
            "date": expense["date"],
            "description": expense["description"],
        })

    combined.sort(key=lambda t: t["date"], reverse=True)
    return combined[:limit]
