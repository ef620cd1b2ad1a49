"""
Gig financial calculations.

Pure functions over Decimal amounts: no store access, no I/O. A negative
net amount is a valid result (a loss-making gig), never an error.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from core.config import DEFAULT_TDS_PERCENTAGE, FALLBACK_MEMBER_COUNT

CENT = Decimal("0.01")
ZERO = Decimal("0")


@dataclass(frozen=True)
class GigFinancials:
    """Result of reconciling one gig."""

    gross_amount: Decimal
    total_expenses: Decimal
    total_tds: Decimal
    net_amount: Decimal
    total_payments: Decimal
    balance_due: Decimal
    per_member_share: Decimal
    member_count: int


def to_money(value) -> Decimal:
    """Coerce a stored or user amount to a cent-quantized Decimal; None is zero."""
    if value is None:
        return ZERO.quantize(CENT)
    if not isinstance(value, Decimal):
        # str() keeps floats from dragging binary noise into the Decimal
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def resolve_gross_amount(confirmed_amount, quoted_amount) -> Decimal:
    """Confirmed amount wins; a missing or zero confirmed amount falls back to quoted."""
    if confirmed_amount:
        return to_money(confirmed_amount)
    if quoted_amount:
        return to_money(quoted_amount)
    return to_money(None)


def resolve_tds_percentage(tds_percentage) -> Decimal:
    if tds_percentage is None:
        return DEFAULT_TDS_PERCENTAGE
    return Decimal(str(tds_percentage))


def resolve_member_count(member_count: int | None, fallback: int = FALLBACK_MEMBER_COUNT) -> int:
    """Substitute the fallback band size for a missing, zero or negative count."""
    if member_count is None or member_count <= 0:
        return fallback
    return member_count


def calculate_gig_financials(
    gross_amount,
    tds_percentage,
    expenses: Iterable,
    payments: Iterable,
    member_count: int | None,
    fallback_member_count: int = FALLBACK_MEMBER_COUNT,
) -> GigFinancials:
    """
    Turn a gig's gross amount, TDS rate, expenses and payments into payouts.

    - total_tds = gross * tds% / 100 (rounded to the cent)
    - net_amount = gross - total_expenses - total_tds
    - per_member_share = net_amount / member_count (fallback applied first)
    - balance_due = gross - total_payments
    """
    gross = to_money(gross_amount)
    tds_rate = resolve_tds_percentage(tds_percentage)
    members = resolve_member_count(member_count, fallback_member_count)

    total_expenses = sum((to_money(amount) for amount in expenses), ZERO).quantize(CENT)
    total_payments = sum((to_money(amount) for amount in payments), ZERO).quantize(CENT)
    total_tds = (gross * tds_rate / Decimal(100)).quantize(CENT, rounding=ROUND_HALF_UP)

    net_amount = gross - total_expenses - total_tds
    per_member_share = (net_amount / Decimal(members)).quantize(CENT, rounding=ROUND_HALF_UP)

    return GigFinancials(
        gross_amount=gross,
        total_expenses=total_expenses,
        total_tds=total_tds,
        net_amount=net_amount,
        total_payments=total_payments,
        balance_due=gross - total_payments,
        per_member_share=per_member_share,
        member_count=members,
    )


def calculate_for_gig(
    gig: dict, expenses: Iterable, payments: Iterable, confirmed_members: int
) -> GigFinancials:
    """Convenience wrapper resolving gross amount and TDS from a gig row."""
    return calculate_gig_financials(
        resolve_gross_amount(gig.get("confirmed_amount"), gig.get("quoted_amount")),
        gig.get("tds_percentage"),
        expenses,
        payments,
        confirmed_members,
    )
