"""
Input validation for gigs, ledger entries and status changes.
"""

import re
from datetime import date
from decimal import Decimal, InvalidOperation

from core.config import AVAILABILITY_STATUSES, GIG_STATUSES, PAYOUT_STATUSES
from core.errors import ValidationError

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)(:([0-5]\d))?$")
REQUIRED_GIG_FIELDS = ("title", "venue", "city", "date")


def parse_amount(value, field: str, errors: list[str]) -> Decimal | None:
    """Parse a currency value, appending to errors when it isn't numeric."""
    if value is None or value == "":
        return None
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        errors.append(f"{field} must be numeric, got '{value}'")
        return None
    if not amount.is_finite():
        errors.append(f"{field} must be a finite number")
        return None
    return amount


def is_valid_date(value: str) -> bool:
    try:
        date.fromisoformat(value)
    except (TypeError, ValueError):
        return False
    return True


def normalize_time(value: str | None) -> str | None:
    """Normalize HH:MM or HH:MM:SS to HH:MM:SS; None passes through."""
    if not value:
        return None
    match = TIME_PATTERN.match(value.strip())
    if not match:
        raise ValidationError(f"Invalid time '{value}'", [f"Expected HH:MM or HH:MM:SS, got '{value}'"])
    return f"{match.group(1)}:{match.group(2)}:{match.group(4) or '00'}"


def validate_gig_fields(fields: dict, partial: bool = False) -> dict:
    """
    Validate and normalize gig input.

    Checks:
    1. Required fields are present (unless partial update)
    2. Status is a known lifecycle value
    3. Amounts are numeric and non-negative
    4. TDS percentage is within 0-100
    5. Date and times are well-formed

    Returns the cleaned fields; raises ValidationError listing every problem.
    """
    errors = []
    cleaned = dict(fields)

    if not partial:
        for name in REQUIRED_GIG_FIELDS:
            if not fields.get(name):
                errors.append(f"Missing {name}")

    status = fields.get("status")
    if status is not None and status not in GIG_STATUSES:
        errors.append(f"Invalid status '{status}' (valid: {', '.join(GIG_STATUSES)})")

    for name in ("quoted_amount", "confirmed_amount"):
        if name in fields:
            amount = parse_amount(fields[name], name, errors)
            if amount is not None and amount < 0:
                errors.append(f"{name} cannot be negative")
            cleaned[name] = amount

    if "tds_percentage" in fields:
        tds = parse_amount(fields["tds_percentage"], "tds_percentage", errors)
        if tds is not None and not (0 <= tds <= 100):
            errors.append(f"tds_percentage must be between 0 and 100, got {tds}")
        cleaned["tds_percentage"] = tds

    if fields.get("date") and not is_valid_date(fields["date"]):
        errors.append(f"Invalid date '{fields['date']}' (expected YYYY-MM-DD)")

    for name in ("start_time", "end_time"):
        if name in fields:
            try:
                cleaned[name] = normalize_time(fields[name])
            except ValidationError as e:
                errors.extend(e.details)

    if errors:
        raise ValidationError("Gig validation failed", errors)
    return cleaned


def validate_expense(fields: dict) -> dict:
    errors = []
    cleaned = dict(fields)
    if not fields.get("description"):
        errors.append("Missing description")
    if not fields.get("category"):
        errors.append("Missing category")
    amount = parse_amount(fields.get("amount"), "amount", errors)
    if amount is None and not errors:
        errors.append("Missing amount")
    elif amount is not None and amount < 0:
        errors.append("Expense amount cannot be negative")
    cleaned["amount"] = amount
    cleaned["date"] = fields.get("date") or date.today().isoformat()
    if not is_valid_date(cleaned["date"]):
        errors.append(f"Invalid date '{cleaned['date']}'")
    if errors:
        raise ValidationError("Expense validation failed", errors)
    return cleaned


def validate_payment(fields: dict) -> dict:
    errors = []
    cleaned = dict(fields)
    amount = parse_amount(fields.get("amount"), "amount", errors)
    if amount is None and not errors:
        errors.append("Missing amount")
    cleaned["amount"] = amount
    tds = parse_amount(fields.get("tds_deducted"), "tds_deducted", errors)
    cleaned["tds_deducted"] = tds if tds is not None else Decimal("0")
    cleaned["payment_date"] = fields.get("payment_date") or date.today().isoformat()
    if not is_valid_date(cleaned["payment_date"]):
        errors.append(f"Invalid payment_date '{cleaned['payment_date']}'")
    if errors:
        raise ValidationError("Payment validation failed", errors)
    return cleaned


def validate_availability_status(status: str) -> None:
    if status not in AVAILABILITY_STATUSES:
        raise ValidationError(
            f"Invalid availability status '{status}'",
            [f"valid: {', '.join(AVAILABILITY_STATUSES)}"],
        )


def validate_payout_status(status: str, paid_date: str | None) -> None:
    if status not in PAYOUT_STATUSES:
        raise ValidationError(
            f"Invalid payout status '{status}'",
            [f"valid: {', '.join(PAYOUT_STATUSES)}"],
        )
    if paid_date is not None and not is_valid_date(paid_date):
        raise ValidationError(f"Invalid paid_date '{paid_date}'", ["Expected format: YYYY-MM-DD"])
