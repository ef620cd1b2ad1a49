"""Tests for input validation."""

from decimal import Decimal

import pytest

from core.errors import ValidationError
from core.validation import (
    normalize_time,
    validate_expense,
    validate_gig_fields,
    validate_payment,
    validate_payout_status,
)


def test_valid_gig_is_normalized(gig_fields):
    gig_fields.update(start_time="19:00", quoted_amount="120000", tds_percentage=0)

    cleaned = validate_gig_fields(gig_fields)

    assert cleaned["start_time"] == "19:00:00"
    assert cleaned["quoted_amount"] == Decimal("120000")
    assert cleaned["tds_percentage"] == Decimal("0")


def test_gig_validation_collects_every_problem():
    with pytest.raises(ValidationError) as exc_info:
        validate_gig_fields({
            "title": "No venue",
            "date": "2025-02-30",
            "status": "tentative",
            "confirmed_amount": "lots",
            "tds_percentage": 150,
            "end_time": "25:00",
        })

    details = exc_info.value.details
    assert "Missing venue" in details
    assert "Missing city" in details
    assert any("Invalid date" in d for d in details)
    assert any("Invalid status 'tentative'" in d for d in details)
    assert any("confirmed_amount must be numeric" in d for d in details)
    assert any("between 0 and 100" in d for d in details)
    assert any("25:00" in d for d in details)


def test_partial_update_skips_required_fields():
    assert validate_gig_fields({"notes": "Soundcheck at 4"}, partial=True) == {"notes": "Soundcheck at 4"}


def test_negative_amount_rejected():
    with pytest.raises(ValidationError):
        validate_gig_fields({"quoted_amount": "-1"}, partial=True)


def test_normalize_time():
    assert normalize_time("07:00") == "07:00:00"
    assert normalize_time("23:59:30") == "23:59:30"
    assert normalize_time(None) is None
    with pytest.raises(ValidationError):
        normalize_time("7pm")


def test_expense_requires_description_category_and_amount():
    with pytest.raises(ValidationError) as exc_info:
        validate_expense({})

    assert exc_info.value.details == ["Missing description", "Missing category"]


def test_expense_defaults_date_to_today():
    cleaned = validate_expense({"description": "Cab", "category": "Travel", "amount": "450.50"})

    assert cleaned["amount"] == Decimal("450.50")
    assert len(cleaned["date"]) == 10


def test_payment_defaults_tds_deducted_to_zero():
    cleaned = validate_payment({"amount": 5000, "payment_date": "2025-01-31"})

    assert cleaned["tds_deducted"] == Decimal("0")


def test_payout_status_rejects_bad_date():
    with pytest.raises(ValidationError):
        validate_payout_status("paid", "31/01/2025")
