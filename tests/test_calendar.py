"""Tests for gig <-> calendar event conversion."""

from decimal import Decimal

from services.calendar import (
    build_event_body,
    event_to_gig_fields,
    gig_event_times,
    has_required_fields,
    parse_event_times,
)


def test_event_body_for_confirmed_gig(gig_fields):
    gig_fields["status"] = "confirmed"

    body = build_event_body(gig_fields)

    assert body["summary"] == "Sharma Wedding Sangeet"
    assert body["location"] == "Taj Lands End, Mumbai, Bandstand, Bandra West"
    assert body["start"] == {"dateTime": "2025-02-14T19:00:00", "timeZone": "Asia/Kolkata"}
    assert body["end"] == {"dateTime": "2025-02-14T23:30:00", "timeZone": "Asia/Kolkata"}
    assert body["colorId"] == "10"
    assert "Amount: ₹100,000.00" in body["description"]
    assert body["description"].endswith("\n\nStatus: Confirmed")


def test_event_body_uses_quoted_amount_without_confirmed(gig_fields):
    gig_fields.update(status="lead", confirmed_amount=None, quoted_amount=Decimal("80000"))

    body = build_event_body(gig_fields)

    assert "Amount: ₹80,000.00" in body["description"]
    assert body["colorId"] == "5"


def test_other_statuses_use_default_color(gig_fields):
    gig_fields["status"] = "paid"

    assert build_event_body(gig_fields)["colorId"] == "8"


def test_missing_times_default_to_full_evening(gig_fields):
    gig_fields.update(start_time=None, end_time=None)

    assert gig_event_times(gig_fields) == ("2025-02-14T09:00:00", "2025-02-14T23:00:00")


def test_end_before_start_rolls_to_next_day(gig_fields):
    gig_fields.update(start_time="21:00:00", end_time="01:00:00")

    assert gig_event_times(gig_fields) == ("2025-02-14T21:00:00", "2025-02-15T01:00:00")


def test_parse_timed_event_keeps_local_clock():
    event = {
        "start": {"dateTime": "2025-02-14T19:00:00+05:30"},
        "end": {"dateTime": "2025-02-14T23:30:00+05:30"},
    }

    assert parse_event_times(event) == ("2025-02-14", "19:00:00", "23:30:00")


def test_parse_all_day_event():
    event = {"start": {"date": "2025-03-01"}, "end": {"date": "2025-03-02"}}

    assert parse_event_times(event) == ("2025-03-01", None, None)


def test_required_fields():
    assert has_required_fields({"summary": "Gig", "start": {"date": "2025-03-01"}})
    assert not has_required_fields({"summary": "", "start": {"date": "2025-03-01"}})
    assert not has_required_fields({"summary": "Gig", "start": {}})


def test_event_round_trips_to_gig_fields(gig_fields):
    event = build_event_body(gig_fields)
    event["start"]["dateTime"] += "+05:30"
    event["end"]["dateTime"] += "+05:30"

    fields = event_to_gig_fields(event)

    assert fields == {
        "title": "Sharma Wedding Sangeet",
        "date": "2025-02-14",
        "start_time": "19:00:00",
        "end_time": "23:30:00",
        "venue": "Taj Lands End",
        "city": "Mumbai",
        "address": "Bandstand, Bandra West",
        "organizer_name": "Rohit Sharma",
        "organizer_phone": "+91 98200 00000",
        "organizer_email": "rohit@example.com",
        "notes": "Two sets, acoustic opener",
        "status": "confirmed",
        "confirmed_amount": Decimal("100000"),
    }


def test_plain_event_leaves_undecoded_fields_out():
    event = {
        "summary": "Jam session",
        "location": "Blue Frog",
        "start": {"date": "2025-03-01"},
    }

    fields = event_to_gig_fields(event)

    assert fields == {
        "title": "Jam session",
        "date": "2025-03-01",
        "start_time": None,
        "end_time": None,
        "venue": "Blue Frog",
        "city": "TBD",
    }
