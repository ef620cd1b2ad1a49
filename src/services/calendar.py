"""
Conversion between gig rows and Google Calendar event resources.
"""

from datetime import date, timedelta

from core.config import (
    CALENDAR_TIME_ZONE,
    DEFAULT_COLOR_ID,
    DEFAULT_END_TIME,
    DEFAULT_START_TIME,
    STATUS_COLOR_IDS,
)
from models.gigs import CalendarEvent, Gig
from services.event_codec import (
    decode_description,
    decode_location,
    encode_description,
    encode_location,
)
from services.finances import resolve_gross_amount


def gig_event_times(gig: Gig) -> tuple[str, str]:
    """
    Local start/end datetimes for a gig.

    Missing times default to 09:00-23:00. An end at or before the start is
    taken to run past midnight.
    """
    start_time = gig.get("start_time") or DEFAULT_START_TIME
    end_time = gig.get("end_time") or DEFAULT_END_TIME
    end_date = date.fromisoformat(gig["date"])
    if end_time <= start_time:
        end_date += timedelta(days=1)
    return f"{gig['date']}T{start_time}", f"{end_date.isoformat()}T{end_time}"


def build_event_body(gig: Gig) -> CalendarEvent:
    """Full event resource for an insert or a replacing update."""
    start, end = gig_event_times(gig)
    amount = resolve_gross_amount(gig.get("confirmed_amount"), gig.get("quoted_amount"))
    return {
        "summary": gig["title"],
        "location": encode_location(gig["venue"], gig["city"], gig.get("address")),
        "description": encode_description(
            status=gig["status"],
            organizer_name=gig.get("organizer_name"),
            organizer_phone=gig.get("organizer_phone"),
            organizer_email=gig.get("organizer_email"),
            amount=amount or None,
            notes=gig.get("notes"),
        ),
        "start": {"dateTime": start, "timeZone": CALENDAR_TIME_ZONE},
        "end": {"dateTime": end, "timeZone": CALENDAR_TIME_ZONE},
        "colorId": STATUS_COLOR_IDS.get(gig["status"], DEFAULT_COLOR_ID),
    }


def parse_event_times(event: CalendarEvent) -> tuple[str | None, str | None, str | None]:
    """
    Extract (date, start_time, end_time) from an event.

    Timed events keep the local clock time as written by the provider;
    all-day events have a date and no times.
    """
    start = event.get("start") or {}
    end = event.get("end") or {}

    if start.get("dateTime"):
        start_date = start["dateTime"][:10]
        start_time = start["dateTime"][11:19] or None
    else:
        start_date = start.get("date")
        start_time = None

    end_time = None
    if end.get("dateTime"):
        end_time = end["dateTime"][11:19] or None
    return start_date, start_time, end_time


def has_required_fields(event: CalendarEvent) -> bool:
    start_date, _, _ = parse_event_times(event)
    return bool(event.get("summary")) and bool(start_date)


def event_to_gig_fields(event: CalendarEvent) -> dict:
    """
    Decode an event into gig fields.

    Fields absent from the event description are left out so an update
    never blanks values the calendar does not carry.
    """
    start_date, start_time, end_time = parse_event_times(event)
    venue, city, address = decode_location(event.get("location"))
    decoded = decode_description(event.get("description"))

    fields = {
        "title": event["summary"],
        "date": start_date,
        "start_time": start_time,
        "end_time": end_time,
        "venue": venue,
        "city": city,
    }
    if address:
        fields["address"] = address
    for key in ("organizer_name", "organizer_phone", "organizer_email", "notes", "status"):
        if key in decoded:
            fields[key] = decoded[key]
    if "amount" in decoded:
        fields["confirmed_amount"] = decoded["amount"]
    return fields
