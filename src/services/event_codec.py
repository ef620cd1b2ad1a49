"""
Tagged-line encoding of gig details inside calendar event text.

Description grammar (format version 1), one field per line:

    Organizer: <name>
    Phone: <phone>
    Email: <email>
    Amount: <currency><amount>
    Notes: <text; further lines are indented by two spaces>
    <blank line, only when any field above is present>
    Status: <Capitalized status>

Empty fields are omitted. Location is "<venue>, <city>[, <address>]".
"""

import html
import logging
import re
from decimal import Decimal, InvalidOperation

from core.config import CURRENCY_SYMBOL, GIG_STATUSES, PLACEHOLDER_CITY
from models.gigs import DecodedDescription

logger = logging.getLogger(__name__)

DESCRIPTION_FORMAT_VERSION = 1

# Label -> decoded field, in encoding order
FIELD_LABELS = {
    "Organizer": "organizer_name",
    "Phone": "organizer_phone",
    "Email": "organizer_email",
    "Amount": "amount",
    "Notes": "notes",
    "Status": "status",
}
# Older events wrote quoted-only amounts under this label
LEGACY_LABELS = {"Quoted": "amount"}

LINE_PATTERN = re.compile(r"^(?P<label>[A-Z][A-Za-z]*):[ \t]?(?P<value>.*)$")
MULTILINE_FIELDS = {"notes"}
CONTINUATION_INDENT = "  "

# Optional currency prefix, then digits with optional thousands commas
AMOUNT_PREFIX = re.compile(r"^(?:₹|rs\.?|inr)\s*", re.IGNORECASE)
AMOUNT_PATTERN = re.compile(r"^-?\d+(?:\.\d+)?$")


def _single_line(value: str) -> str:
    return " ".join(value.split())


def format_amount(amount: Decimal) -> str:
    return f"{CURRENCY_SYMBOL}{amount:,.2f}"


def parse_amount(text: str) -> Decimal | None:
    """
    Parse '₹1,00,000.00', 'Rs. 50,000' or 'INR 5000' style text.

    Anything else, including free text around a number, yields None.
    """
    number = AMOUNT_PREFIX.sub("", text.strip()).replace(",", "")
    if not AMOUNT_PATTERN.match(number):
        return None
    try:
        return Decimal(number)
    except InvalidOperation:
        return None


def encode_description(
    status: str,
    organizer_name: str | None = None,
    organizer_phone: str | None = None,
    organizer_email: str | None = None,
    amount: Decimal | None = None,
    notes: str | None = None,
) -> str:
    lines = []
    if organizer_name:
        lines.append(f"Organizer: {_single_line(organizer_name)}")
    if organizer_phone:
        lines.append(f"Phone: {_single_line(organizer_phone)}")
    if organizer_email:
        lines.append(f"Email: {_single_line(organizer_email)}")
    if amount:
        lines.append(f"Amount: {format_amount(amount)}")
    if notes and notes.strip():
        first, *rest = notes.strip().splitlines()
        lines.append(f"Notes: {first}")
        lines.extend(f"{CONTINUATION_INDENT}{line}" for line in rest)
    if lines:
        lines.append("")
    lines.append(f"Status: {status.capitalize()}")
    return "\n".join(lines)


def html_to_text(text: str) -> str:
    """Google's web UI may store descriptions as HTML; reduce to plain lines."""
    if "<" not in text:
        return text
    text = re.sub(r"<br\s*/?>|</p>|</div>", "\n", text, flags=re.IGNORECASE)
    text = re.sub(r"<[^>]+>", "", text)
    return html.unescape(text)


def decode_description(description: str | None) -> DecodedDescription:
    """
    Inverse of encode_description.

    Indented or untagged lines continue the Notes field, so a notes line
    that looks like a label stays in the notes. Any other unrecognised line
    is logged and dropped. Unknown status values are dropped.
    """
    if not description:
        return {}

    values: dict[str, list[str]] = {}
    current = None
    ignored = []

    for line in html_to_text(description).splitlines():
        if current in MULTILINE_FIELDS and line.startswith(CONTINUATION_INDENT):
            values[current].append(line[len(CONTINUATION_INDENT):])
            continue
        match = LINE_PATTERN.match(line)
        label = match.group("label") if match else None
        field = FIELD_LABELS.get(label) or LEGACY_LABELS.get(label)
        if field:
            values[field] = [match.group("value")]
            current = field
        elif current in MULTILINE_FIELDS:
            values[current].append(line)
        elif line.strip():
            ignored.append(line)

    if ignored:
        logger.warning(f"Ignored unrecognised description lines: {ignored}")

    decoded: DecodedDescription = {}
    for field, parts in values.items():
        text = "\n".join(parts).strip()
        if not text:
            continue
        if field == "amount":
            amount = parse_amount(text)
            if amount is not None:
                decoded["amount"] = amount
        elif field == "status":
            status = text.lower()
            if status in GIG_STATUSES:
                decoded["status"] = status
            else:
                logger.warning(f"Ignored unknown status in description: {text!r}")
        else:
            decoded[field] = text
    return decoded


def encode_location(venue: str, city: str, address: str | None = None) -> str:
    parts = [venue, city]
    if address:
        parts.append(address)
    return ", ".join(parts)


def decode_location(location: str | None) -> tuple[str, str, str | None]:
    """
    Split a location into (venue, city, address).

    First comma segment is the venue, second the city, the rest is rejoined
    as the address. Without a comma the whole string is the venue.
    """
    if not location or not location.strip():
        return PLACEHOLDER_CITY, PLACEHOLDER_CITY, None

    parts = [part.strip() for part in location.split(",")]
    if len(parts) >= 2:
        address = ", ".join(parts[2:]) or None
        return parts[0], parts[1], address
    return location.strip(), PLACEHOLDER_CITY, None
