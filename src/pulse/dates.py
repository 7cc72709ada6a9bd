# src/pulse/dates.py
"""
Date Normalization

Three date shapes show up across the system:
- MM/DD/YYYY  (SoW PDF template)
- DD/MM/YYYY  (hand-typed tracking dates)
- YYYY-MM-DD  (canonical; tracker API and all comparisons)

The tracker also hands back full ISO timestamps; only the date part is kept.

Fallback policy: ``normalize_date`` never raises and returns ``""`` for any
input it cannot read. Callers that need to tell "empty" from "malformed" use
``parse_date`` which raises ``DateParseError``.
"""

from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Optional, Union

DateLike = Union[str, date, datetime, None]


class DateOrder(str, Enum):
    """Field order of a slash-separated date."""
    MDY = "mdy"
    DMY = "dmy"


class DateParseError(ValueError):
    """Raised when a value cannot be read as a calendar date."""


def parse_date(value: DateLike, order: DateOrder = DateOrder.MDY) -> date:
    """
    Parse a date in any of the supported shapes.

    Args:
        value: Slash date, canonical date, ISO timestamp, or date object
        order: Field order used for slash-separated input

    Returns:
        The calendar date

    Raises:
        DateParseError: On empty or malformed input
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if value is None:
        raise DateParseError("empty date")

    text = str(value).strip()
    if not text:
        raise DateParseError("empty date")

    if "/" in text:
        parts = text.split("/")
        if len(parts) != 3:
            raise DateParseError(f"expected 3 date fields, got {len(parts)}: {text!r}")
        if order == DateOrder.DMY:
            day, month, year = parts
        else:
            month, day, year = parts
    else:
        # Canonical date, or the date part of an ISO timestamp
        parts = text[:10].split("-")
        if len(parts) != 3 or (len(text) > 10 and text[10] not in "T "):
            raise DateParseError(f"unrecognized date: {text!r}")
        year, month, day = parts

    try:
        return date(int(year), int(month), int(day))
    except ValueError as e:
        raise DateParseError(f"invalid date {text!r}: {e}") from e


def normalize_date(value: DateLike, order: DateOrder = DateOrder.MDY) -> str:
    """Return ``YYYY-MM-DD`` for ``value``, or ``""`` when it cannot be read."""
    try:
        return parse_date(value, order).isoformat()
    except DateParseError:
        return ""


def format_display_date(value: DateLike, order: DateOrder = DateOrder.MDY) -> str:
    """
    Render a date the way the dashboard and chat messages show it.

    Unreadable input is returned as-is so a message never loses the
    original text.
    """
    try:
        parsed = parse_date(value, DateOrder.MDY)
    except DateParseError:
        return "" if value is None else str(value)

    if order == DateOrder.DMY:
        return parsed.strftime("%d/%m/%Y")
    return parsed.strftime("%m/%d/%Y")


def to_utc_datetime(value: DateLike) -> Optional[datetime]:
    """Midnight UTC of the given date, or None when it cannot be read."""
    try:
        parsed = parse_date(value)
    except DateParseError:
        return None
    return datetime.combine(parsed, time.min, tzinfo=timezone.utc)


def utcnow() -> datetime:
    """Default clock."""
    return datetime.now(timezone.utc)


def as_utc(moment: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment
