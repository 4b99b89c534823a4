"""Date-time normalisation for stored product and rental timestamps.

Every date-time the API accepts is rewritten to a fixed ``YYYY-MM-DD HH:MM:SS``
string before it reaches storage. Values carrying a UTC offset (``Z`` or
``+09:00``) are converted into the server's local zone first, naive values are
taken to already be local. Rentals are addressed by this text, so two instants
that render differently will never match each other.
"""

from __future__ import annotations

from datetime import date, datetime
from zoneinfo import ZoneInfo

from .errors import ValidationError

STORAGE_FORMAT = "%Y-%m-%d %H:%M:%S"


def parse_datetime(value: str | datetime | date) -> datetime:
    """Parse an ISO-8601 style value, raising ``ValidationError`` when it isn't one."""

    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    text = (value or "").strip()
    if not text:
        raise ValidationError("Date is required")
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError as exc:
        raise ValidationError(f"Invalid date: {value}") from exc


def to_local(dt: datetime, zone: ZoneInfo | None = None) -> datetime:
    if dt.tzinfo is None:
        return dt
    # ``astimezone(None)`` converts into the host's local zone.
    return dt.astimezone(zone).replace(tzinfo=None)


def normalize_datetime(value: str | datetime | date, zone: ZoneInfo | None = None) -> str:
    return to_local(parse_datetime(value), zone).strftime(STORAGE_FORMAT)


def normalize_optional(value: str | datetime | date | None, zone: ZoneInfo | None = None) -> str | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return normalize_datetime(value, zone)
