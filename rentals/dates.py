"""
Date helpers shared by the booking logic and the API layer.

Bookings cover whole calendar days. They are stored as UTC instants at
midnight (``2024-06-01T00:00:00.000Z``) and compared as UTC calendar dates.
"""
import re
from datetime import date, datetime, timezone
from typing import Union

DateLike = Union[date, datetime, str]

_DAY_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class InvalidDateError(ValueError):
    """Raised when a value cannot be read as a date."""


def parse_instant(value: DateLike) -> datetime:
    """
    Read ``value`` as a timezone-aware UTC datetime.

    Naive datetimes and strings without an offset are taken to be UTC, the
    same as appending ``Z``. A bare ``YYYY-MM-DD`` is midnight UTC.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise InvalidDateError("Empty date")
        if _DAY_ONLY.match(text):
            text += "T00:00:00"
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            raise InvalidDateError(f"Invalid date: {value!r}") from None
    else:
        raise InvalidDateError(f"Invalid date: {value!r}")

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_day(value: DateLike) -> date:
    """UTC calendar date of ``value``."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    return parse_instant(value).date()


def to_instant_string(day: date) -> str:
    """Stored form of a booking day: midnight UTC with millisecond precision."""
    return f"{day.isoformat()}T00:00:00.000Z"


def timestamp_now() -> str:
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def today_utc() -> date:
    return datetime.now(timezone.utc).date()
