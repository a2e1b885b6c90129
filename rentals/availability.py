"""
Per-day availability maps for a property's calendar.
"""
from datetime import date, timedelta
from typing import Dict, Iterable, Optional

from . import config
from .dates import today_utc
from .models import Booking

BOOKED = "booked"
AVAILABLE = "available"


def compute_availability(
    bookings: Iterable[Booking],
    window_start: Optional[date] = None,
    window_days: int = config.AVAILABILITY_WINDOW_DAYS,
) -> Dict[str, str]:
    """
    Map each day in ``[window_start, window_start + window_days)`` to
    ``"booked"`` or ``"available"``.

    Keys are ``YYYY-MM-DD`` strings in date order. ``window_start`` defaults to
    today (UTC). The input is not modified.
    """
    if window_days < 0:
        raise ValueError("window_days must not be negative")
    start = window_start or today_utc()
    spans = [(b.start_date, b.end_date) for b in bookings]

    availability: Dict[str, str] = {}
    for offset in range(window_days):
        day = start + timedelta(days=offset)
        booked = any(s <= day <= e for s, e in spans)
        availability[day.isoformat()] = BOOKED if booked else AVAILABLE
    return availability
