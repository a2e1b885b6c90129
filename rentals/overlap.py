"""
Booking conflict detection.

Two bookings on the same property conflict when their inclusive day ranges
share at least one day. A booking ending on day X and another starting on
day X conflict.
"""
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional

from .dates import DateLike, parse_day
from .errors import InvalidDateRangeError
from .models import Booking


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date

    def __post_init__(self):
        if self.end < self.start:
            raise InvalidDateRangeError()

    @classmethod
    def parse(cls, start: DateLike, end: DateLike) -> "DateRange":
        """Build a range from raw values; raises ``InvalidDateError`` on bad input."""
        return cls(parse_day(start), parse_day(end))

    @classmethod
    def of(cls, booking: Booking) -> "DateRange":
        return cls(booking.start_date, booking.end_date)

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


def ranges_overlap(a: DateRange, b: DateRange) -> bool:
    return a.start <= b.end and a.end >= b.start


def _overlaps_booking(candidate: DateRange, booking: Booking) -> bool:
    return candidate.start <= booking.end_date and candidate.end >= booking.start_date


def find_conflicts(
    candidate: DateRange,
    existing_bookings: Iterable[Booking],
    exclude_booking_id: Optional[str] = None,
) -> List[Booking]:
    """All bookings in ``existing_bookings`` that overlap ``candidate``."""
    return [
        b for b in existing_bookings
        if b.id != exclude_booking_id
        and _overlaps_booking(candidate, b)
    ]


def has_conflict(
    candidate: DateRange,
    existing_bookings: Iterable[Booking],
    exclude_booking_id: Optional[str] = None,
) -> bool:
    """
    Check whether ``candidate`` overlaps any of ``existing_bookings``.

    When editing a booking, pass its id as ``exclude_booking_id`` so it is not
    compared against itself.
    """
    return any(
        b.id != exclude_booking_id
        and _overlaps_booking(candidate, b)
        for b in existing_bookings
    )
