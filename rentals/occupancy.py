"""
Occupancy status for the dashboard: per property and across a set of
properties (the group banner).
"""
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional, Sequence

from .models import Booking

OCCUPIED = "occupied"
AVAILABLE = "available"


@dataclass(frozen=True)
class PropertyStatus:
    status: str
    next_booking: Optional[Booking]

    @property
    def occupied(self) -> bool:
        return self.status == OCCUPIED


@dataclass(frozen=True)
class GroupStatus:
    state: str      # all, some, none, empty
    text: str
    color: str


@dataclass(frozen=True)
class OccupancySummary:
    total_properties: int
    occupied_properties: int
    available_properties: int
    total_bookings: int


def is_occupied(bookings: Iterable[Booking], as_of: date) -> bool:
    return any(b.start_date <= as_of <= b.end_date for b in bookings)


def next_booking(bookings: Iterable[Booking], as_of: date) -> Optional[Booking]:
    """Earliest booking starting strictly after ``as_of``; ties keep list order."""
    upcoming = sorted(
        (b for b in bookings if b.start_date > as_of),
        key=lambda b: b.start_date,
    )
    return upcoming[0] if upcoming else None


def property_status(bookings: Sequence[Booking], as_of: date) -> PropertyStatus:
    return PropertyStatus(
        status=OCCUPIED if is_occupied(bookings, as_of) else AVAILABLE,
        next_booking=next_booking(bookings, as_of),
    )


def group_status(statuses: Sequence[PropertyStatus]) -> GroupStatus:
    if not statuses:
        return GroupStatus("empty", "No properties found", "gray")
    if all(s.occupied for s in statuses):
        return GroupStatus("all", "All properties booked", "red")
    if any(s.occupied for s in statuses):
        return GroupStatus("some", "Some properties booked", "yellow")
    return GroupStatus("none", "No properties booked", "green")


def summarize(statuses: List[PropertyStatus], total_bookings: int) -> OccupancySummary:
    occupied = sum(1 for s in statuses if s.occupied)
    return OccupancySummary(
        total_properties=len(statuses),
        occupied_properties=occupied,
        available_properties=len(statuses) - occupied,
        total_bookings=total_bookings,
    )
