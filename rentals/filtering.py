"""
Search and filter helpers behind the list endpoints.
"""
from typing import List, Optional, Sequence, Tuple

from .models import Booking, Property
from .occupancy import PropertyStatus


def _matches(term: str, *values: Optional[str]) -> bool:
    return any(v and term in v.lower() for v in values)


def search_bookings(
    rows: Sequence[Tuple[Booking, Property, Optional[str]]],
    search: Optional[str],
    is_customer: bool,
) -> List[Tuple[Booking, Property, Optional[str]]]:
    """
    Filter ``(booking, property, user_email)`` rows by a search term.

    Customers can only search by property name; staff also match the
    booking user's email and the booking notes.
    """
    if not search:
        return list(rows)
    term = search.lower()
    if is_customer:
        return [r for r in rows if _matches(term, r[1].name)]
    return [
        r for r in rows
        if _matches(term, r[1].name, r[2], r[0].extra_info, r[0].client_name)
    ]


def search_properties(properties: Sequence[Property], search: Optional[str]) -> List[Property]:
    if not search:
        return list(properties)
    term = search.lower()
    return [p for p in properties if _matches(term, p.name, p.address, p.extra_info)]


def filter_by_status(
    rows: Sequence[Tuple[Property, PropertyStatus]], status: Optional[str]
) -> List[Tuple[Property, PropertyStatus]]:
    if not status or status == "all":
        return list(rows)
    return [r for r in rows if r[1].status == status]
