"""
Customer-facing booking view.

Customers may see when a property is taken, never who took it or why. Every
reader that serves booking data to a customer goes through ``for_customer``.
"""
from dataclasses import asdict, dataclass
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from .models import Booking

CUSTOMER_BOOKING_FIELDS = ("id", "property_id", "property_name", "start_date", "end_date")


@dataclass(frozen=True)
class CustomerBooking:
    id: str
    property_id: str
    property_name: Optional[str]
    start_date: date
    end_date: date

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def for_customer(booking: Booking, property_name: Optional[str] = None) -> CustomerBooking:
    return CustomerBooking(
        id=booking.id,
        property_id=booking.property_id,
        property_name=property_name,
        start_date=booking.start_date,
        end_date=booking.end_date,
    )


def for_customer_many(
    bookings: Iterable[Booking], property_name: Optional[str] = None
) -> List[CustomerBooking]:
    return [for_customer(b, property_name) for b in bookings]
