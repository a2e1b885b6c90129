"""
Role-aware readers.

Every endpoint that returns bookings or properties builds its payload here,
so the customer privacy filter and the visibility rules are applied in one
place.
"""
from datetime import date
from typing import Dict, List, Optional, Tuple, Union

from . import schemas
from .models import Booking, Document, Property, User, tag_to_str
from .occupancy import PropertyStatus, property_status
from .privacy import for_customer, for_customer_many
from .visibility import visible_properties

BookingRow = Tuple[Booking, Property, Optional[str]]


def customer_booking_out(booking: Booking, property_name: Optional[str]) -> schemas.CustomerBookingOut:
    return schemas.CustomerBookingOut(**for_customer(booking, property_name).to_dict())


def staff_booking_out(booking: Booking, apartment: Property, user_email: Optional[str]) -> schemas.BookingOut:
    return schemas.BookingOut(
        id=booking.id,
        property_id=booking.property_id,
        property_name=apartment.name,
        user_id=booking.user_id,
        user_email=user_email,
        start_date=booking.start_date,
        end_date=booking.end_date,
        client_name=booking.client_name,
        extra_info=booking.extra_info,
        created_at=booking.created_at,
    )


def booking_out(
    viewer: User, booking: Booking, apartment: Property, user_email: Optional[str]
) -> Union[schemas.BookingOut, schemas.CustomerBookingOut]:
    if viewer.is_customer:
        return customer_booking_out(booking, apartment.name)
    return staff_booking_out(booking, apartment, user_email)


def booking_rows(document: Document, viewer: User) -> List[BookingRow]:
    """``(booking, property, user_email)`` for every booking the viewer may see."""
    emails: Dict[str, str] = {u.id: u.email for u in document.users}
    return [
        (b, apartment, emails.get(b.user_id))
        for apartment in visible_properties(document, viewer)
        for b in apartment.bookings
    ]


def property_out(
    viewer: User, apartment: Property, as_of: date, status: Optional[PropertyStatus] = None
) -> schemas.PropertyOut:
    status = status or property_status(apartment.bookings, as_of)
    next_booking = None
    if status.next_booking is not None:
        next_booking = customer_booking_out(status.next_booking, apartment.name)
    return schemas.PropertyOut(
        id=apartment.id,
        name=apartment.name,
        address=apartment.address,
        extra_info=apartment.extra_info,
        roi_info=apartment.roi_info,
        photos=apartment.photos,
        groups=[] if viewer.is_customer else [tag_to_str(t) for t in apartment.groups],
        status=status.status,
        next_booking=next_booking,
        booking_count=len(apartment.bookings),
    )


def property_detail_out(
    document: Document, viewer: User, apartment: Property, as_of: date
) -> Union[schemas.PropertyDetailOut, schemas.CustomerPropertyDetailOut]:
    base = property_out(viewer, apartment, as_of).model_dump()
    if viewer.is_customer:
        bookings = [
            schemas.CustomerBookingOut(**cb.to_dict())
            for cb in for_customer_many(apartment.bookings, apartment.name)
        ]
        return schemas.CustomerPropertyDetailOut(**base, bookings=bookings)
    emails = {u.id: u.email for u in document.users}
    return schemas.PropertyDetailOut(
        **base,
        bookings=[staff_booking_out(b, apartment, emails.get(b.user_id)) for b in apartment.bookings],
    )


def user_out(document: Document, user: User) -> schemas.UserOut:
    return schemas.UserOut(
        id=user.id,
        email=user.email,
        name=user.name,
        role=user.role,
        group_ids=document.group_ids_for(user.id),
    )
