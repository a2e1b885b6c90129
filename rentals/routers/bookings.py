from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from .. import commands, schemas, views
from ..dates import InvalidDateError
from ..deps import get_current_user, get_store, require_staff
from ..filtering import search_bookings
from ..models import User
from ..overlap import DateRange, find_conflicts
from ..store import DocumentStore
from ..visibility import can_view

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.get("/check", response_model=schemas.AvailabilityCheckResponse)
def check_property_availability(
    property_id: str,
    start_date: str,
    end_date: str,
    exclude_booking_id: Optional[str] = None,
    store: DocumentStore = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    """
    Check if a property is free for a date range.

    This does not create a booking. Both ends of the range are inclusive, so
    a range starting on another booking's last day is not available. Pass
    ``exclude_booking_id`` when checking new dates for an existing booking.

    Customers get the answer but not the ids of conflicting bookings.
    """
    try:
        candidate = DateRange.parse(start_date, end_date)
    except InvalidDateError as e:
        raise HTTPException(status_code=422, detail=str(e))

    document = store.load()
    apartment = document.find_property(property_id)
    if apartment is None or not can_view(document, current_user, apartment):
        raise HTTPException(status_code=404, detail="Property not found")

    conflicts = find_conflicts(candidate, apartment.bookings, exclude_booking_id)
    return schemas.AvailabilityCheckResponse(
        property_id=property_id,
        start_date=candidate.start,
        end_date=candidate.end,
        available=not conflicts,
        conflicting_booking_ids=[] if current_user.is_customer else [b.id for b in conflicts],
    )


# staff and customers get different shapes, so no single response_model
@router.get("/", response_model=None)
def list_bookings(
    search: Optional[str] = None,
    property_id: Optional[str] = Query(None),
    store: DocumentStore = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    """
    List bookings, ordered by start date.

    - Admin and normal users see **all** bookings with guest details.
    - Customers see bookings of the properties assigned to them, reduced to
      property and dates.
    """
    document = store.load()
    rows = views.booking_rows(document, current_user)
    if property_id and property_id != "all":
        rows = [r for r in rows if r[0].property_id == property_id]
    rows = search_bookings(rows, search, current_user.is_customer)
    rows.sort(key=lambda r: r[0].start_date)
    return [views.booking_out(current_user, b, a, email) for b, a, email in rows]


@router.post("/", response_model=schemas.BookingOut)
def create_booking(
    booking_in: schemas.BookingCreate,
    store: DocumentStore = Depends(get_store),
    current_user: User = Depends(require_staff),
):
    """
    Create a booking. *(Admin or normal user)*

    Raises
    ------
    HTTPException
        - 400 if the property is already booked on any day of the range.
        - 404 if the property does not exist.
        - 422 if the dates are malformed or the end is before the start.
    """
    with store.transaction() as document:
        booking = commands.create_booking(
            document,
            current_user,
            property_id=booking_in.property_id,
            start_date=booking_in.start_date,
            end_date=booking_in.end_date,
            client_name=booking_in.client_name,
            extra_info=booking_in.extra_info,
        )
        apartment = document.find_property(booking.property_id)
        return views.staff_booking_out(booking, apartment, current_user.email)


@router.patch("/{booking_id}", response_model=schemas.BookingOut)
def update_booking(
    booking_id: str,
    booking_update: schemas.BookingUpdate,
    store: DocumentStore = Depends(get_store),
    current_user: User = Depends(require_staff),
):
    """
    Update a booking's dates, notes or property. *(Admin or normal user)*

    The booking does not conflict with itself: saving it with unchanged dates
    always succeeds.
    """
    with store.transaction() as document:
        booking = commands.update_booking(
            document, current_user, booking_id, booking_update.model_dump(exclude_unset=True)
        )
        apartment = document.find_property(booking.property_id)
        owner = document.find_user(booking.user_id) if booking.user_id else None
        return views.staff_booking_out(booking, apartment, owner.email if owner else None)


@router.delete("/{booking_id}")
def delete_booking(
    booking_id: str,
    store: DocumentStore = Depends(get_store),
    current_user: User = Depends(require_staff),
):
    """
    Cancel a booking. *(Admin or normal user)*
    """
    with store.transaction() as document:
        commands.delete_booking(document, current_user, booking_id)
    return {"detail": "Booking cancelled"}
