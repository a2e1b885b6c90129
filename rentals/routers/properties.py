from datetime import date
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from .. import commands, config, schemas, views
from ..availability import compute_availability
from ..dates import today_utc
from ..deps import get_current_user, get_store, require_staff
from ..filtering import filter_by_status, search_properties
from ..models import Document, GroupTag, Property, User
from ..occupancy import group_status, property_status, summarize
from ..store import DocumentStore
from ..visibility import can_view, visible_properties

router = APIRouter(prefix="/properties", tags=["properties"])


def _scoped_properties(document: Document, viewer: User, group: Optional[str]) -> List[Property]:
    """Properties the viewer may see, narrowed to a group for staff."""
    apartments = visible_properties(document, viewer)
    if group and group != "all" and not viewer.is_customer:
        tag = GroupTag(group)
        apartments = [a for a in apartments if tag in a.groups]
    return apartments


def _get_visible_property(document: Document, viewer: User, property_id: str) -> Property:
    apartment = document.find_property(property_id)
    # invisible properties look the same as missing ones
    if apartment is None or not can_view(document, viewer, apartment):
        raise HTTPException(status_code=404, detail="Property not found")
    return apartment


@router.get("/", response_model=List[schemas.PropertyOut])
def list_properties(
    search: Optional[str] = None,
    status: Literal["all", "available", "occupied"] = "all",
    group: Optional[str] = None,
    as_of: Optional[date] = None,
    store: DocumentStore = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    """
    List properties with their occupancy status.

    Parameters
    ----------
    search : str, optional
        Matches name, address or extra info (case-insensitive).
    status : str, optional
        ``occupied`` or ``available`` on ``as_of``.
    group : str, optional
        Group name to narrow to. Ignored for customers, who always see only
        what is assigned to them.
    as_of : date, optional
        Day to compute status for, defaults to today.
    """
    document = store.load()
    day = as_of or today_utc()
    apartments = search_properties(_scoped_properties(document, current_user, group), search)
    rows = [(a, property_status(a.bookings, day)) for a in apartments]
    rows = filter_by_status(rows, status)
    rows.sort(key=lambda r: r[0].name.lower())
    return [views.property_out(current_user, a, day, s) for a, s in rows]


@router.get("/summary", response_model=schemas.SummaryOut)
def properties_summary(
    group: Optional[str] = None,
    as_of: Optional[date] = None,
    store: DocumentStore = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    """
    Dashboard counters and the group booking banner.

    The banner is all booked (red), some booked (yellow) or none booked
    (green). It is not shown to customers.
    """
    document = store.load()
    day = as_of or today_utc()
    apartments = _scoped_properties(document, current_user, group)
    statuses = [property_status(a.bookings, day) for a in apartments]
    summary = summarize(statuses, sum(len(a.bookings) for a in apartments))
    banner = None
    if not current_user.is_customer:
        gs = group_status(statuses)
        banner = schemas.GroupStatusOut(state=gs.state, text=gs.text, color=gs.color)
    return schemas.SummaryOut(
        total_properties=summary.total_properties,
        occupied_properties=summary.occupied_properties,
        available_properties=summary.available_properties,
        total_bookings=summary.total_bookings,
        group_status=banner,
    )


@router.post("/", response_model=schemas.PropertyOut)
def create_property(
    property_in: schemas.PropertyCreate,
    store: DocumentStore = Depends(get_store),
    current_user: User = Depends(require_staff),
):
    """
    Create a property. *(Admin or normal user)*

    ``groups`` mixes group names and customer emails; a customer sees the
    property if either matches them.
    """
    with store.transaction() as document:
        apartment = commands.create_property(document, current_user, **property_in.model_dump())
        return views.property_out(current_user, apartment, today_utc())


# staff and customers get different shapes, so no single response_model
@router.get("/{property_id}", response_model=None)
def get_property(
    property_id: str,
    as_of: Optional[date] = None,
    store: DocumentStore = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    """
    Retrieve a property with its bookings.

    Customers get bookings reduced to dates; properties they are not
    assigned to are reported as not found.
    """
    document = store.load()
    apartment = _get_visible_property(document, current_user, property_id)
    return views.property_detail_out(document, current_user, apartment, as_of or today_utc())


@router.get("/{property_id}/availability", response_model=schemas.AvailabilityMapResponse)
def get_property_availability(
    property_id: str,
    start: Optional[date] = None,
    days: int = Query(config.AVAILABILITY_WINDOW_DAYS, ge=0, le=730),
    store: DocumentStore = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    """
    Per-day booked/available map for a property's calendar.
    """
    document = store.load()
    apartment = _get_visible_property(document, current_user, property_id)
    window_start = start or today_utc()
    return schemas.AvailabilityMapResponse(
        property_id=apartment.id,
        start=window_start,
        days=days,
        availability=compute_availability(apartment.bookings, window_start, days),
    )


@router.patch("/{property_id}", response_model=schemas.PropertyOut)
def update_property(
    property_id: str,
    property_update: schemas.PropertyUpdate,
    store: DocumentStore = Depends(get_store),
    current_user: User = Depends(require_staff),
):
    """
    Update a property. *(Admin or normal user)*
    """
    with store.transaction() as document:
        apartment = commands.update_property(
            document, current_user, property_id, property_update.model_dump(exclude_unset=True)
        )
        return views.property_out(current_user, apartment, today_utc())


@router.delete("/{property_id}")
def delete_property(
    property_id: str,
    store: DocumentStore = Depends(get_store),
    current_user: User = Depends(require_staff),
):
    """
    Delete a property and its bookings. *(Admin or normal user)*
    """
    with store.transaction() as document:
        commands.delete_property(document, current_user, property_id)
    return {"detail": "Property deleted"}
