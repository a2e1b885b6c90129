"""
Command handlers that mutate a loaded document.

Each handler validates its input against the current document, applies the
change, records an audit entry and returns the affected entity. Handlers
raise a ``RentalsError`` instead of leaving the document half-changed, so a
caller running inside ``DocumentStore.transaction`` never persists an
invalid state.
"""
import logging
import uuid
from datetime import date
from typing import Any, Dict, List, Optional

from . import audit
from .dates import timestamp_now
from .errors import BookingConflictError, DuplicateError, NotFoundError, RentalsError
from .models import (
    Booking,
    Document,
    EmailTag,
    Group,
    GroupTag,
    Property,
    User,
    UserGroup,
    normalize_email,
    parse_tag,
)
from .overlap import DateRange, has_conflict

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return str(uuid.uuid4())


def _describe_range(start: date, end: date, note: Optional[str] = None) -> str:
    text = f"{start.isoformat()} to {end.isoformat()}"
    return f"{text} ({note})" if note else text


def _actor_id(actor: Optional[User]) -> Optional[str]:
    return actor.id if actor else None


def _get_property(document: Document, property_id: str) -> Property:
    apartment = document.find_property(property_id)
    if apartment is None:
        raise NotFoundError("Property")
    return apartment


# ----- Bookings -----
def create_booking(
    document: Document,
    actor: User,
    property_id: str,
    start_date: date,
    end_date: date,
    client_name: Optional[str] = None,
    extra_info: Optional[str] = None,
) -> Booking:
    """
    Add a booking to a property.

    Raises
    ------
    NotFoundError
        The property does not exist.
    InvalidDateRangeError
        ``end_date`` is before ``start_date``.
    BookingConflictError
        The property already has a booking overlapping the range.
    """
    apartment = _get_property(document, property_id)
    candidate = DateRange(start_date, end_date)
    if has_conflict(candidate, apartment.bookings):
        logger.info("Booking conflict on property %s for %s", property_id, candidate)
        raise BookingConflictError()

    booking = Booking(
        id=_new_id(),
        property_id=property_id,
        user_id=actor.id,
        start_date=start_date,
        end_date=end_date,
        client_name=client_name or None,
        extra_info=extra_info,
        created_at=timestamp_now(),
    )
    apartment.bookings.append(booking)
    audit.record(
        document, actor.id, "Created booking", "booking",
        entity_id=booking.id, new_value=_describe_range(start_date, end_date),
    )
    return booking


def update_booking(document: Document, actor: User, booking_id: str, changes: Dict[str, Any]) -> Booking:
    """
    Apply ``changes`` to a booking, possibly moving it to another property.

    The booking itself is left out of the conflict check so keeping its
    current dates is always allowed.
    """
    found = document.find_booking(booking_id)
    if found is None:
        raise NotFoundError("Booking")
    current_property, booking = found

    target_id = changes.get("property_id") or booking.property_id
    target = _get_property(document, target_id)
    start = changes.get("start_date") or booking.start_date
    end = changes.get("end_date") or booking.end_date
    candidate = DateRange(start, end)
    if has_conflict(candidate, target.bookings, exclude_booking_id=booking.id):
        logger.info("Booking conflict on property %s for %s", target_id, candidate)
        raise BookingConflictError()

    old_value = _describe_range(booking.start_date, booking.end_date, booking.extra_info)

    booking.start_date = start
    booking.end_date = end
    for field in ("client_name", "extra_info"):
        if field in changes:
            setattr(booking, field, changes[field])

    if target is not current_property:
        current_property.bookings.remove(booking)
        booking.property_id = target.id
        target.bookings.append(booking)

    audit.record(
        document, actor.id, "Updated booking", "booking",
        entity_id=booking.id,
        old_value=old_value,
        new_value=_describe_range(start, end, booking.extra_info),
    )
    return booking


def delete_booking(document: Document, actor: User, booking_id: str) -> Booking:
    found = document.find_booking(booking_id)
    if found is None:
        raise NotFoundError("Booking")
    apartment, booking = found
    apartment.bookings.remove(booking)
    audit.record(
        document, actor.id, "Deleted booking", "booking",
        entity_id=booking.id,
        old_value=f"{apartment.name}: {_describe_range(booking.start_date, booking.end_date)}",
    )
    return booking


# ----- Properties -----
def create_property(
    document: Document,
    actor: User,
    name: str,
    address: str = "",
    extra_info: Optional[str] = None,
    roi_info: Optional[str] = None,
    groups: Optional[List[str]] = None,
    photos: Optional[List[str]] = None,
) -> Property:
    apartment = Property(
        id=_new_id(),
        name=name,
        address=address,
        extra_info=extra_info,
        roi_info=roi_info,
        groups=[parse_tag(g) for g in groups or []],
        photos=list(photos or []),
        created_at=timestamp_now(),
    )
    document.apartments.append(apartment)
    audit.record(document, actor.id, "Created property", "property", entity_id=apartment.id, new_value=name)
    return apartment


def update_property(document: Document, actor: User, property_id: str, changes: Dict[str, Any]) -> Property:
    apartment = _get_property(document, property_id)
    old_name = apartment.name
    for field, value in changes.items():
        if value is None and field in ("name", "address"):
            continue
        if field == "groups":
            value = [parse_tag(g) for g in value or []]
        elif field == "photos":
            value = list(value or [])
        setattr(apartment, field, value)
    audit.record(
        document, actor.id, "Updated property", "property",
        entity_id=apartment.id, old_value=old_name, new_value=apartment.name,
    )
    return apartment


def delete_property(document: Document, actor: User, property_id: str) -> Property:
    apartment = _get_property(document, property_id)
    document.apartments.remove(apartment)
    audit.record(document, actor.id, "Deleted property", "property", entity_id=apartment.id, old_value=apartment.name)
    return apartment


# ----- Groups -----
def _check_group_name(document: Document, name: str, group_id: Optional[str] = None) -> None:
    if "@" in name:
        raise RentalsError("Group name must not contain '@'")
    existing = document.find_group_by_name(name)
    if existing is not None and existing.id != group_id:
        raise DuplicateError("Group name already exists")


def create_group(document: Document, actor: User, name: str) -> Group:
    _check_group_name(document, name)
    group = Group(id=_new_id(), name=name)
    document.groups.append(group)
    audit.record(document, actor.id, "Created group", "group", entity_id=group.id, new_value=name)
    return group


def rename_group(document: Document, actor: User, group_id: str, name: str) -> Group:
    """Rename a group and the matching tag on every property."""
    group = document.find_group(group_id)
    if group is None:
        raise NotFoundError("Group")
    _check_group_name(document, name, group_id=group.id)

    old_tag, new_tag = GroupTag(group.name), GroupTag(name)
    for apartment in document.apartments:
        apartment.groups = [new_tag if t == old_tag else t for t in apartment.groups]
    old_name = group.name
    group.name = name
    audit.record(document, actor.id, "Updated group", "group", entity_id=group.id, old_value=old_name, new_value=name)
    return group


def delete_group(document: Document, actor: User, group_id: str) -> Group:
    """Delete a group, its tag on every property and its memberships."""
    group = document.find_group(group_id)
    if group is None:
        raise NotFoundError("Group")
    tag = GroupTag(group.name)
    for apartment in document.apartments:
        apartment.groups = [t for t in apartment.groups if t != tag]
    document.user_groups = [ug for ug in document.user_groups if ug.group_id != group.id]
    document.groups.remove(group)
    audit.record(document, actor.id, "Deleted group", "group", entity_id=group.id, old_value=group.name)
    return group


# ----- Users -----
def _set_memberships(document: Document, user: User, group_ids: List[str]) -> None:
    for group_id in group_ids:
        if document.find_group(group_id) is None:
            raise NotFoundError("Group")
    document.user_groups = [ug for ug in document.user_groups if ug.user_id != user.id]
    if user.is_customer:
        document.user_groups.extend(UserGroup(user_id=user.id, group_id=g) for g in group_ids)


def create_user(
    document: Document,
    actor: Optional[User],
    email: str,
    password: str,
    role: str = "normal",
    name: Optional[str] = None,
    group_ids: Optional[List[str]] = None,
) -> User:
    """
    Add a user. ``password`` is stored as given; callers hash it first.

    Group memberships only apply to customers.
    """
    email = normalize_email(email)
    if document.find_user_by_email(email) is not None:
        raise DuplicateError("Email already exists")
    user = User(id=_new_id(), email=email, password=password, role=role, name=name, created_at=timestamp_now())
    _set_memberships(document, user, group_ids or [])
    document.users.append(user)
    audit.record(document, _actor_id(actor), "Created user", "user", entity_id=user.id, new_value=email)
    return user


def update_user(document: Document, actor: User, user_id: str, changes: Dict[str, Any]) -> User:
    """
    Update a user's profile, role, password or group memberships.

    Changing the email also rewrites the direct-assignment tags that point at
    the old address.
    """
    user = document.find_user(user_id)
    if user is None:
        raise NotFoundError("User")

    old_email = user.email
    new_email = normalize_email(changes["email"]) if changes.get("email") else None
    if new_email and new_email != old_email:
        existing = document.find_user_by_email(new_email)
        if existing is not None and existing.id != user.id:
            raise DuplicateError("Email already exists")
        old_tag, new_tag = EmailTag(old_email), EmailTag(new_email)
        for apartment in document.apartments:
            apartment.groups = [new_tag if t == old_tag else t for t in apartment.groups]
        user.email = new_email

    for field in ("name", "role", "password"):
        if changes.get(field) is not None:
            setattr(user, field, changes[field])

    if "group_ids" in changes:
        _set_memberships(document, user, changes["group_ids"] or [])
    elif not user.is_customer:
        # staff never keep customer memberships
        _set_memberships(document, user, [])

    audit.record(
        document, actor.id, "Updated user", "user",
        entity_id=user.id, old_value=old_email, new_value=user.email,
    )
    return user


def delete_user(document: Document, actor: User, user_id: str) -> User:
    """Delete a user together with their bookings and group memberships."""
    user = document.find_user(user_id)
    if user is None:
        raise NotFoundError("User")
    removed = 0
    for apartment in document.apartments:
        kept = [b for b in apartment.bookings if b.user_id != user.id]
        removed += len(apartment.bookings) - len(kept)
        apartment.bookings = kept
    document.user_groups = [ug for ug in document.user_groups if ug.user_id != user.id]
    document.users.remove(user)
    logger.info("Deleted user %s and %d of their bookings", user.id, removed)
    audit.record(document, actor.id, "Deleted user", "user", entity_id=user.id, old_value=user.email)
    return user
