"""
In-memory model of the rentals document.

The persisted form is one JSON object with top-level arrays ``users``,
``groups``, ``apartments`` (each embedding its ``bookings`` and ``photos``),
``logs`` and ``user_groups``. Each dataclass here knows how to read itself
from, and write itself back to, that shape.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Tuple, Union

from .dates import parse_day, to_instant_string

STAFF_ROLES = ("admin", "normal")


# ----- Visibility tags -----
@dataclass(frozen=True)
class GroupTag:
    """Property is visible to every customer in the named group."""
    name: str


def normalize_email(value: str) -> str:
    """Stored and compared form of an email address: stripped and lowercased."""
    return value.strip().lower()


@dataclass(frozen=True)
class EmailTag:
    """Property is assigned directly to one customer."""
    email: str

    def __post_init__(self):
        object.__setattr__(self, "email", normalize_email(self.email))


VisibilityTag = Union[GroupTag, EmailTag]


def parse_tag(raw: str) -> VisibilityTag:
    # group names never contain "@", customer emails always do
    value = raw.strip()
    if "@" in value:
        return EmailTag(email=value)
    return GroupTag(name=value)


def tag_to_str(tag: VisibilityTag) -> str:
    if isinstance(tag, EmailTag):
        return tag.email
    return tag.name


# ----- Entities -----
@dataclass
class User:
    id: str
    email: str
    password: str
    role: str = "normal"
    name: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "User":
        return cls(
            id=data["id"],
            email=data["email"],
            password=data.get("password") or "",
            role=data.get("role") or "normal",
            name=data.get("name"),
            created_at=data.get("created_at"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "password": self.password,
            "role": self.role,
            "name": self.name,
            "created_at": self.created_at,
        }

    @property
    def is_customer(self) -> bool:
        return self.role == "customer"


@dataclass
class Group:
    id: str
    name: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Group":
        return cls(id=data["id"], name=data["name"])

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name}


@dataclass
class UserGroup:
    user_id: str
    group_id: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserGroup":
        return cls(user_id=data["user_id"], group_id=data["group_id"])

    def to_dict(self) -> Dict[str, Any]:
        return {"user_id": self.user_id, "group_id": self.group_id}


@dataclass
class Booking:
    id: str
    property_id: str
    user_id: Optional[str]
    start_date: date
    end_date: date
    client_name: Optional[str] = None
    extra_info: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Booking":
        """
        Raises ``ValueError`` when a date does not parse or the booking ends
        before it starts.
        """
        start_date = parse_day(data["start_date"])
        end_date = parse_day(data["end_date"])
        if end_date < start_date:
            raise ValueError(f"booking {data['id']} ends before it starts")
        return cls(
            id=data["id"],
            property_id=data["property_id"],
            user_id=data.get("user_id"),
            start_date=start_date,
            end_date=end_date,
            client_name=data.get("client_name"),
            extra_info=data.get("extra_info"),
            created_at=data.get("created_at"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "property_id": self.property_id,
            "user_id": self.user_id,
            "start_date": to_instant_string(self.start_date),
            "end_date": to_instant_string(self.end_date),
            "client_name": self.client_name,
            "extra_info": self.extra_info,
            "created_at": self.created_at,
        }


_PROPERTY_KEYS = {
    "id", "name", "address", "extra_info", "roi_info",
    "groups", "bookings", "photos", "created_at",
}


@dataclass
class Property:
    id: str
    name: str
    address: str = ""
    extra_info: Optional[str] = None
    roi_info: Optional[str] = None
    groups: List[VisibilityTag] = field(default_factory=list)
    bookings: List[Booking] = field(default_factory=list)
    photos: List[str] = field(default_factory=list)
    created_at: Optional[str] = None
    # keys this model does not manage (e.g. roi_chart) survive a round trip
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Property":
        return cls(
            id=data["id"],
            name=data.get("name") or "",
            address=data.get("address") or "",
            extra_info=data.get("extra_info"),
            roi_info=data.get("roi_info"),
            groups=[parse_tag(g) for g in data.get("groups") or []],
            bookings=[Booking.from_dict(b) for b in data.get("bookings") or []],
            photos=list(data.get("photos") or []),
            created_at=data.get("created_at"),
            extra={k: v for k, v in data.items() if k not in _PROPERTY_KEYS},
        )

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.extra)
        data.update({
            "id": self.id,
            "name": self.name,
            "address": self.address,
            "extra_info": self.extra_info,
            "roi_info": self.roi_info,
            "groups": [tag_to_str(t) for t in self.groups],
            "bookings": [b.to_dict() for b in self.bookings],
            "photos": list(self.photos),
            "created_at": self.created_at,
        })
        return data


@dataclass(frozen=True)
class LogEntry:
    id: str
    user_id: Optional[str]
    action: str
    entity_type: str
    timestamp: str
    entity_id: Optional[str] = None
    old_value: Optional[str] = None
    new_value: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LogEntry":
        return cls(
            id=data["id"],
            user_id=data.get("user_id"),
            action=data["action"],
            entity_type=data["entity_type"],
            timestamp=data["timestamp"],
            entity_id=data.get("entity_id"),
            old_value=data.get("old_value"),
            new_value=data.get("new_value"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "action": self.action,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "old_value": self.old_value,
            "new_value": self.new_value,
            "timestamp": self.timestamp,
        }


@dataclass
class Document:
    users: List[User] = field(default_factory=list)
    groups: List[Group] = field(default_factory=list)
    apartments: List[Property] = field(default_factory=list)
    logs: List[LogEntry] = field(default_factory=list)
    user_groups: List[UserGroup] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Document":
        return cls(
            users=[User.from_dict(u) for u in data.get("users") or []],
            groups=[Group.from_dict(g) for g in data.get("groups") or []],
            apartments=[Property.from_dict(a) for a in data.get("apartments") or []],
            logs=[LogEntry.from_dict(entry) for entry in data.get("logs") or []],
            user_groups=[UserGroup.from_dict(ug) for ug in data.get("user_groups") or []],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "users": [u.to_dict() for u in self.users],
            "groups": [g.to_dict() for g in self.groups],
            "apartments": [a.to_dict() for a in self.apartments],
            "logs": [entry.to_dict() for entry in self.logs],
            "user_groups": [ug.to_dict() for ug in self.user_groups],
        }

    # ----- Lookups -----
    def find_user(self, user_id: str) -> Optional[User]:
        return next((u for u in self.users if u.id == user_id), None)

    def find_user_by_email(self, email: str) -> Optional[User]:
        wanted = normalize_email(email)
        return next((u for u in self.users if normalize_email(u.email) == wanted), None)

    def find_group(self, group_id: str) -> Optional[Group]:
        return next((g for g in self.groups if g.id == group_id), None)

    def find_group_by_name(self, name: str) -> Optional[Group]:
        return next((g for g in self.groups if g.name == name), None)

    def find_property(self, property_id: str) -> Optional[Property]:
        return next((a for a in self.apartments if a.id == property_id), None)

    def find_booking(self, booking_id: str) -> Optional[Tuple[Property, Booking]]:
        for apartment in self.apartments:
            for booking in apartment.bookings:
                if booking.id == booking_id:
                    return apartment, booking
        return None

    def group_ids_for(self, user_id: str) -> List[str]:
        return [ug.group_id for ug in self.user_groups if ug.user_id == user_id]

    def table_counts(self) -> Dict[str, int]:
        return {
            "users": len(self.users),
            "groups": len(self.groups),
            "apartments": len(self.apartments),
            "logs": len(self.logs),
            "user_groups": len(self.user_groups),
        }
