from datetime import date
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, field_validator

from .dates import parse_day

Role = Literal["admin", "normal", "customer"]


def _parse_optional_day(value):
    if value is None:
        return None
    return parse_day(value)


# ----- Users -----
class UserBase(BaseModel):
    email: EmailStr
    name: Optional[str] = None
    role: Role = "normal"


class UserCreate(UserBase):
    password: str
    group_ids: List[str] = []


class UserUpdate(BaseModel):
    email: Optional[EmailStr] = None
    name: Optional[str] = None
    role: Optional[Role] = None
    password: Optional[str] = None
    group_ids: Optional[List[str]] = None


class UserOut(UserBase):
    model_config = ConfigDict(from_attributes=True)

    id: str
    # plain strings here: stored addresses are not re-validated on the way out
    email: str
    group_ids: List[str] = []


# ----- Groups -----
class GroupBase(BaseModel):
    name: str


class GroupCreate(GroupBase):
    pass


class GroupUpdate(GroupBase):
    pass


class GroupOut(GroupBase):
    model_config = ConfigDict(from_attributes=True)

    id: str


# ----- Bookings -----
class BookingBase(BaseModel):
    property_id: str
    start_date: date
    end_date: date

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _parse_day(cls, value):
        return parse_day(value)


class BookingCreate(BookingBase):
    client_name: Optional[str] = None
    extra_info: Optional[str] = None


class BookingUpdate(BaseModel):
    property_id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    client_name: Optional[str] = None
    extra_info: Optional[str] = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _parse_day(cls, value):
        return _parse_optional_day(value)


class BookingOut(BookingBase):
    """Full booking, for staff."""
    id: str
    user_id: Optional[str] = None
    user_email: Optional[str] = None
    property_name: Optional[str] = None
    client_name: Optional[str] = None
    extra_info: Optional[str] = None
    created_at: Optional[str] = None


class CustomerBookingOut(BaseModel):
    """Booking as a customer sees it: dates only, nobody's details."""
    id: str
    property_id: str
    property_name: Optional[str] = None
    start_date: date
    end_date: date


class PublicBookingOut(BaseModel):
    start_date: date
    end_date: date


# ----- Properties -----
class PropertyBase(BaseModel):
    name: str
    address: str = ""
    extra_info: Optional[str] = None
    roi_info: Optional[str] = None


class PropertyCreate(PropertyBase):
    groups: List[str] = []
    photos: List[str] = []


class PropertyUpdate(BaseModel):
    name: Optional[str] = None
    address: Optional[str] = None
    extra_info: Optional[str] = None
    roi_info: Optional[str] = None
    groups: Optional[List[str]] = None
    photos: Optional[List[str]] = None


class PropertyOut(PropertyBase):
    id: str
    photos: List[str] = []
    # staff only; empty for customers
    groups: List[str] = []
    status: Literal["occupied", "available"]
    next_booking: Optional[CustomerBookingOut] = None
    booking_count: int = 0


class PropertyDetailOut(PropertyOut):
    bookings: List[BookingOut] = []


class CustomerPropertyDetailOut(PropertyOut):
    bookings: List[CustomerBookingOut] = []


class GroupStatusOut(BaseModel):
    state: Literal["all", "some", "none", "empty"]
    text: str
    color: str


class SummaryOut(BaseModel):
    total_properties: int
    occupied_properties: int
    available_properties: int
    total_bookings: int
    group_status: Optional[GroupStatusOut] = None


# ----- Auth -----
class LoginRequest(BaseModel):
    email: str
    password: str


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: Optional[UserOut] = None


class TokenData(BaseModel):
    sub: Optional[str] = None
    role: Optional[str] = None


# ----- Availability responses -----
class AvailabilityCheckResponse(BaseModel):
    property_id: str
    start_date: date
    end_date: date
    available: bool
    conflicting_booking_ids: List[str] = []


class AvailabilityMapResponse(BaseModel):
    property_id: str
    start: date
    days: int
    availability: Dict[str, Literal["booked", "available"]]


# ----- Logs -----
class LogOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: Optional[str] = None
    user_email: Optional[str] = None
    action: str
    entity_type: str
    entity_id: Optional[str] = None
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    timestamp: str
    message: str


# ----- Photos -----
class PhotoUploadOut(BaseModel):
    md5: str
    filename: str


# ----- Public share -----
class PublicPropertyOut(BaseModel):
    id: str
    name: str
    address: str
    extra_info: Optional[str] = None
    roi_info: Optional[str] = None
    photos: List[str] = []
    bookings: List[PublicBookingOut] = []
    availability: Dict[str, Literal["booked", "available"]]


class PublicPropertiesOut(BaseModel):
    properties: List[PublicPropertyOut]
