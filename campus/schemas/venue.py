"""Venue and venue booking request schemas."""

from datetime import date, datetime
from typing import Literal
from uuid import UUID

from pydantic import EmailStr, Field, field_validator, model_validator

from campus.schemas.booking import BookingResponseBase
from campus.schemas.common import CamelRequest, CamelResponse
from campus.utils.validators import validate_indian_phone, validate_time_of_day

VenueStatus = Literal["active", "maintenance", "inactive"]
PriceType = Literal["per_day", "per_hour"]


class VenueCreate(CamelRequest):
    """Schema for an admin creating a venue."""

    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    capacity: int = Field(..., gt=0)
    location: str = Field(..., min_length=1, max_length=200)
    address: str | None = None
    amenities: list[str] = Field(default_factory=list)
    rules: list[str] = Field(default_factory=list)
    rent_price: int = Field(default=0, ge=0)
    price_type: PriceType = "per_day"
    status: VenueStatus = "active"
    contact_person_name: str | None = Field(None, max_length=100)
    contact_person_phone: str | None = None
    contact_person_email: EmailStr | None = None


class VenueUpdate(CamelRequest):
    """Partial update of a venue."""

    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    capacity: int | None = Field(None, gt=0)
    location: str | None = Field(None, max_length=200)
    address: str | None = None
    amenities: list[str] | None = None
    rules: list[str] | None = None
    rent_price: int | None = Field(None, ge=0)
    price_type: PriceType | None = None
    status: VenueStatus | None = None
    contact_person_name: str | None = Field(None, max_length=100)
    contact_person_phone: str | None = None
    contact_person_email: EmailStr | None = None


class VenueResponse(CamelResponse):
    """Schema for venue response."""

    id: UUID
    name: str
    description: str
    capacity: int
    location: str
    address: str | None
    amenities: list[str]
    rules: list[str]
    rent_price: int
    price_type: str
    status: str
    contact_person_name: str | None
    contact_person_phone: str | None
    contact_person_email: str | None
    created_at: datetime
    updated_at: datetime


class VenueListResponse(CamelResponse):
    venues: list[VenueResponse]
    total: int


class VenueBookingRequestCreate(CamelRequest):
    """Schema for requesting a venue."""

    venue_id: UUID
    event_name: str = Field(..., min_length=1, max_length=200)
    event_description: str | None = Field(None, max_length=5000)
    event_date: date
    event_start_time: str
    event_end_time: str
    expected_attendees: int = Field(..., ge=1)
    purpose: str = Field(..., min_length=1, max_length=2000)
    special_requirements: str | None = Field(None, max_length=2000)
    organizer_name: str = Field(..., min_length=1, max_length=100)
    organizer_email: EmailStr
    organizer_phone: str | None = None

    @field_validator("event_start_time", "event_end_time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        if not validate_time_of_day(v):
            raise ValueError("Time must be in HH:MM format")
        return v

    @field_validator("event_date")
    @classmethod
    def validate_event_date(cls, v: date) -> date:
        if v < date.today():
            raise ValueError("eventDate cannot be in the past")
        return v

    @field_validator("organizer_phone")
    @classmethod
    def validate_phone(cls, v: str | None) -> str | None:
        if v is not None and not validate_indian_phone(v):
            raise ValueError("Phone must be a valid Indian mobile number")
        return v

    @model_validator(mode="after")
    def validate_time_range(self) -> "VenueBookingRequestCreate":
        if self.event_end_time <= self.event_start_time:
            raise ValueError("eventEndTime must be after eventStartTime")
        return self


class VenueRequestDecision(CamelRequest):
    """Admin decision on a pending venue request."""

    action: Literal["approve", "reject"]
    rejection_reason: str | None = Field(None, max_length=1000)
    rent_amount: int | None = Field(None, ge=0)


class VenueBookingRequestResponse(BookingResponseBase):
    """Schema for venue booking request response."""

    venue_id: UUID
    event_name: str
    event_description: str | None
    event_start_time: str
    event_end_time: str
    expected_attendees: int
    purpose: str
    organizer_name: str
    organizer_email: str
    organizer_phone: str | None
    rent_amount: int


class VenueBookingRequestEnvelope(CamelResponse):
    success: bool = True
    message: str | None = None
    booking_request: VenueBookingRequestResponse


class VenueBookingRequestListResponse(CamelResponse):
    booking_requests: list[VenueBookingRequestResponse]
    total: int
