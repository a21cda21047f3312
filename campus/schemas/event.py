"""Event and event booking schemas."""

from datetime import date, datetime
from typing import Literal
from uuid import UUID

from pydantic import EmailStr, Field, field_validator, model_validator

from campus.schemas.booking import BookingResponseBase
from campus.schemas.common import CamelRequest, CamelResponse
from campus.utils.validators import validate_indian_phone, validate_time_of_day

EventType = Literal["academic", "cultural", "sports", "workshop", "seminar", "other"]
EventStatus = Literal["draft", "published", "ongoing", "completed", "cancelled"]


class EventCreate(CamelRequest):
    """Schema for an organizer creating an event."""

    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    event_type: EventType
    start_date: date
    end_date: date
    start_time: str
    end_time: str
    venue: str = Field(..., min_length=1, max_length=200)
    contact_email: EmailStr | None = None
    contact_phone: str | None = None
    max_participants: int | None = Field(None, ge=1)
    registration_deadline: datetime | None = None
    fee: int = Field(default=0, ge=0)
    status: EventStatus = "published"
    is_public: bool = True
    tags: list[str] = Field(default_factory=list)

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        if not validate_time_of_day(v):
            raise ValueError("Time must be in HH:MM format")
        return v

    @field_validator("contact_phone")
    @classmethod
    def validate_phone(cls, v: str | None) -> str | None:
        if v is not None and not validate_indian_phone(v):
            raise ValueError("Phone must be a valid Indian mobile number")
        return v

    @model_validator(mode="after")
    def validate_dates(self) -> "EventCreate":
        if self.end_date < self.start_date:
            raise ValueError("endDate cannot be before startDate")
        return self


class EventUpdate(CamelRequest):
    """Partial update of an event."""

    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    event_type: EventType | None = None
    start_date: date | None = None
    end_date: date | None = None
    start_time: str | None = None
    end_time: str | None = None
    venue: str | None = Field(None, max_length=200)
    contact_email: EmailStr | None = None
    contact_phone: str | None = None
    max_participants: int | None = Field(None, ge=1)
    registration_deadline: datetime | None = None
    fee: int | None = Field(None, ge=0)
    status: EventStatus | None = None
    is_public: bool | None = None
    tags: list[str] | None = None

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, v: str | None) -> str | None:
        if v is not None and not validate_time_of_day(v):
            raise ValueError("Time must be in HH:MM format")
        return v


class EventResponse(CamelResponse):
    """Schema for event response."""

    id: UUID
    title: str
    description: str
    event_type: str
    start_date: date
    end_date: date
    start_time: str
    end_time: str
    venue: str
    organizer_id: UUID
    contact_email: str | None
    contact_phone: str | None
    max_participants: int | None
    registration_deadline: datetime | None
    fee: int
    status: str
    is_public: bool
    tags: list[str]
    created_at: datetime
    updated_at: datetime


class EventListResponse(CamelResponse):
    events: list[EventResponse]
    total: int


class EventBookingCreate(CamelRequest):
    """Schema for registering for an event."""

    event_id: UUID
    attendee_count: int = Field(default=1, ge=1, le=20)
    attendee_name: str = Field(..., min_length=1, max_length=100)
    attendee_email: EmailStr
    attendee_phone: str | None = None
    payment_method: Literal["online", "offline"] = "online"
    special_requirements: str | None = Field(None, max_length=2000)

    @field_validator("attendee_phone")
    @classmethod
    def validate_phone(cls, v: str | None) -> str | None:
        if v is not None and not validate_indian_phone(v):
            raise ValueError("Phone must be a valid Indian mobile number")
        return v


class EventBookingResponse(BookingResponseBase):
    """Schema for event booking response."""

    event_id: UUID
    attendee_count: int
    attendee_name: str
    attendee_email: str
    attendee_phone: str | None
    total_amount: int


class EventBookingEnvelope(CamelResponse):
    success: bool = True
    message: str | None = None
    booking: EventBookingResponse


class EventBookingListResponse(CamelResponse):
    bookings: list[EventBookingResponse]
    total: int


class EventBookingStats(CamelResponse):
    """Revenue figures over the filtered bookings."""

    total_bookings: int
    completed_bookings: int
    pending_payments: int
    cancelled_bookings: int
    total_revenue: int
    refunded_amount: int


class EventBookingReport(EventBookingListResponse):
    stats: EventBookingStats


class EventPerformance(CamelResponse):
    event_id: UUID
    title: str
    status: str
    tickets_sold: int
    revenue: int


class OrganizerDashboardStats(CamelResponse):
    total_events: int
    active_events: int
    total_revenue: int
    total_tickets_sold: int


class OrganizerDashboardResponse(CamelResponse):
    """Totals over the organizer's events, best sellers first."""

    stats: OrganizerDashboardStats
    events: list[EventPerformance]
