"""Booking-related Pydantic schemas shared by venue requests and event bookings."""

from datetime import date, datetime
from uuid import UUID

from pydantic import Field

from campus.schemas.common import CamelRequest, CamelResponse


class StatusHistoryEntry(CamelResponse):
    """One accepted transition."""

    sequence: int
    status: str
    note: str | None
    timestamp: datetime


class BookingResponseBase(CamelResponse):
    """Fields every booking exposes."""

    id: UUID
    booking_number: str
    kind: str
    requester_id: UUID
    requester_role: str
    event_date: date
    special_requirements: str | None

    status: str
    rejection_reason: str | None
    decided_at: datetime | None
    cancellation_reason: str | None
    cancelled_by: str | None
    cancelled_at: datetime | None

    currency: str
    payment_status: str
    payment_method: str
    razorpay_order_id: str | None
    razorpay_payment_id: str | None
    paid_at: datetime | None

    version: int
    status_history: list[StatusHistoryEntry]
    created_at: datetime
    updated_at: datetime


class BookingCancelRequest(CamelRequest):
    """Schema for cancelling a booking."""

    reason: str | None = Field(None, max_length=1000)


class MarkPaidRequest(CamelRequest):
    """Admin confirming an offline payment."""

    note: str | None = Field(None, max_length=500)


class BookingHistoryResponse(CamelResponse):
    booking_id: UUID
    booking_number: str
    status: str
    status_history: list[StatusHistoryEntry]
