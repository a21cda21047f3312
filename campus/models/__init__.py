"""Database models."""

from campus.models.admin import AuditLog
from campus.models.booking import (
    BookingRequest,
    BookingStatusHistory,
    EventBooking,
    VenueBookingRequest,
)
from campus.models.event import Event
from campus.models.user import User
from campus.models.venue import Venue

__all__ = [
    "AuditLog",
    "BookingRequest",
    "BookingStatusHistory",
    "Event",
    "EventBooking",
    "User",
    "Venue",
    "VenueBookingRequest",
]
