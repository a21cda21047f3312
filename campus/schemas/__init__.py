"""Pydantic schemas for API validation."""

from campus.schemas.booking import BookingCancelRequest, StatusHistoryEntry
from campus.schemas.event import (
    EventBookingCreate,
    EventBookingResponse,
    EventCreate,
    EventResponse,
    EventUpdate,
)
from campus.schemas.payment import (
    EventBookingOrderCreate,
    EventBookingVerification,
    PaymentOrderResponse,
    VenueRentOrderCreate,
    VenueRentVerification,
)
from campus.schemas.role_request import RoleRequestDecision, RoleRequestResponse
from campus.schemas.user import TokenResponse, UserCreate, UserLogin, UserResponse
from campus.schemas.venue import (
    VenueBookingRequestCreate,
    VenueBookingRequestResponse,
    VenueCreate,
    VenueRequestDecision,
    VenueResponse,
    VenueUpdate,
)

__all__ = [
    "BookingCancelRequest",
    "EventBookingCreate",
    "EventBookingOrderCreate",
    "EventBookingResponse",
    "EventBookingVerification",
    "EventCreate",
    "EventResponse",
    "EventUpdate",
    "PaymentOrderResponse",
    "RoleRequestDecision",
    "RoleRequestResponse",
    "StatusHistoryEntry",
    "TokenResponse",
    "UserCreate",
    "UserLogin",
    "UserResponse",
    "VenueBookingRequestCreate",
    "VenueBookingRequestResponse",
    "VenueCreate",
    "VenueRentOrderCreate",
    "VenueRentVerification",
    "VenueRequestDecision",
    "VenueResponse",
    "VenueUpdate",
]
