"""Payment endpoints for venue rent and event bookings.

POST creates a Razorpay order for a booking awaiting payment; PUT verifies
the checkout response and completes the booking.
"""

from fastapi import APIRouter

from campus.api.deps import CurrentUser, DbSession
from campus.models.booking import EventBooking, VenueBookingRequest
from campus.schemas.payment import (
    EventBookingOrderCreate,
    EventBookingPaymentResponse,
    EventBookingVerification,
    PaymentOrderResponse,
    VenueRentOrderCreate,
    VenueRentPaymentResponse,
    VenueRentVerification,
)
from campus.services.booking_service import booking_service
from campus.services.payment_service import payment_service

router = APIRouter()


@router.post("/venue-rent", response_model=PaymentOrderResponse)
async def create_venue_rent_order(
    data: VenueRentOrderCreate,
    current_user: CurrentUser,
    db: DbSession,
) -> dict:
    """Create a payment order for an approved venue request."""
    booking = await booking_service.get_booking(db, data.booking_request_id, VenueBookingRequest)
    order = await payment_service.create_order(db, booking, current_user)
    return {"order": order}


@router.put("/venue-rent", response_model=VenueRentPaymentResponse)
async def verify_venue_rent_payment(
    data: VenueRentVerification,
    current_user: CurrentUser,
    db: DbSession,
) -> dict:
    """Verify a venue rent payment and complete the booking."""
    booking = await booking_service.get_booking(db, data.booking_request_id, VenueBookingRequest)
    changed = await payment_service.verify_payment(
        db,
        booking,
        current_user,
        order_id=data.razorpay_order_id,
        payment_id=data.razorpay_payment_id,
        signature=data.razorpay_signature,
    )
    return {
        "message": "Payment verified successfully" if changed else "Payment already verified",
        "booking_request": booking,
    }


@router.post("/event-booking", response_model=PaymentOrderResponse)
async def create_event_booking_order(
    data: EventBookingOrderCreate,
    current_user: CurrentUser,
    db: DbSession,
) -> dict:
    """Create a payment order for a paid event booking."""
    booking = await booking_service.get_booking(db, data.booking_id, EventBooking)
    order = await payment_service.create_order(db, booking, current_user)
    return {"order": order}


@router.put("/event-booking", response_model=EventBookingPaymentResponse)
async def verify_event_booking_payment(
    data: EventBookingVerification,
    current_user: CurrentUser,
    db: DbSession,
) -> dict:
    """Verify an event booking payment and complete the booking."""
    booking = await booking_service.get_booking(db, data.booking_id, EventBooking)
    changed = await payment_service.verify_payment(
        db,
        booking,
        current_user,
        order_id=data.razorpay_order_id,
        payment_id=data.razorpay_payment_id,
        signature=data.razorpay_signature,
    )
    return {
        "message": "Payment verified successfully" if changed else "Payment already verified",
        "booking": booking,
    }
