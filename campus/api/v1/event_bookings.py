"""Event booking endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy import select

from campus.api.deps import BookingStatusFilter, CurrentUser, DbSession
from campus.core.middleware import booking_limiter
from campus.domain import booking_state
from campus.gateways.base import GatewayType
from campus.models.booking import EventBooking
from campus.schemas.booking import BookingCancelRequest
from campus.schemas.event import (
    EventBookingCreate,
    EventBookingEnvelope,
    EventBookingListResponse,
)
from campus.services.booking_service import booking_service
from campus.services.gateway_service import gateway_service

router = APIRouter()


@router.post(
    "",
    response_model=EventBookingEnvelope,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(booking_limiter)],
)
async def create_event_booking(
    data: EventBookingCreate,
    current_user: CurrentUser,
    db: DbSession,
) -> dict:
    """Register for an event.

    Free events are confirmed immediately. Paid events wait for payment:
    online through ``POST /payments/event-booking``, offline at the accounts
    office until an admin marks the booking paid.
    """
    booking = await booking_service.create_event_booking(db, current_user, data)

    if booking.status == booking_state.APPROVED:
        message = "Registration confirmed"
    elif booking.payment_method == "offline":
        offline = await gateway_service.create_order(
            GatewayType.MANUAL, booking.amount, booking.currency, booking.booking_number
        )
        message = offline.entity.get("instructions", "Payment due")
    else:
        message = "Registration created, complete the payment to confirm"

    return {"message": message, "booking": booking}


@router.get("/mine", response_model=EventBookingListResponse)
async def list_my_event_bookings(
    current_user: CurrentUser,
    db: DbSession,
    status_filter: BookingStatusFilter = None,
) -> dict:
    """List the caller's event bookings, newest first."""
    query = select(EventBooking).where(EventBooking.requester_id == current_user.id)
    if status_filter:
        query = query.where(EventBooking.status == status_filter)

    result = await db.execute(query.order_by(EventBooking.created_at.desc()))
    bookings = list(result.scalars().all())
    return {"bookings": bookings, "total": len(bookings)}


@router.get("/{booking_id}", response_model=EventBookingEnvelope)
async def get_event_booking(
    booking_id: UUID,
    current_user: CurrentUser,
    db: DbSession,
) -> dict:
    """Get one event booking (requester or admin)."""
    booking = await booking_service.get_booking(db, booking_id, EventBooking)
    booking_service.assert_owner_or_admin(booking, current_user)
    return {"booking": booking}


@router.post("/{booking_id}/cancel", response_model=EventBookingEnvelope)
async def cancel_event_booking(
    booking_id: UUID,
    current_user: CurrentUser,
    db: DbSession,
    data: BookingCancelRequest | None = None,
) -> dict:
    """Cancel an event booking; a paid booking is refunded."""
    booking = await booking_service.get_booking(db, booking_id, EventBooking)
    await booking_service.cancel(db, booking, current_user, data.reason if data else None)
    return {"message": "Event booking cancelled", "booking": booking}
