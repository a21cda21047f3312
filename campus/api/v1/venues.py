"""Venue catalog and venue booking request endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select

from campus.api.deps import BookingStatusFilter, CurrentUser, DbSession
from campus.core.middleware import booking_limiter
from campus.models.booking import VenueBookingRequest
from campus.models.venue import Venue
from campus.schemas.booking import BookingCancelRequest
from campus.schemas.venue import (
    VenueBookingRequestCreate,
    VenueBookingRequestEnvelope,
    VenueBookingRequestListResponse,
    VenueListResponse,
)
from campus.services.booking_service import booking_service

router = APIRouter()


@router.get("", response_model=VenueListResponse)
async def list_venues(
    db: DbSession,
    min_capacity: Annotated[int | None, Query(alias="minCapacity", ge=1)] = None,
) -> dict:
    """List venues that can currently be booked."""
    query = select(Venue).where(Venue.status == "active")
    if min_capacity is not None:
        query = query.where(Venue.capacity >= min_capacity)

    result = await db.execute(query.order_by(Venue.name))
    venues = list(result.scalars().all())
    return {"venues": venues, "total": len(venues)}


@router.post(
    "/requests",
    response_model=VenueBookingRequestEnvelope,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(booking_limiter)],
)
async def create_venue_request(
    data: VenueBookingRequestCreate,
    current_user: CurrentUser,
    db: DbSession,
) -> dict:
    """Request a venue for a date; the request waits for admin approval."""
    booking = await booking_service.create_venue_request(db, current_user, data)
    return {
        "message": "Venue booking request submitted successfully",
        "booking_request": booking,
    }


@router.get("/requests/mine", response_model=VenueBookingRequestListResponse)
async def list_my_venue_requests(
    current_user: CurrentUser,
    db: DbSession,
    status_filter: BookingStatusFilter = None,
) -> dict:
    """List the caller's venue requests, newest first."""
    query = select(VenueBookingRequest).where(
        VenueBookingRequest.requester_id == current_user.id
    )
    if status_filter:
        query = query.where(VenueBookingRequest.status == status_filter)

    result = await db.execute(query.order_by(VenueBookingRequest.created_at.desc()))
    bookings = list(result.scalars().all())
    return {"booking_requests": bookings, "total": len(bookings)}


@router.get("/requests/{booking_id}", response_model=VenueBookingRequestEnvelope)
async def get_venue_request(
    booking_id: UUID,
    current_user: CurrentUser,
    db: DbSession,
) -> dict:
    """Get one venue request (requester or admin)."""
    booking = await booking_service.get_booking(db, booking_id, VenueBookingRequest)
    booking_service.assert_owner_or_admin(booking, current_user)
    return {"booking_request": booking}


@router.post("/requests/{booking_id}/cancel", response_model=VenueBookingRequestEnvelope)
async def cancel_venue_request(
    booking_id: UUID,
    current_user: CurrentUser,
    db: DbSession,
    data: BookingCancelRequest | None = None,
) -> dict:
    """Cancel a venue request; a paid booking is refunded."""
    booking = await booking_service.get_booking(db, booking_id, VenueBookingRequest)
    await booking_service.cancel(db, booking, current_user, data.reason if data else None)
    return {"message": "Venue booking request cancelled", "booking_request": booking}
