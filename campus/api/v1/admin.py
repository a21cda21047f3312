"""Admin panel endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query, status
from sqlalchemy import func, select

from campus.api.deps import BookingStatusFilter, CurrentAdmin, DbSession
from campus.core.exceptions import ConflictError, NotFoundError
from campus.models.admin import AuditLog
from campus.models.booking import BookingRequest, EventBooking, VenueBookingRequest
from campus.models.venue import Venue
from campus.schemas.admin import AdminBookingEnvelope, AuditLogListResponse
from campus.schemas.booking import BookingCancelRequest, BookingHistoryResponse, MarkPaidRequest
from campus.schemas.event import EventBookingReport
from campus.schemas.role_request import (
    RoleRequestDecision,
    RoleRequestListResponse,
    RoleRequestResponse,
)
from campus.schemas.venue import (
    VenueBookingRequestEnvelope,
    VenueBookingRequestListResponse,
    VenueCreate,
    VenueListResponse,
    VenueRequestDecision,
    VenueResponse,
    VenueUpdate,
)
from campus.services.booking_service import booking_service, event_booking_stats
from campus.services.role_request_service import role_request_service

router = APIRouter()


# ============ VENUES ============


async def _get_venue(db, venue_id: UUID) -> Venue:
    venue = await db.get(Venue, venue_id)
    if venue is None:
        raise NotFoundError("Venue", str(venue_id))
    return venue


@router.get("/venues", response_model=VenueListResponse)
async def list_all_venues(admin: CurrentAdmin, db: DbSession) -> dict:
    """List every venue, whatever its status."""
    result = await db.execute(select(Venue).order_by(Venue.name))
    venues = list(result.scalars().all())
    return {"venues": venues, "total": len(venues)}


@router.post("/venues", response_model=VenueResponse, status_code=status.HTTP_201_CREATED)
async def create_venue(data: VenueCreate, admin: CurrentAdmin, db: DbSession) -> Venue:
    """Add a venue to the catalog."""
    venue = Venue(**data.model_dump())
    db.add(venue)
    await db.flush()
    return venue


@router.put("/venues/{venue_id}", response_model=VenueResponse)
async def update_venue(
    venue_id: UUID,
    data: VenueUpdate,
    admin: CurrentAdmin,
    db: DbSession,
) -> Venue:
    """Update a venue; existing requests keep the rent quoted at creation."""
    venue = await _get_venue(db, venue_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(venue, field, value)
    await db.flush()
    return venue


@router.delete("/venues/{venue_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_venue(venue_id: UUID, admin: CurrentAdmin, db: DbSession) -> None:
    """Delete a venue that has never been requested."""
    venue = await _get_venue(db, venue_id)
    result = await db.execute(
        select(VenueBookingRequest.id).where(VenueBookingRequest.venue_id == venue_id).limit(1)
    )
    if result.scalar_one_or_none() is not None:
        raise ConflictError("Venue has booking requests, set its status to inactive instead")
    await db.delete(venue)
    await db.flush()


# ============ VENUE REQUESTS ============


@router.get("/venue-requests", response_model=VenueBookingRequestListResponse)
async def list_venue_requests(
    admin: CurrentAdmin,
    db: DbSession,
    status_filter: BookingStatusFilter = None,
    venue_id: Annotated[UUID | None, Query(alias="venueId")] = None,
) -> dict:
    """List venue requests, newest first."""
    query = select(VenueBookingRequest)
    if status_filter:
        query = query.where(VenueBookingRequest.status == status_filter)
    if venue_id:
        query = query.where(VenueBookingRequest.venue_id == venue_id)

    result = await db.execute(query.order_by(VenueBookingRequest.created_at.desc()))
    bookings = list(result.scalars().all())
    return {"booking_requests": bookings, "total": len(bookings)}


@router.put("/venue-requests/{booking_id}", response_model=VenueBookingRequestEnvelope)
async def decide_venue_request(
    booking_id: UUID,
    decision: VenueRequestDecision,
    admin: CurrentAdmin,
    db: DbSession,
) -> dict:
    """Approve or reject a pending venue request.

    Approving with a non-zero rent moves the request to payment_pending;
    a zero rent approves it outright.
    """
    booking = await booking_service.get_booking(db, booking_id, VenueBookingRequest)
    result = await booking_service.decide_venue_request(
        db,
        booking,
        admin,
        decision.action,
        rejection_reason=decision.rejection_reason,
        rent_amount=decision.rent_amount,
    )
    return {
        "message": f"Venue booking request {result.status.replace('_', ' ')}",
        "booking_request": booking,
    }


# ============ EVENT BOOKINGS ============


@router.get("/event-bookings", response_model=EventBookingReport)
async def list_event_bookings(
    admin: CurrentAdmin,
    db: DbSession,
    status_filter: BookingStatusFilter = None,
    payment_status: Annotated[
        str | None, Query(alias="paymentStatus", pattern="^(pending|paid|failed|refunded)$")
    ] = None,
    event_id: Annotated[UUID | None, Query(alias="eventId")] = None,
) -> dict:
    """List event bookings with revenue figures for the same filter."""
    query = select(EventBooking)
    if status_filter:
        query = query.where(EventBooking.status == status_filter)
    if payment_status:
        query = query.where(EventBooking.payment_status == payment_status)
    if event_id:
        query = query.where(EventBooking.event_id == event_id)

    result = await db.execute(query.order_by(EventBooking.created_at.desc()))
    bookings = list(result.scalars().all())

    return {"bookings": bookings, "total": len(bookings), "stats": event_booking_stats(bookings)}


# ============ ANY BOOKING ============


@router.post("/bookings/{booking_id}/mark-paid", response_model=AdminBookingEnvelope)
async def mark_booking_paid(
    booking_id: UUID,
    admin: CurrentAdmin,
    db: DbSession,
    data: MarkPaidRequest | None = None,
) -> dict:
    """Confirm an offline payment for a booking awaiting payment."""
    booking = await booking_service.get_booking(db, booking_id)
    await booking_service.mark_paid_offline(db, booking, admin, data.note if data else None)
    return {"message": "Booking marked as paid", "booking": booking}


@router.post("/bookings/{booking_id}/cancel", response_model=AdminBookingEnvelope)
async def cancel_booking(
    booking_id: UUID,
    admin: CurrentAdmin,
    db: DbSession,
    data: BookingCancelRequest | None = None,
) -> dict:
    """Cancel any booking; a paid booking is refunded."""
    booking = await booking_service.get_booking(db, booking_id)
    await booking_service.cancel(db, booking, admin, data.reason if data else None)
    return {"message": "Booking cancelled", "booking": booking}


@router.get("/bookings/{booking_id}/history", response_model=BookingHistoryResponse)
async def get_booking_history(booking_id: UUID, admin: CurrentAdmin, db: DbSession) -> dict:
    """Full status history of a booking, oldest first."""
    booking: BookingRequest = await booking_service.get_booking(db, booking_id)
    return {
        "booking_id": booking.id,
        "booking_number": booking.booking_number,
        "status": booking.status,
        "status_history": booking.status_history,
    }


# ============ ROLE REQUESTS ============


@router.get("/role-requests", response_model=RoleRequestListResponse)
async def list_role_requests(admin: CurrentAdmin, db: DbSession) -> dict:
    """Pending role upgrade requests, newest first."""
    users = await role_request_service.list_pending(db)
    return {"requests": users, "total": len(users)}


@router.put("/role-request", response_model=RoleRequestResponse)
async def decide_role_request(
    decision: RoleRequestDecision,
    admin: CurrentAdmin,
    db: DbSession,
):
    """Approve or reject a pending role upgrade request."""
    return await role_request_service.decide(
        db,
        admin,
        decision.user_id,
        decision.action,
        decision.rejection_reason,
    )


# ============ AUDIT LOGS ============


@router.get("/audit-logs", response_model=AuditLogListResponse)
async def get_audit_logs(
    admin: CurrentAdmin,
    db: DbSession,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=50, ge=1, le=100, alias="pageSize"),
    resource_id: Annotated[UUID | None, Query(alias="resourceId")] = None,
) -> dict:
    """Get audit logs, newest first."""
    query = select(AuditLog).order_by(AuditLog.created_at.desc())
    if resource_id:
        query = query.where(AuditLog.resource_id == resource_id)

    count_result = await db.execute(select(func.count()).select_from(query.subquery()))
    total = count_result.scalar() or 0

    offset = (page - 1) * page_size
    result = await db.execute(query.offset(offset).limit(page_size))
    logs = list(result.scalars().all())

    return {"logs": logs, "total": total, "page": page, "page_size": page_size}
