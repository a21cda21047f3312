"""Event catalog endpoints."""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from campus.api.deps import BookingStatusFilter, CurrentUser, DbSession, require_organizer
from campus.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from campus.models.booking import EventBooking
from campus.models.event import Event
from campus.models.user import User
from campus.schemas.event import (
    EventBookingReport,
    EventCreate,
    EventListResponse,
    EventResponse,
    EventUpdate,
    OrganizerDashboardResponse,
)
from campus.services.booking_service import event_booking_stats, tickets_sold

router = APIRouter()


async def _get_event(db: AsyncSession, event_id: UUID) -> Event:
    event = await db.get(Event, event_id)
    if event is None:
        raise NotFoundError("Event", str(event_id))
    return event


def _assert_event_owner(event: Event, user: User) -> None:
    if user.role != "admin" and event.organizer_id != user.id:
        raise AuthorizationError("Only the event organizer can manage this event")


@router.get("", response_model=EventListResponse)
async def list_events(
    db: DbSession,
    event_type: Annotated[str | None, Query(alias="eventType")] = None,
    upcoming: bool = False,
) -> dict:
    """List public, published events ordered by start date."""
    query = select(Event).where(Event.is_public.is_(True), Event.status == "published")
    if event_type:
        query = query.where(Event.event_type == event_type)
    if upcoming:
        query = query.where(Event.start_date >= date.today())

    result = await db.execute(query.order_by(Event.start_date))
    events = list(result.scalars().all())
    return {"events": events, "total": len(events)}


@router.get("/mine", response_model=EventListResponse)
async def list_my_events(
    db: DbSession,
    current_user: Annotated[User, Depends(require_organizer)],
) -> dict:
    """The caller's own events in every status, newest first."""
    result = await db.execute(
        select(Event).where(Event.organizer_id == current_user.id).order_by(Event.created_at.desc())
    )
    events = list(result.scalars().all())
    return {"events": events, "total": len(events)}


@router.get("/dashboard", response_model=OrganizerDashboardResponse)
async def organizer_dashboard(
    db: DbSession,
    current_user: Annotated[User, Depends(require_organizer)],
) -> dict:
    """Tickets and revenue across the caller's events."""
    result = await db.execute(select(Event).where(Event.organizer_id == current_user.id))
    events = list(result.scalars().all())

    bookings_by_event: dict[UUID, list[EventBooking]] = {event.id: [] for event in events}
    if events:
        result = await db.execute(
            select(EventBooking).where(EventBooking.event_id.in_(bookings_by_event))
        )
        for booking in result.scalars():
            bookings_by_event[booking.event_id].append(booking)

    performance = [
        {
            "event_id": event.id,
            "title": event.title,
            "status": event.status,
            "tickets_sold": tickets_sold(bookings_by_event[event.id]),
            "revenue": event_booking_stats(bookings_by_event[event.id])["total_revenue"],
        }
        for event in events
    ]
    performance.sort(key=lambda row: (row["revenue"], row["tickets_sold"]), reverse=True)

    return {
        "stats": {
            "total_events": len(events),
            "active_events": sum(1 for event in events if event.status == "published"),
            "total_revenue": sum(row["revenue"] for row in performance),
            "total_tickets_sold": sum(row["tickets_sold"] for row in performance),
        },
        "events": performance,
    }


@router.get("/{event_id}", response_model=EventResponse)
async def get_event(event_id: UUID, db: DbSession) -> Event:
    """Get one event."""
    return await _get_event(db, event_id)


@router.post("", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event(
    data: EventCreate,
    db: DbSession,
    current_user: Annotated[User, Depends(require_organizer)],
) -> Event:
    """Create an event (organizers and admins)."""
    event = Event(organizer_id=current_user.id, **data.model_dump())
    db.add(event)
    await db.flush()
    return event


@router.put("/{event_id}", response_model=EventResponse)
async def update_event(
    event_id: UUID,
    data: EventUpdate,
    db: DbSession,
    current_user: CurrentUser,
) -> Event:
    """Update an event (its organizer or an admin)."""
    event = await _get_event(db, event_id)
    _assert_event_owner(event, current_user)

    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(event, field, value)

    if event.end_date < event.start_date:
        raise ValidationError("endDate cannot be before startDate")

    await db.flush()
    return event


@router.get("/{event_id}/bookings", response_model=EventBookingReport)
async def list_event_registrations(
    event_id: UUID,
    db: DbSession,
    current_user: CurrentUser,
    status_filter: BookingStatusFilter = None,
) -> dict:
    """Who registered for an event (its organizer or an admin)."""
    event = await _get_event(db, event_id)
    _assert_event_owner(event, current_user)

    query = select(EventBooking).where(EventBooking.event_id == event.id)
    if status_filter:
        query = query.where(EventBooking.status == status_filter)
    result = await db.execute(query.order_by(EventBooking.created_at.desc()))
    bookings = list(result.scalars().all())

    return {"bookings": bookings, "total": len(bookings), "stats": event_booking_stats(bookings)}
