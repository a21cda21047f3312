"""Booking service.

Creates venue requests and event bookings, and applies lifecycle actions to
them. Every status write goes through ``BookingService.transition`` so that
the precondition check, the history entry, the audit record and the
optimistic version check happen together.
"""

import logging
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from campus.config import settings
from campus.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    PaymentGatewayError,
    ValidationError,
)
from campus.domain import booking_state
from campus.domain.booking_state import (
    ACTIVE_STATUSES,
    BookingTransition,
    apply_booking_action,
    initial_status,
)
from campus.gateways.base import GatewayType
from campus.models.booking import (
    BookingRequest,
    BookingStatusHistory,
    EventBooking,
    VenueBookingRequest,
)
from campus.models.event import Event
from campus.models.user import User
from campus.models.venue import Venue
from campus.schemas.event import EventBookingCreate
from campus.schemas.venue import VenueBookingRequestCreate
from campus.services.audit_service import audit_service
from campus.services.gateway_service import gateway_service
from campus.utils.booking_number import generate_booking_number
from campus.utils.validators import as_utc, utcnow

logger = logging.getLogger(__name__)

# Event seats are held from the moment a registration exists
EVENT_HOLDING_STATUSES = (booking_state.PENDING, *ACTIVE_STATUSES)

VENUE_REQUESTER_ROLES = ("student", "teacher", "organizer", "admin")

# Registrations that count as tickets sold
CONFIRMED_STATUSES = (booking_state.APPROVED, booking_state.COMPLETED)


def event_booking_stats(bookings: list[EventBooking]) -> dict[str, int]:
    """Counts and money over a set of event bookings, in paise."""
    return {
        "total_bookings": len(bookings),
        "completed_bookings": sum(1 for b in bookings if b.status == booking_state.COMPLETED),
        "pending_payments": sum(1 for b in bookings if b.status == booking_state.PAYMENT_PENDING),
        "cancelled_bookings": sum(1 for b in bookings if b.status == booking_state.CANCELLED),
        "total_revenue": sum(b.amount for b in bookings if b.payment_status == "paid"),
        "refunded_amount": sum(b.amount for b in bookings if b.payment_status == "refunded"),
    }


def tickets_sold(bookings: list[EventBooking]) -> int:
    return sum(b.attendee_count or 1 for b in bookings if b.status in CONFIRMED_STATUSES)


class BookingService:
    """Persistence side of the booking lifecycle."""

    async def get_booking(
        self,
        db: AsyncSession,
        booking_id: UUID,
        model: type[BookingRequest] = BookingRequest,
    ) -> BookingRequest:
        """Load a booking or raise 404."""
        result = await db.execute(select(model).where(model.id == booking_id))
        booking = result.scalar_one_or_none()
        if booking is None:
            resource = "Event booking" if model is EventBooking else "Booking request"
            raise NotFoundError(resource, str(booking_id))
        return booking

    def assert_owner_or_admin(self, booking: BookingRequest, user: User) -> None:
        if user.role != "admin" and booking.requester_id != user.id:
            raise AuthorizationError("You don't have permission to access this booking")

    async def flush(self, db: AsyncSession) -> None:
        """Flush pending writes, turning lost races into 409s."""
        try:
            await db.flush()
        except StaleDataError:
            raise ConflictError("Booking was modified by another request, reload and try again")
        except IntegrityError as e:
            message = str(e.orig) if e.orig is not None else str(e)
            if "uq_bookings_venue_slot" in message or "venue_id, bookings.event_date" in message:
                raise ConflictError("Venue is already booked for this date")
            if "uq_bookings_event_requester" in message or "event_id, bookings.requester_id" in message:
                raise ConflictError("You are already registered for this event")
            if "booking_status_history" in message:
                raise ConflictError("Booking was modified by another request, reload and try again")
            raise

    def _append_history(
        self,
        booking: BookingRequest,
        status: str,
        note: str,
        actor: User | None,
    ) -> BookingStatusHistory:
        entry = BookingStatusHistory(
            sequence=len(booking.status_history) + 1,
            status=status,
            note=note,
            actor_id=actor.id if actor else None,
            timestamp=utcnow(),
        )
        booking.status_history.append(entry)
        return entry

    # ------------------------------------------------------------------
    # Conflict and capacity checks
    # ------------------------------------------------------------------

    async def check_venue_slot(
        self,
        db: AsyncSession,
        venue_id: UUID,
        event_date,
        exclude_booking_id: UUID | None = None,
    ) -> None:
        """Raise 409 if the venue already has an active booking on ``event_date``."""
        query = select(VenueBookingRequest.id).where(
            VenueBookingRequest.venue_id == venue_id,
            VenueBookingRequest.event_date == event_date,
            VenueBookingRequest.status.in_(ACTIVE_STATUSES),
        )
        if exclude_booking_id is not None:
            query = query.where(VenueBookingRequest.id != exclude_booking_id)

        result = await db.execute(query.limit(1))
        if result.scalar_one_or_none() is not None:
            raise ConflictError("Venue is already booked for this date")

    async def seats_held(self, db: AsyncSession, event_id: UUID) -> int:
        result = await db.execute(
            select(func.coalesce(func.sum(EventBooking.attendee_count), 0)).where(
                EventBooking.event_id == event_id,
                EventBooking.status.in_(ACTIVE_STATUSES),
            )
        )
        return int(result.scalar_one())

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    async def create_venue_request(
        self,
        db: AsyncSession,
        requester: User,
        data: VenueBookingRequestCreate,
    ) -> VenueBookingRequest:
        """Create a pending venue request after capacity and slot checks."""
        if requester.role not in VENUE_REQUESTER_ROLES:
            raise AuthorizationError("Only students, teachers and organizers can request venues")

        venue = await db.get(Venue, data.venue_id)
        if venue is None:
            raise NotFoundError("Venue", str(data.venue_id))
        if venue.status != "active":
            raise ValidationError("Venue is not available for booking")
        if data.expected_attendees > venue.capacity:
            raise ValidationError(
                f"Expected attendees cannot exceed venue capacity of {venue.capacity}"
            )

        await self.check_venue_slot(db, venue.id, data.event_date)

        booking = VenueBookingRequest(
            booking_number=await generate_booking_number(db, "venue"),
            venue_id=venue.id,
            requester_id=requester.id,
            requester_role=requester.role,
            status=initial_status("venue", venue.rent_price),
            amount=venue.rent_price,
            currency=settings.currency,
            payment_status="pending",
            payment_method="online",
            **data.model_dump(exclude={"venue_id"}),
        )
        self._append_history(booking, booking.status, "Booking created", requester)
        db.add(booking)
        await self.flush(db)

        logger.info(
            f"Venue request {booking.booking_number} created by {requester.id} "
            f"for venue {venue.id} on {data.event_date}"
        )
        return booking

    async def create_event_booking(
        self,
        db: AsyncSession,
        requester: User,
        data: EventBookingCreate,
    ) -> EventBooking:
        """Register for an event; paid events go straight to payment_pending."""
        event = await db.get(Event, data.event_id)
        if event is None:
            raise NotFoundError("Event", str(data.event_id))
        if event.status != "published":
            raise ValidationError("Event is not open for registration")

        deadline = as_utc(event.registration_deadline)
        if deadline is not None and utcnow() > deadline:
            raise ValidationError("Registration deadline has passed")

        existing = await db.execute(
            select(EventBooking.id).where(
                EventBooking.event_id == event.id,
                EventBooking.requester_id == requester.id,
                EventBooking.status.in_(EVENT_HOLDING_STATUSES),
            ).limit(1)
        )
        if existing.scalar_one_or_none() is not None:
            raise ConflictError("You are already registered for this event")

        if event.max_participants is not None:
            remaining = event.max_participants - await self.seats_held(db, event.id)
            if data.attendee_count > remaining:
                raise ValidationError(
                    f"Only {max(remaining, 0)} seats left for this event"
                )

        amount = event.fee * data.attendee_count
        booking = EventBooking(
            booking_number=await generate_booking_number(db, "event"),
            event_id=event.id,
            requester_id=requester.id,
            requester_role=requester.role,
            event_date=event.start_date,
            status=initial_status("event", amount),
            amount=amount,
            currency=settings.currency,
            payment_status="pending",
            **data.model_dump(exclude={"event_id"}),
        )
        self._append_history(booking, booking.status, "Booking created", requester)
        db.add(booking)
        await self.flush(db)

        logger.info(
            f"Event booking {booking.booking_number} created by {requester.id} "
            f"for event {event.id}, status={booking.status} amount={amount}"
        )
        return booking

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def transition(
        self,
        db: AsyncSession,
        booking: BookingRequest,
        action: str,
        *,
        actor: User | None,
        amount: int | None = None,
        reason: str | None = None,
        note: str | None = None,
        cancelled_by: str | None = None,
    ) -> BookingTransition:
        """Apply ``action`` to ``booking`` and persist the result.

        Raises:
            ValidationError: Missing rejection reason or negative amount
            ConflictError: Action not allowed from the current status, or
                the booking changed underneath us
            PaymentGatewayError: Refund of a paid booking failed
        """
        result = apply_booking_action(
            booking.status,
            booking.payment_status,
            action,
            amount=amount,
            reason=reason,
        )

        now = utcnow()
        booking.status = result.status
        booking.payment_status = result.payment_status
        booking.updated_at = now

        if action == booking_state.APPROVE:
            booking.amount = result.amount or 0
            booking.decided_by = actor.id if actor else None
            booking.decided_at = now
        elif action == booking_state.REJECT:
            booking.rejection_reason = reason.strip() if reason else None
            booking.decided_by = actor.id if actor else None
            booking.decided_at = now
        elif action == booking_state.CANCEL:
            booking.cancellation_reason = reason
            booking.cancelled_by = cancelled_by
            booking.cancelled_at = now
        elif action == booking_state.MARK_PAID:
            booking.paid_at = now

        self._append_history(booking, result.status, note or result.note, actor)
        await audit_service.log_booking_action(
            db,
            user_id=actor.id if actor else None,
            action=action,
            booking_id=booking.id,
            old_status=result.from_status,
            new_status=result.status,
            payment_status=result.payment_status,
            amount=booking.amount if action in (booking_state.APPROVE, booking_state.MARK_PAID) else None,
            reason=reason,
        )
        await self.flush(db)

        # Only the request whose versioned UPDATE landed sends money back.
        # A failed refund raises and the whole transition rolls back.
        if result.refund_required:
            await self._refund(booking, reason or "Booking cancelled")
            await self.flush(db)

        logger.info(
            f"Booking {booking.booking_number}: {action} {result.from_status} -> {result.status} "
            f"(payment {result.payment_status}) by {actor.id if actor else 'gateway'}"
        )
        return result

    async def _refund(self, booking: BookingRequest, reason: str) -> None:
        if booking.payment_method == "online" and booking.razorpay_payment_id:
            kind, payment_ref = GatewayType.RAZORPAY, booking.razorpay_payment_id
        else:
            kind, payment_ref = GatewayType.MANUAL, booking.booking_number

        refund = await gateway_service.refund(kind, payment_ref, booking.amount, reason)
        if not refund.ok:
            logger.error(f"Refund for booking {booking.booking_number} failed: {refund.reason}")
            raise PaymentGatewayError(f"Refund failed: {refund.reason}")

        if kind == GatewayType.RAZORPAY:
            booking.razorpay_refund_id = refund.refund_id
        logger.info(f"Refunded {booking.amount} for booking {booking.booking_number} via {kind.value}")

    async def decide_venue_request(
        self,
        db: AsyncSession,
        booking: VenueBookingRequest,
        admin: User,
        action: str,
        *,
        rejection_reason: str | None = None,
        rent_amount: int | None = None,
    ) -> BookingTransition:
        """Approve or reject a pending venue request."""
        if action == booking_state.APPROVE:
            amount = rent_amount if rent_amount is not None else booking.amount
            # Validate the action before querying for the slot
            apply_booking_action(booking.status, booking.payment_status, action, amount=amount)
            await self.check_venue_slot(
                db, booking.venue_id, booking.event_date, exclude_booking_id=booking.id
            )
            return await self.transition(db, booking, action, actor=admin, amount=amount)

        return await self.transition(db, booking, action, actor=admin, reason=rejection_reason)

    async def cancel(
        self,
        db: AsyncSession,
        booking: BookingRequest,
        actor: User,
        reason: str | None = None,
    ) -> BookingTransition:
        """Cancel a booking on behalf of its requester or an admin."""
        self.assert_owner_or_admin(booking, actor)
        cancelled_by = "requester" if booking.requester_id == actor.id else "admin"
        return await self.transition(
            db,
            booking,
            booking_state.CANCEL,
            actor=actor,
            reason=reason,
            cancelled_by=cancelled_by,
        )

    async def mark_paid_offline(
        self,
        db: AsyncSession,
        booking: BookingRequest,
        admin: User,
        note: str | None = None,
    ) -> BookingTransition:
        """Admin confirmation of a payment collected outside Razorpay."""
        booking.payment_method = "offline"
        return await self.transition(
            db,
            booking,
            booking_state.MARK_PAID,
            actor=admin,
            note=note or "Offline payment received",
        )


booking_service = BookingService()
