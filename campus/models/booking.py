"""Booking-related database models.

Venue requests and event bookings share one ``bookings`` table
(single-table inheritance on ``kind``) so that both go through the same
lifecycle, version counter and status history.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime

from sqlalchemy import (
    DateTime,
    Date,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from campus.database import Base
from campus.utils.validators import utcnow

VENUE_SLOT_PREDICATE = text(
    "kind = 'venue' AND status IN ('approved', 'payment_pending', 'completed')"
)
EVENT_SEAT_PREDICATE = text(
    "kind = 'event' AND status IN ('pending', 'approved', 'payment_pending', 'completed')"
)


class BookingRequest(Base):
    """Common columns of every booking."""

    __tablename__ = "bookings"
    __table_args__ = (
        Index(
            "uq_bookings_venue_slot",
            "venue_id",
            "event_date",
            unique=True,
            postgresql_where=VENUE_SLOT_PREDICATE,
            sqlite_where=VENUE_SLOT_PREDICATE,
        ),
        Index(
            "uq_bookings_event_requester",
            "event_id",
            "requester_id",
            unique=True,
            postgresql_where=EVENT_SEAT_PREDICATE,
            sqlite_where=EVENT_SEAT_PREDICATE,
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    booking_number: Mapped[str] = mapped_column(
        String(20), unique=True, nullable=False, index=True
    )  # VNU-XXXXXX / EVT-YYYY-XXXXXX
    kind: Mapped[str] = mapped_column(String(10), nullable=False, index=True)  # venue, event

    # Exactly one of these is set, depending on kind
    venue_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("venues.id"), index=True
    )
    event_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("events.id"), index=True
    )

    requester_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False, index=True
    )
    requester_role: Mapped[str] = mapped_column(String(20), nullable=False)
    event_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    special_requirements: Mapped[str | None] = mapped_column(Text)

    # Lifecycle
    status: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text)
    decided_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id"))
    decided_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    cancellation_reason: Mapped[str | None] = mapped_column(Text)
    cancelled_by: Mapped[str | None] = mapped_column(String(20))  # requester, admin
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Money (paise)
    amount: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="INR")
    payment_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending", index=True
    )  # pending, paid, failed, refunded
    payment_method: Mapped[str] = mapped_column(
        String(20), nullable=False, default="online"
    )  # online, offline
    razorpay_order_id: Mapped[str | None] = mapped_column(String(100), index=True)
    razorpay_payment_id: Mapped[str | None] = mapped_column(String(100))
    razorpay_signature: Mapped[str | None] = mapped_column(String(255))
    razorpay_refund_id: Mapped[str | None] = mapped_column(String(100))
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow
    )

    status_history: Mapped[list["BookingStatusHistory"]] = relationship(
        "BookingStatusHistory",
        order_by="BookingStatusHistory.sequence",
        lazy="selectin",
        cascade="save-update, merge",
        passive_deletes=True,
    )

    # Base-class queries return subclass rows with all their columns loaded
    __mapper_args__ = {
        "polymorphic_on": "kind",
        "with_polymorphic": "*",
        "version_id_col": version,
    }


class VenueBookingRequest(BookingRequest):
    """Request to reserve a venue for one day."""

    event_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    event_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    event_start_time: Mapped[str | None] = mapped_column(String(5), nullable=True)
    event_end_time: Mapped[str | None] = mapped_column(String(5), nullable=True)
    expected_attendees: Mapped[int | None] = mapped_column(Integer, nullable=True)
    purpose: Mapped[str | None] = mapped_column(Text, nullable=True)
    organizer_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    organizer_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    organizer_phone: Mapped[str | None] = mapped_column(String(20), nullable=True)

    __mapper_args__ = {"polymorphic_identity": "venue"}

    @property
    def rent_amount(self) -> int:
        return self.amount


class EventBooking(BookingRequest):
    """Registration of one or more attendees for an event."""

    attendee_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    attendee_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    attendee_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    attendee_phone: Mapped[str | None] = mapped_column(String(20), nullable=True)

    __mapper_args__ = {"polymorphic_identity": "event"}

    @property
    def total_amount(self) -> int:
        return self.amount


class BookingStatusHistory(Base):
    """Append-only log of accepted booking transitions."""

    __tablename__ = "booking_status_history"
    __table_args__ = (
        UniqueConstraint("booking_id", "sequence", name="uq_booking_status_history_sequence"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    booking_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    note: Mapped[str | None] = mapped_column(Text)
    actor_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id"))
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )
