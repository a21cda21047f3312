"""Initial database schema.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18

Creates all initial tables for the Festo campus platform:
- Users, with the embedded role upgrade request
- Venues and events
- Bookings (venue requests and event bookings) and their status history
- Audit logs
"""

from typing import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers
revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

VENUE_SLOT_PREDICATE = sa.text(
    "kind = 'venue' AND status IN ('approved', 'payment_pending', 'completed')"
)
EVENT_SEAT_PREDICATE = sa.text(
    "kind = 'event' AND status IN ('pending', 'approved', 'payment_pending', 'completed')"
)


def upgrade() -> None:
    """Create all database tables."""

    # ==================== USERS ====================
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), unique=True, nullable=False, index=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="participant"),
        sa.Column("phone", sa.String(20)),
        sa.Column("organization_name", sa.String(200)),
        sa.Column("is_active", sa.Boolean, server_default=sa.true()),
        sa.Column("role_request_status", sa.String(20), nullable=False, server_default="none"),
        sa.Column("requested_role", sa.String(20)),
        sa.Column("role_rejection_reason", sa.Text),
        sa.Column("role_requested_at", sa.DateTime(timezone=True)),
        sa.Column("role_decided_at", sa.DateTime(timezone=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("last_login_at", sa.DateTime(timezone=True)),
    )

    # ==================== VENUES ====================
    op.create_table(
        "venues",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False, index=True),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("capacity", sa.Integer, nullable=False),
        sa.Column("location", sa.String(200), nullable=False),
        sa.Column("address", sa.Text),
        sa.Column("amenities", sa.JSON),
        sa.Column("rules", sa.JSON),
        sa.Column("rent_price", sa.Integer, nullable=False, server_default="0"),
        sa.Column("price_type", sa.String(20), server_default="per_day"),
        sa.Column("status", sa.String(20), nullable=False, server_default="active", index=True),
        sa.Column("contact_person_name", sa.String(100)),
        sa.Column("contact_person_phone", sa.String(20)),
        sa.Column("contact_person_email", sa.String(255)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("capacity > 0", name="ck_venues_capacity_positive"),
        sa.CheckConstraint("rent_price >= 0", name="ck_venues_rent_non_negative"),
    )

    # ==================== EVENTS ====================
    op.create_table(
        "events",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False, index=True),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("event_type", sa.String(20), nullable=False),
        sa.Column("start_date", sa.Date, nullable=False, index=True),
        sa.Column("end_date", sa.Date, nullable=False),
        sa.Column("start_time", sa.String(5), nullable=False),
        sa.Column("end_time", sa.String(5), nullable=False),
        sa.Column("venue", sa.String(200), nullable=False),
        sa.Column(
            "organizer_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id"),
            nullable=False,
            index=True,
        ),
        sa.Column("contact_email", sa.String(255)),
        sa.Column("contact_phone", sa.String(20)),
        sa.Column("max_participants", sa.Integer),
        sa.Column("registration_deadline", sa.DateTime(timezone=True)),
        sa.Column("fee", sa.Integer, nullable=False, server_default="0"),
        sa.Column("status", sa.String(20), nullable=False, server_default="published", index=True),
        sa.Column("is_public", sa.Boolean, server_default=sa.true()),
        sa.Column("tags", sa.JSON),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # ==================== BOOKINGS ====================
    op.create_table(
        "bookings",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("booking_number", sa.String(20), unique=True, nullable=False, index=True),
        sa.Column("kind", sa.String(10), nullable=False, index=True),
        sa.Column("venue_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("venues.id"), index=True),
        sa.Column("event_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("events.id"), index=True),
        sa.Column(
            "requester_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id"),
            nullable=False,
            index=True,
        ),
        sa.Column("requester_role", sa.String(20), nullable=False),
        sa.Column("event_date", sa.Date, nullable=False, index=True),
        sa.Column("special_requirements", sa.Text),
        # Lifecycle
        sa.Column("status", sa.String(20), nullable=False, index=True),
        sa.Column("rejection_reason", sa.Text),
        sa.Column("decided_by", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id")),
        sa.Column("decided_at", sa.DateTime(timezone=True)),
        sa.Column("cancellation_reason", sa.Text),
        sa.Column("cancelled_by", sa.String(20)),
        sa.Column("cancelled_at", sa.DateTime(timezone=True)),
        # Money (paise)
        sa.Column("amount", sa.Integer, nullable=False, server_default="0"),
        sa.Column("currency", sa.String(3), nullable=False, server_default="INR"),
        sa.Column("payment_status", sa.String(20), nullable=False, server_default="pending", index=True),
        sa.Column("payment_method", sa.String(20), nullable=False, server_default="online"),
        sa.Column("razorpay_order_id", sa.String(100), index=True),
        sa.Column("razorpay_payment_id", sa.String(100)),
        sa.Column("razorpay_signature", sa.String(255)),
        sa.Column("razorpay_refund_id", sa.String(100)),
        sa.Column("paid_at", sa.DateTime(timezone=True)),
        sa.Column("version", sa.Integer, nullable=False),
        # Venue request details
        sa.Column("event_name", sa.String(200)),
        sa.Column("event_description", sa.Text),
        sa.Column("event_start_time", sa.String(5)),
        sa.Column("event_end_time", sa.String(5)),
        sa.Column("expected_attendees", sa.Integer),
        sa.Column("purpose", sa.Text),
        sa.Column("organizer_name", sa.String(100)),
        sa.Column("organizer_email", sa.String(255)),
        sa.Column("organizer_phone", sa.String(20)),
        # Event booking details
        sa.Column("attendee_count", sa.Integer),
        sa.Column("attendee_name", sa.String(100)),
        sa.Column("attendee_email", sa.String(255)),
        sa.Column("attendee_phone", sa.String(20)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # One live booking per venue and day, one live registration per user and event
    op.create_index(
        "uq_bookings_venue_slot",
        "bookings",
        ["venue_id", "event_date"],
        unique=True,
        postgresql_where=VENUE_SLOT_PREDICATE,
    )
    op.create_index(
        "uq_bookings_event_requester",
        "bookings",
        ["event_id", "requester_id"],
        unique=True,
        postgresql_where=EVENT_SEAT_PREDICATE,
    )

    op.create_table(
        "booking_status_history",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "booking_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("bookings.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("sequence", sa.Integer, nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("note", sa.Text),
        sa.Column("actor_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id")),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("booking_id", "sequence", name="uq_booking_status_history_sequence"),
    )

    # ==================== ADMIN ====================
    op.create_table(
        "audit_logs",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id"), index=True),
        sa.Column("action", sa.String(100), nullable=False, index=True),
        sa.Column("resource_type", sa.String(50), nullable=False, index=True),
        sa.Column("resource_id", postgresql.UUID(as_uuid=True), index=True),
        sa.Column("old_values", sa.JSON),
        sa.Column("new_values", sa.JSON),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), index=True),
    )


def downgrade() -> None:
    """Drop all database tables in reverse order."""
    op.drop_table("audit_logs")
    op.drop_table("booking_status_history")
    op.drop_index("uq_bookings_event_requester", table_name="bookings")
    op.drop_index("uq_bookings_venue_slot", table_name="bookings")
    op.drop_table("bookings")
    op.drop_table("events")
    op.drop_table("venues")
    op.drop_table("users")
