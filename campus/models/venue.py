"""Venue catalog model."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import JSON, CheckConstraint, DateTime, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from campus.database import Base
from campus.utils.validators import utcnow


class Venue(Base):
    """Bookable campus venue."""

    __tablename__ = "venues"
    __table_args__ = (
        CheckConstraint("capacity > 0", name="ck_venues_capacity_positive"),
        CheckConstraint("rent_price >= 0", name="ck_venues_rent_non_negative"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    location: Mapped[str] = mapped_column(String(200), nullable=False)
    address: Mapped[str | None] = mapped_column(Text)
    amenities: Mapped[list] = mapped_column(JSON, default=list)
    rules: Mapped[list] = mapped_column(JSON, default=list)

    # Pricing (paise)
    rent_price: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    price_type: Mapped[str] = mapped_column(String(20), default="per_day")  # per_day, per_hour

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="active", index=True
    )  # active, maintenance, inactive

    # Contact
    contact_person_name: Mapped[str | None] = mapped_column(String(100))
    contact_person_phone: Mapped[str | None] = mapped_column(String(20))
    contact_person_email: Mapped[str | None] = mapped_column(String(255))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow
    )
