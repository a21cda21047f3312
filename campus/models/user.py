"""User-related database models."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from campus.database import Base
from campus.utils.validators import utcnow


class User(Base):
    """User account model, including the embedded role upgrade request."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default="participant"
    )  # student, teacher, participant, organizer, admin
    phone: Mapped[str | None] = mapped_column(String(20))
    organization_name: Mapped[str | None] = mapped_column(String(200))

    # Status
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    # Role upgrade request
    role_request_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="none"
    )  # none, pending, approved, rejected
    requested_role: Mapped[str | None] = mapped_column(String(20))
    role_rejection_reason: Mapped[str | None] = mapped_column(Text)
    role_requested_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    role_decided_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow
    )
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role})>"
