"""Admin panel schemas."""

from datetime import datetime
from typing import Any
from uuid import UUID

from campus.schemas.common import CamelResponse
from campus.schemas.event import EventBookingResponse
from campus.schemas.venue import VenueBookingRequestResponse


class AdminBookingEnvelope(CamelResponse):
    """A venue request or an event booking after an admin action."""

    success: bool = True
    message: str | None = None
    booking: VenueBookingRequestResponse | EventBookingResponse


class AuditLogResponse(CamelResponse):
    id: UUID
    user_id: UUID | None
    action: str
    resource_type: str
    resource_id: UUID | None
    old_values: dict[str, Any] | None
    new_values: dict[str, Any] | None
    created_at: datetime


class AuditLogListResponse(CamelResponse):
    logs: list[AuditLogResponse]
    total: int
    page: int
    page_size: int
