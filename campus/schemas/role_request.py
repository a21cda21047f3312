"""Role upgrade request schemas."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import Field

from campus.schemas.common import CamelRequest, CamelResponse


class RoleRequestCreate(CamelRequest):
    requested_role: Literal["organizer"] = "organizer"
    organization_name: str | None = Field(None, max_length=200)


class RoleRequestDecision(CamelRequest):
    """Admin decision on a pending role request."""

    user_id: UUID
    action: Literal["approve", "reject"]
    rejection_reason: str | None = Field(None, max_length=1000)


class RoleRequestResponse(CamelResponse):
    user_id: UUID = Field(validation_alias="id")
    name: str
    email: str
    role: str
    organization_name: str | None
    role_request_status: str
    requested_role: str | None
    role_rejection_reason: str | None
    role_requested_at: datetime | None
    role_decided_at: datetime | None


class RoleRequestListResponse(CamelResponse):
    requests: list[RoleRequestResponse]
    total: int
