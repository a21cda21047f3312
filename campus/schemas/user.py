"""Account, login and token schemas."""

import re
from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import EmailStr, Field, field_validator

from campus.schemas.common import CamelRequest, CamelResponse
from campus.utils.validators import normalize_phone, validate_indian_phone

PASSWORD_RULES = (
    (r"[A-Z]", "an uppercase letter"),
    (r"[a-z]", "a lowercase letter"),
    (r"\d", "a digit"),
)


class UserCreate(CamelRequest):
    """Self-registration. Admins are only created by ``scripts/create_admin.py``."""

    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    role: Literal["student", "teacher", "participant"] = "participant"
    phone: str | None = None
    organization_name: str | None = Field(None, max_length=200)

    @field_validator("password")
    @classmethod
    def password_strength(cls, v: str) -> str:
        missing = [label for pattern, label in PASSWORD_RULES if not re.search(pattern, v)]
        if missing:
            raise ValueError(f"Password must contain {', '.join(missing)}")
        return v

    @field_validator("phone")
    @classmethod
    def indian_mobile(cls, v: str | None) -> str | None:
        if v is not None and not validate_indian_phone(v):
            raise ValueError("Phone must be a valid Indian mobile number")
        return normalize_phone(v) if v else v


class UserLogin(CamelRequest):
    email: EmailStr
    password: str


class UserResponse(CamelResponse):
    id: UUID
    name: str
    email: str
    role: str
    phone: str | None
    organization_name: str | None
    is_active: bool
    role_request_status: str
    requested_role: str | None
    role_rejection_reason: str | None
    created_at: datetime


class TokenResponse(CamelResponse):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: UserResponse


class RefreshTokenRequest(CamelRequest):
    refresh_token: str
