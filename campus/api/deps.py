"""API dependencies for authentication and common operations."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from campus.core.exceptions import AuthenticationError, AuthorizationError
from campus.core.security import ACCESS, verify_token
from campus.database import get_db
from campus.domain.booking_state import BOOKING_STATUSES
from campus.models.user import User

# Missing credentials are reported as 401 by get_current_user
security = HTTPBearer(auto_error=False)

DbSession = Annotated[AsyncSession, Depends(get_db)]


async def user_from_token(db: AsyncSession, token: str, token_type: str = ACCESS) -> User:
    """Resolve a JWT to an active user. Role always comes from the database.

    Raises:
        AuthenticationError: Invalid token or unknown or deactivated user
    """
    claims = verify_token(token, token_type)
    try:
        user_id = UUID(str(claims.get("id")))
    except ValueError:
        raise AuthenticationError("Invalid token payload")

    user = await db.get(User, user_id)
    if user is None:
        raise AuthenticationError("User not found")
    if not user.is_active:
        raise AuthenticationError("User account is deactivated")
    return user


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: DbSession,
) -> User:
    if credentials is None:
        raise AuthenticationError("Authentication required")
    return await user_from_token(db, credentials.credentials)


async def get_current_admin(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Get current user and verify they are an admin."""
    if current_user.role != "admin":
        raise AuthorizationError("Admin access required")
    return current_user


class RoleChecker:
    """Allow only users holding one of ``roles``."""

    def __init__(self, *roles: str, detail: str | None = None):
        self.roles = roles
        self.detail = detail or f"Requires one of the roles: {', '.join(roles)}"

    async def __call__(
        self,
        current_user: Annotated[User, Depends(get_current_user)],
    ) -> User:
        if current_user.role not in self.roles:
            raise AuthorizationError(self.detail)
        return current_user


CurrentUser = Annotated[User, Depends(get_current_user)]
CurrentAdmin = Annotated[User, Depends(get_current_admin)]

require_organizer = RoleChecker("organizer", "admin", detail="Organizer access required")

BookingStatusFilter = Annotated[
    str | None, Query(alias="status", pattern=f"^({'|'.join(BOOKING_STATUSES)})$")
]
