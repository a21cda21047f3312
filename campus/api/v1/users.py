"""User endpoints."""

from fastapi import APIRouter, status

from campus.api.deps import CurrentUser, DbSession
from campus.models.user import User
from campus.schemas.role_request import RoleRequestCreate, RoleRequestResponse
from campus.schemas.user import UserResponse
from campus.services.role_request_service import role_request_service

router = APIRouter()


@router.get("/me", response_model=UserResponse)
async def get_my_profile(current_user: CurrentUser) -> User:
    """Get current user's profile."""
    return current_user


@router.post(
    "/me/role-request",
    response_model=RoleRequestResponse,
    status_code=status.HTTP_201_CREATED,
)
async def request_role_upgrade(
    data: RoleRequestCreate,
    current_user: CurrentUser,
    db: DbSession,
) -> User:
    """Ask an admin to upgrade the caller's role to organizer."""
    return await role_request_service.submit(
        db,
        current_user,
        requested_role=data.requested_role,
        organization_name=data.organization_name,
    )


@router.get("/me/role-request", response_model=RoleRequestResponse)
async def get_my_role_request(current_user: CurrentUser) -> User:
    """Status of the caller's latest role request."""
    return current_user
