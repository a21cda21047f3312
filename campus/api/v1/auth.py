"""Authentication endpoints."""

from fastapi import APIRouter, Depends, status
from sqlalchemy import select

from campus.api.deps import CurrentUser, DbSession, user_from_token
from campus.core.exceptions import AuthenticationError, ConflictError
from campus.core.middleware import login_limiter, register_limiter
from campus.core.security import REFRESH, create_tokens, get_password_hash, verify_password
from campus.models.user import User
from campus.schemas.user import (
    RefreshTokenRequest,
    TokenResponse,
    UserCreate,
    UserLogin,
    UserResponse,
)
from campus.utils.validators import utcnow

router = APIRouter()


def _token_response(user: User) -> TokenResponse:
    tokens = create_tokens(user)
    return TokenResponse(**tokens, user=UserResponse.model_validate(user))


@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(register_limiter)],
)
async def register(
    user_data: UserCreate,
    db: DbSession,
) -> TokenResponse:
    """Register a new user account."""
    email = user_data.email.lower()
    result = await db.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none():
        raise ConflictError("Email already registered")

    user = User(
        name=user_data.name,
        email=email,
        phone=user_data.phone,
        password_hash=get_password_hash(user_data.password),
        role=user_data.role,
        organization_name=user_data.organization_name,
    )
    db.add(user)
    await db.flush()

    return _token_response(user)


@router.post("/login", response_model=TokenResponse, dependencies=[Depends(login_limiter)])
async def login(
    credentials: UserLogin,
    db: DbSession,
) -> TokenResponse:
    """Login with email and password."""
    result = await db.execute(select(User).where(User.email == credentials.email.lower()))
    user = result.scalar_one_or_none()

    if not user or not verify_password(credentials.password, user.password_hash):
        raise AuthenticationError("Invalid email or password")

    if not user.is_active:
        raise AuthenticationError("Account is deactivated")

    user.last_login_at = utcnow()
    await db.flush()

    return _token_response(user)


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(
    request: RefreshTokenRequest,
    db: DbSession,
) -> TokenResponse:
    """Refresh access token using refresh token."""
    user = await user_from_token(db, request.refresh_token, REFRESH)
    return _token_response(user)


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: CurrentUser) -> User:
    """Get the authenticated user's profile."""
    return current_user
