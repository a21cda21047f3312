"""Password hashing and JWT issue/decode."""

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from campus.config import settings
from campus.core.exceptions import AuthenticationError

if TYPE_CHECKING:
    from campus.models.user import User

ACCESS = "access"
REFRESH = "refresh"

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def _lifetime(token_type: str) -> timedelta:
    if token_type == REFRESH:
        return timedelta(days=settings.refresh_token_expire_days)
    return timedelta(minutes=settings.access_token_expire_minutes)


def create_token(claims: dict[str, Any], token_type: str = ACCESS) -> str:
    """Sign ``claims`` with the configured secret, stamping ``exp`` and ``type``."""
    body = {**claims, "type": token_type, "exp": datetime.now(UTC) + _lifetime(token_type)}
    return jwt.encode(body, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def verify_token(token: str, token_type: str = ACCESS) -> dict[str, Any]:
    """Decode a token and check it is of ``token_type``.

    Raises:
        AuthenticationError: Bad signature, expired, or the wrong kind of token
    """
    try:
        claims = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        raise AuthenticationError(f"Token validation failed: {e}")

    if claims.get("type") != token_type:
        raise AuthenticationError("Invalid token type")
    return claims


def create_tokens(user: "User") -> dict[str, str]:
    """Access and refresh pair carrying the user's id, email and role."""
    claims = {"id": str(user.id), "email": user.email, "role": user.role}
    return {
        "access_token": create_token(claims, ACCESS),
        "refresh_token": create_token(claims, REFRESH),
        "token_type": "bearer",
    }
