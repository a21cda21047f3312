"""Errors, security helpers and cross-cutting plumbing."""

from campus.core.exceptions import (
    AppException,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    PaymentGatewayError,
    PaymentVerificationError,
    ValidationError,
)
from campus.core.security import create_tokens, get_password_hash, verify_password, verify_token

__all__ = [
    "AppException",
    "AuthenticationError",
    "AuthorizationError",
    "ConflictError",
    "NotFoundError",
    "PaymentGatewayError",
    "PaymentVerificationError",
    "ValidationError",
    "create_tokens",
    "get_password_hash",
    "verify_password",
    "verify_token",
]
