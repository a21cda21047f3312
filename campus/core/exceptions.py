"""Application errors.

Each class fixes its HTTP status; ``main`` renders every one of them as
``{"error": detail}``.
"""

from fastapi import HTTPException, status


class AppException(HTTPException):
    """Base for errors that carry their own status code and message."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "An unexpected error occurred"
    headers: dict[str, str] | None = None

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(
            status_code=type(self).status_code,
            detail=detail or self.message,
            headers=type(self).headers,
        )


class ValidationError(AppException):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Validation failed"


class PaymentVerificationError(AppException):
    """Checkout or webhook signature did not match, or the charge is wrong."""

    status_code = status.HTTP_400_BAD_REQUEST
    message = "Payment verification failed"


class AuthenticationError(AppException):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Authentication failed"
    headers = {"WWW-Authenticate": "Bearer"}


class AuthorizationError(AppException):
    status_code = status.HTTP_403_FORBIDDEN
    message = "You don't have permission to access this resource"


class NotFoundError(AppException):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str = "Resource", identifier: str | None = None) -> None:
        if identifier:
            super().__init__(f"{resource} with ID '{identifier}' not found")
        else:
            super().__init__(f"{resource} not found")


class ConflictError(AppException):
    """Booking, payment or role request is in the wrong state for the action."""

    status_code = status.HTTP_409_CONFLICT
    message = "The request conflicts with the current state of the resource"


class RateLimitExceeded(AppException):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    message = "Too many requests. Please try again later."


class ExternalServiceError(AppException):
    """A dependency such as Razorpay is missing or misconfigured."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, service: str, detail: str | None = None) -> None:
        self.service = service
        message = f"External service '{service}' is unavailable"
        super().__init__(f"{message}: {detail}" if detail else message)


class PaymentGatewayError(ExternalServiceError):
    """Razorpay answered with an error or did not answer at all."""

    status_code = status.HTTP_502_BAD_GATEWAY

    def __init__(self, detail: str | None = None, gateway: str = "razorpay") -> None:
        super().__init__(gateway, detail)
