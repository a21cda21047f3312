"""Payment-related Pydantic schemas.

Razorpay checkout posts its fields back in snake_case, so the verification
bodies keep those names and only the booking reference is camelCase.
"""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from campus.schemas.common import CamelResponse
from campus.schemas.event import EventBookingResponse
from campus.schemas.venue import VenueBookingRequestResponse


class _PaymentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid", str_strip_whitespace=True)


class VenueRentOrderCreate(_PaymentRequest):
    booking_request_id: UUID = Field(..., alias="bookingRequestId")


class EventBookingOrderCreate(_PaymentRequest):
    booking_id: UUID = Field(..., alias="bookingId")


class _PaymentVerification(_PaymentRequest):
    razorpay_order_id: str = Field(..., min_length=1, max_length=100)
    razorpay_payment_id: str = Field(..., min_length=1, max_length=100)
    razorpay_signature: str = Field(..., min_length=1, max_length=255)


class VenueRentVerification(_PaymentVerification):
    booking_request_id: UUID = Field(..., alias="bookingRequestId")


class EventBookingVerification(_PaymentVerification):
    booking_id: UUID = Field(..., alias="bookingId")


class PaymentOrder(CamelResponse):
    """Order details the client hands to Razorpay checkout."""

    id: str
    amount: int
    currency: str
    key_id: str | None
    receipt: str


class PaymentOrderResponse(CamelResponse):
    success: bool = True
    order: PaymentOrder


class VenueRentPaymentResponse(CamelResponse):
    success: bool = True
    message: str
    booking_request: VenueBookingRequestResponse


class EventBookingPaymentResponse(CamelResponse):
    success: bool = True
    message: str
    booking: EventBookingResponse
