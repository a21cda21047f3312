"""Payment service for venue rent and event booking payments.

Order creation, checkout signature verification and webhook handling on top
of the Razorpay adapter. State changes go through the booking service.
"""

import logging
from typing import Any, NoReturn

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from campus.config import settings
from campus.core.exceptions import (
    AuthorizationError,
    ConflictError,
    ExternalServiceError,
    PaymentGatewayError,
    PaymentVerificationError,
    ValidationError,
)
from campus.domain import booking_state
from campus.domain.payment_state import (
    PAYMENT_FAILED,
    PAYMENT_PAID,
    PAYMENT_PENDING,
    assert_payment_transition,
)
from campus.gateways.base import GatewayType
from campus.models.booking import BookingRequest
from campus.models.user import User
from campus.services.booking_service import booking_service
from campus.services.gateway_service import gateway_service
from campus.utils.validators import utcnow

logger = logging.getLogger(__name__)

WEBHOOK_CAPTURED = "payment.captured"
WEBHOOK_FAILED = "payment.failed"


class PaymentService:
    """Razorpay payment flow for bookings."""

    def _assert_requester(self, booking: BookingRequest, user: User) -> None:
        if booking.requester_id != user.id:
            raise AuthorizationError("Only the requester can pay for this booking")

    def _assert_razorpay_configured(self) -> None:
        if not gateway_service.razorpay.is_configured:
            raise ExternalServiceError("razorpay", "payment gateway is not configured")

    async def create_order(
        self,
        db: AsyncSession,
        booking: BookingRequest,
        user: User,
    ) -> dict[str, Any]:
        """Create a Razorpay order for the amount due on ``booking``.

        Raises:
            AuthorizationError: Caller is not the requester
            ConflictError: Booking already paid or not awaiting payment
            PaymentGatewayError: Razorpay rejected or could not be reached
        """
        self._assert_requester(booking, user)
        self._assert_razorpay_configured()

        if booking.payment_status == PAYMENT_PAID:
            raise ConflictError("Payment for this booking is already completed")
        if booking.status != booking_state.PAYMENT_PENDING:
            raise ConflictError(f"Payment is not due for a booking that is {booking.status}")
        if booking.payment_method != "online":
            raise ValidationError("Offline bookings are paid at the campus accounts office")

        result = await gateway_service.create_order(
            GatewayType.RAZORPAY,
            amount=booking.amount,
            currency=booking.currency,
            receipt=booking.booking_number,
            notes={"booking_id": str(booking.id), "kind": booking.kind},
        )
        if not result.ok:
            raise PaymentGatewayError(result.reason or "Failed to create payment order")

        if booking.payment_status == PAYMENT_FAILED:
            assert_payment_transition(PAYMENT_FAILED, PAYMENT_PENDING)
            booking.payment_status = PAYMENT_PENDING
        booking.razorpay_order_id = result.reference
        booking.updated_at = utcnow()
        await booking_service.flush(db)

        logger.info(
            f"Razorpay order {result.reference} created for booking "
            f"{booking.booking_number} amount={booking.amount}"
        )
        return {
            "id": result.reference,
            "amount": booking.amount,
            "currency": booking.currency,
            "key_id": settings.razorpay_key_id,
            "receipt": booking.booking_number,
        }

    async def verify_payment(
        self,
        db: AsyncSession,
        booking: BookingRequest,
        user: User,
        *,
        order_id: str,
        payment_id: str,
        signature: str,
    ) -> bool:
        """Verify a checkout response and complete the booking.

        Returns:
            bool: False when the same payment was already verified (no-op)

        Raises:
            AuthorizationError: Caller is not the requester
            ConflictError: Booking already paid with another payment, not
                awaiting payment, or its current order already failed
            PaymentVerificationError: Signature, order or charge mismatch;
                the failure is committed before raising
            PaymentGatewayError: Razorpay could not confirm the charge
        """
        self._assert_requester(booking, user)
        self._assert_razorpay_configured()

        if booking.payment_status == PAYMENT_PAID:
            if (
                order_id == booking.razorpay_order_id
                and payment_id == booking.razorpay_payment_id
            ):
                logger.info(
                    f"Payment {payment_id} for booking {booking.booking_number} already verified"
                )
                return False
            raise ConflictError("Payment for this booking is already completed")

        if booking.status != booking_state.PAYMENT_PENDING:
            raise ConflictError(f"Payment is not due for a booking that is {booking.status}")
        if booking.payment_status == PAYMENT_FAILED:
            raise ConflictError("Payment for this order failed, create a new payment order")

        if not booking.razorpay_order_id or order_id != booking.razorpay_order_id:
            await self._fail(db, booking, user, "order does not match this booking")

        if not gateway_service.razorpay.verify_signature(order_id, payment_id, signature):
            await self._fail(db, booking, user, "invalid payment signature")

        result = await gateway_service.fetch_payment(GatewayType.RAZORPAY, payment_id)
        if result.unreachable:
            raise PaymentGatewayError(result.reason or "Could not confirm payment")
        if not result.ok:
            await self._fail(db, booking, user, result.reason or "payment was not captured")

        charge = result.entity
        if charge.get("order_id") not in (None, order_id):
            await self._fail(db, booking, user, "payment belongs to a different order")
        if charge.get("amount") not in (None, booking.amount):
            await self._fail(db, booking, user, "paid amount does not match amount due")

        booking.razorpay_payment_id = payment_id
        booking.razorpay_signature = signature
        await booking_service.transition(
            db,
            booking,
            booking_state.MARK_PAID,
            actor=user,
            note=f"Payment {payment_id} verified",
        )
        return True

    async def _fail(
        self,
        db: AsyncSession,
        booking: BookingRequest,
        user: User | None,
        reason: str,
    ) -> NoReturn:
        """Record a failed attempt, commit it, and reject the request."""
        logger.warning(
            f"Payment verification failed for booking {booking.booking_number}: {reason}"
        )
        await booking_service.transition(
            db,
            booking,
            booking_state.PAYMENT_FAILED_ACTION,
            actor=user,
            reason=reason,
        )
        await db.commit()
        raise PaymentVerificationError(f"Payment verification failed: {reason}")

    async def handle_webhook(
        self,
        db: AsyncSession,
        payload: bytes,
        signature: str | None,
    ) -> str:
        """Apply a Razorpay webhook event.

        Re-deliveries of an event that was already applied are no-ops.

        Returns:
            str: processed, already_processed or ignored
        """
        if not gateway_service.razorpay.webhook_secret:
            raise ExternalServiceError("razorpay", "webhook secret is not configured")

        event = gateway_service.parse_webhook(GatewayType.RAZORPAY, payload, signature or "")
        if event is None:
            logger.warning("Rejected Razorpay webhook with invalid signature")
            raise PaymentVerificationError("Invalid webhook signature")

        event_type = event.get("event")
        entity = ((event.get("payload") or {}).get("payment") or {}).get("entity") or {}
        order_id = entity.get("order_id")
        payment_id = entity.get("id")

        if event_type not in (WEBHOOK_CAPTURED, WEBHOOK_FAILED) or not order_id:
            logger.info(f"Ignoring Razorpay webhook {event_type}")
            return "ignored"

        result = await db.execute(
            select(BookingRequest).where(BookingRequest.razorpay_order_id == order_id)
        )
        booking = result.scalar_one_or_none()
        if booking is None:
            logger.warning(f"Razorpay webhook {event_type} for unknown order {order_id}")
            return "ignored"

        if event_type == WEBHOOK_CAPTURED:
            if booking.payment_status == PAYMENT_PAID:
                return "already_processed"
            if booking.status != booking_state.PAYMENT_PENDING:
                logger.warning(
                    f"Captured payment {payment_id} for booking {booking.booking_number} "
                    f"in status {booking.status}"
                )
                return "ignored"
            captured = entity.get("amount")
            if captured is not None and captured != booking.amount:
                logger.error(
                    f"Captured payment {payment_id} of {captured} does not match {booking.amount} "
                    f"due on booking {booking.booking_number}, leaving it unpaid"
                )
                return "ignored"
            booking.razorpay_payment_id = payment_id
            await booking_service.transition(
                db,
                booking,
                booking_state.MARK_PAID,
                actor=None,
                note=f"Payment {payment_id} captured",
            )
            return "processed"

        if (
            booking.status != booking_state.PAYMENT_PENDING
            or booking.payment_status in (PAYMENT_FAILED, PAYMENT_PAID)
        ):
            return "already_processed"
        await booking_service.transition(
            db,
            booking,
            booking_state.PAYMENT_FAILED_ACTION,
            actor=None,
            reason=entity.get("error_description") or "payment failed at gateway",
        )
        return "processed"


payment_service = PaymentService()
