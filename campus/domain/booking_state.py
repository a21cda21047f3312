"""Booking state machine shared by venue requests and event bookings.

``apply_booking_action`` is pure: it takes the current status and returns the
new status, payment status and history note, or raises without touching
anything. Persisting the result is the service layer's job.
"""

from dataclasses import dataclass

from campus.core.exceptions import ValidationError
from campus.domain.lifecycle import Lifecycle
from campus.domain.payment_state import (
    PAYMENT_FAILED,
    PAYMENT_PAID,
    PAYMENT_REFUNDED,
    assert_payment_transition,
)

PENDING = "pending"
APPROVED = "approved"
PAYMENT_PENDING = "payment_pending"
COMPLETED = "completed"
REJECTED = "rejected"
CANCELLED = "cancelled"

APPROVE = "approve"
REJECT = "reject"
CANCEL = "cancel"
MARK_PAID = "mark_paid"
PAYMENT_FAILED_ACTION = "payment_failed"

BOOKING_STATUSES = (PENDING, APPROVED, PAYMENT_PENDING, COMPLETED, REJECTED, CANCELLED)

# Statuses that hold a venue slot or an event seat
ACTIVE_STATUSES = (APPROVED, PAYMENT_PENDING, COMPLETED)

BOOKING_LIFECYCLE = Lifecycle(
    name="booking",
    transitions={
        PENDING: {
            APPROVE: frozenset({APPROVED, PAYMENT_PENDING}),
            REJECT: frozenset({REJECTED}),
            CANCEL: frozenset({CANCELLED}),
        },
        APPROVED: {
            CANCEL: frozenset({CANCELLED}),
        },
        PAYMENT_PENDING: {
            MARK_PAID: frozenset({COMPLETED}),
            PAYMENT_FAILED_ACTION: frozenset({PAYMENT_PENDING}),
            CANCEL: frozenset({CANCELLED}),
        },
        COMPLETED: {
            CANCEL: frozenset({CANCELLED}),
        },
        REJECTED: {},
        CANCELLED: {},
    },
)


@dataclass(frozen=True)
class BookingTransition:
    """Outcome of an accepted booking action."""

    action: str
    from_status: str
    status: str
    payment_status: str
    note: str
    amount: int | None = None
    refund_required: bool = False


def initial_status(kind: str, amount: int) -> str:
    """Status a freshly created booking starts in.

    Venue requests wait for an admin. Event bookings skip approval and go
    straight to payment when there is something to pay.
    """
    if kind == "venue":
        return PENDING
    return PAYMENT_PENDING if amount > 0 else APPROVED


def apply_booking_action(
    status: str,
    payment_status: str,
    action: str,
    *,
    amount: int | None = None,
    reason: str | None = None,
) -> BookingTransition:
    """Compute the result of ``action`` on a booking.

    Args:
        status: Current booking status
        payment_status: Current payment status
        action: One of approve, reject, cancel, mark_paid, payment_failed
        amount: Amount due on approval, in paise
        reason: Rejection, cancellation or failure reason

    Raises:
        ValidationError: Rejection without a reason, or a negative amount
        ConflictError: Action not allowed from ``status``
    """
    reason = reason.strip() if reason else None

    if action == REJECT and not reason:
        raise ValidationError("Rejection reason is required")
    if amount is not None and amount < 0:
        raise ValidationError("Amount cannot be negative")

    BOOKING_LIFECYCLE.targets(status, action)

    if action == APPROVE:
        due = amount or 0
        if due == 0:
            target, note = APPROVED, "Approved, no payment due"
        else:
            target, note = PAYMENT_PENDING, f"Approved, payment of {due} due"
        BOOKING_LIFECYCLE.assert_transition(status, action, target)
        return BookingTransition(action, status, target, payment_status, note, amount=due)

    if action == REJECT:
        return BookingTransition(action, status, REJECTED, payment_status, f"Rejected: {reason}")

    if action == MARK_PAID:
        assert_payment_transition(payment_status, PAYMENT_PAID)
        return BookingTransition(action, status, COMPLETED, PAYMENT_PAID, reason or "Payment received")

    if action == PAYMENT_FAILED_ACTION:
        assert_payment_transition(payment_status, PAYMENT_FAILED)
        return BookingTransition(
            action, status, PAYMENT_PENDING, PAYMENT_FAILED, f"Payment failed: {reason or 'unknown reason'}"
        )

    # cancel
    refund_required = payment_status == PAYMENT_PAID
    new_payment_status = PAYMENT_REFUNDED if refund_required else payment_status
    note = f"Cancelled: {reason}" if reason else "Cancelled"
    return BookingTransition(
        action, status, CANCELLED, new_payment_status, note, refund_required=refund_required
    )
