"""Payment state machine."""

from campus.core.exceptions import ConflictError

PAYMENT_PENDING = "pending"
PAYMENT_PAID = "paid"
PAYMENT_FAILED = "failed"
PAYMENT_REFUNDED = "refunded"

PAYMENT_TRANSITIONS = {
    PAYMENT_PENDING: {PAYMENT_PAID, PAYMENT_FAILED},
    # A failed attempt may fail again, or be retried with a fresh order
    PAYMENT_FAILED: {PAYMENT_PENDING, PAYMENT_FAILED, PAYMENT_PAID},
    PAYMENT_PAID: {PAYMENT_REFUNDED},
    PAYMENT_REFUNDED: set(),
}


def assert_payment_transition(current: str, target: str) -> None:
    allowed = PAYMENT_TRANSITIONS.get(current, set())
    if target not in allowed:
        raise ConflictError(
            f"Invalid payment transition: {current} → {target}"
        )
