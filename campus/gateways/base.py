"""Gateway interface shared by Razorpay and offline payments.

Adapters translate to and from the provider; booking rules live in
``campus.services``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum


class GatewayType(str, Enum):
    RAZORPAY = "razorpay"
    MANUAL = "manual"  # cash or transfer at the accounts office


@dataclass
class GatewayResult:
    """Answer to an order or payment call.

    ``reference`` is the order id after ``create_order`` and the payment id
    after ``fetch_payment``. ``unreachable`` means no answer came back, as
    opposed to an answer saying the money is not there.
    """

    ok: bool
    reference: str | None = None
    reason: str | None = None
    entity: dict = field(default_factory=dict)
    unreachable: bool = False


@dataclass
class RefundOutcome:
    ok: bool
    refund_id: str | None = None
    reason: str | None = None


class PaymentGateway(ABC):
    kind: GatewayType

    @abstractmethod
    async def create_order(
        self, amount: int, currency: str, receipt: str, notes: dict | None = None
    ) -> GatewayResult:
        """Open an order for ``amount`` paise under the booking number ``receipt``."""

    @abstractmethod
    async def fetch_payment(self, payment_id: str) -> GatewayResult:
        """``ok`` only when the provider holds the money (captured or authorized)."""

    @abstractmethod
    async def refund(self, payment_id: str, amount: int, reason: str) -> RefundOutcome: ...

    def parse_webhook(self, payload: bytes, signature: str) -> dict | None:
        # Only providers that push events override this
        return None
