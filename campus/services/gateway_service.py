"""Routes payment calls to the Razorpay or offline adapter.

Nothing here knows about bookings; callers pass amounts and references.
"""

from campus.config import settings
from campus.core.exceptions import PaymentGatewayError
from campus.gateways.base import GatewayResult, GatewayType, PaymentGateway, RefundOutcome
from campus.gateways.manual import ManualGateway
from campus.gateways.razorpay_gateway import RazorpayGateway

_FACTORIES = {
    GatewayType.RAZORPAY: RazorpayGateway,
    GatewayType.MANUAL: ManualGateway,
}


def _guard_live_keys(gateway: PaymentGateway) -> None:
    """Refuse rzp_live_ keys anywhere but production.

    Raises:
        PaymentGatewayError: A live key is configured outside production
    """
    if gateway.kind != GatewayType.RAZORPAY or settings.environment == "production":
        return
    if (getattr(gateway, "key_id", None) or "").startswith("rzp_live_"):
        raise PaymentGatewayError(
            f"Live Razorpay keys cannot be used in the {settings.environment} environment"
        )


class GatewayService:
    def __init__(self):
        self._gateways: dict[GatewayType, PaymentGateway] = {}

    def register_gateway(self, gateway: PaymentGateway) -> None:
        """Install ``gateway`` in place of whatever serves its kind."""
        self._gateways[gateway.kind] = gateway

    def reset(self) -> None:
        self._gateways.clear()

    def for_kind(self, kind: GatewayType) -> PaymentGateway:
        if kind not in self._gateways:
            self._gateways[kind] = _FACTORIES[kind]()
        return self._gateways[kind]

    @property
    def razorpay(self) -> RazorpayGateway:
        return self.for_kind(GatewayType.RAZORPAY)  # type: ignore[return-value]

    async def create_order(
        self, kind: GatewayType, amount: int, currency: str, receipt: str, notes: dict | None = None
    ) -> GatewayResult:
        gateway = self.for_kind(kind)
        _guard_live_keys(gateway)
        return await gateway.create_order(amount, currency, receipt, notes)

    async def fetch_payment(self, kind: GatewayType, payment_id: str) -> GatewayResult:
        return await self.for_kind(kind).fetch_payment(payment_id)

    async def refund(
        self, kind: GatewayType, payment_id: str, amount: int, reason: str
    ) -> RefundOutcome:
        gateway = self.for_kind(kind)
        _guard_live_keys(gateway)
        return await gateway.refund(payment_id, amount, reason)

    def parse_webhook(self, kind: GatewayType, payload: bytes, signature: str) -> dict | None:
        return self.for_kind(kind).parse_webhook(payload, signature)


gateway_service = GatewayService()
