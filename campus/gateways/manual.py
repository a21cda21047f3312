"""Offline payments settled at the campus accounts office."""

from campus.gateways.base import GatewayResult, GatewayType, PaymentGateway, RefundOutcome

OFFLINE_INSTRUCTIONS = "Pay at the campus accounts office and quote your booking number"


class ManualGateway(PaymentGateway):
    """No money moves through this adapter.

    Admins confirm receipt with mark-paid, and refunds are handed back at the
    counter, so every call simply records what the office has to do.
    """

    kind = GatewayType.MANUAL

    async def create_order(self, amount, currency, receipt, notes=None) -> GatewayResult:
        return GatewayResult(
            ok=True,
            reference=f"offline_{receipt}",
            entity={"amount": amount, "currency": currency, "instructions": OFFLINE_INSTRUCTIONS},
        )

    async def fetch_payment(self, payment_id) -> GatewayResult:
        return GatewayResult(
            ok=False, reference=payment_id, reason="Offline payments are confirmed by an admin"
        )

    async def refund(self, payment_id, amount, reason) -> RefundOutcome:
        return RefundOutcome(ok=True, refund_id=f"counter_{payment_id}")
