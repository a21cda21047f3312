"""Razorpay payment gateway adapter."""

import hashlib
import hmac
import json
import logging

import razorpay
from razorpay.errors import BadRequestError
from starlette.concurrency import run_in_threadpool

from campus.config import settings
from campus.gateways.base import GatewayResult, GatewayType, PaymentGateway, RefundOutcome

logger = logging.getLogger(__name__)

# Payment states Razorpay reports for money that has left the payer
CAPTURED_STATES = ("captured", "authorized")


def compute_signature(secret: str, order_id: str, payment_id: str) -> str:
    """Checkout signature: hex HMAC-SHA256 of ``order_id|payment_id``."""
    message = f"{order_id}|{payment_id}"
    return hmac.new(secret.encode(), message.encode(), hashlib.sha256).hexdigest()


def verify_payment_signature(secret: str, order_id: str, payment_id: str, signature: str) -> bool:
    """Constant-time comparison of a checkout signature."""
    if not secret or not signature:
        return False
    expected = compute_signature(secret, order_id, payment_id)
    return hmac.compare_digest(expected, signature)


def compute_webhook_signature(secret: str, payload: bytes) -> str:
    """Webhook signature: hex HMAC-SHA256 of the raw request body."""
    return hmac.new(secret.encode(), payload, hashlib.sha256).hexdigest()

class RazorpayGateway(PaymentGateway):
    """Orders, payment lookups, refunds and webhooks through the Razorpay SDK.

    The SDK is synchronous, so every call is pushed to the threadpool.
    """

    kind = GatewayType.RAZORPAY

    def __init__(self, client: razorpay.Client | None = None):
        self.key_id = settings.razorpay_key_id
        self.key_secret = settings.razorpay_key_secret
        self.webhook_secret = settings.razorpay_webhook_secret
        self._client = client

    @property
    def is_configured(self) -> bool:
        return bool(self.key_id and self.key_secret)

    @property
    def client(self) -> razorpay.Client:
        if self._client is None:
            self._client = razorpay.Client(auth=(self.key_id, self.key_secret))
        return self._client

    def verify_signature(self, order_id: str, payment_id: str, signature: str) -> bool:
        """Check the signature Razorpay checkout returned to the client."""
        return verify_payment_signature(self.key_secret or "", order_id, payment_id, signature)

    async def create_order(self, amount, currency, receipt, notes=None) -> GatewayResult:
        if not self.is_configured:
            return GatewayResult(ok=False, reason="Razorpay not configured", unreachable=True)

        # Razorpay caps receipts at 40 characters
        data = {"amount": amount, "currency": currency, "receipt": receipt[:40], "notes": notes or {}}
        try:
            order = await run_in_threadpool(self.client.order.create, data=data)
        except Exception as e:
            logger.error(f"Razorpay order creation failed for {receipt}: {e}")
            return GatewayResult(ok=False, reason=str(e), unreachable=True)

        return GatewayResult(ok=True, reference=order["id"], entity=order)

    async def fetch_payment(self, payment_id) -> GatewayResult:
        if not self.is_configured:
            return GatewayResult(ok=False, reason="Razorpay not configured", unreachable=True)

        try:
            payment = await run_in_threadpool(self.client.payment.fetch, payment_id)
        except BadRequestError as e:
            # Unknown id: Razorpay answered, the payment just is not there
            return GatewayResult(ok=False, reference=payment_id, reason=str(e))
        except Exception as e:
            logger.error(f"Razorpay payment lookup failed for {payment_id}: {e}")
            return GatewayResult(ok=False, reference=payment_id, reason=str(e), unreachable=True)

        status = payment.get("status")
        if status not in CAPTURED_STATES:
            return GatewayResult(
                ok=False, reference=payment_id, reason=f"Payment status is {status}", entity=payment
            )
        return GatewayResult(ok=True, reference=payment_id, entity=payment)

    async def refund(self, payment_id, amount, reason) -> RefundOutcome:
        if not self.is_configured:
            return RefundOutcome(ok=False, reason="Razorpay not configured")

        try:
            refund = await run_in_threadpool(
                self.client.payment.refund,
                payment_id,
                {"amount": amount, "notes": {"reason": reason[:255]}},
            )
        except Exception as e:
            logger.error(f"Razorpay refund failed for {payment_id}: {e}")
            return RefundOutcome(ok=False, reason=str(e))

        if refund.get("status") not in ("processed", "pending"):
            return RefundOutcome(ok=False, refund_id=refund.get("id"), reason=refund.get("status"))
        return RefundOutcome(ok=True, refund_id=refund.get("id"))

    def parse_webhook(self, payload, signature) -> dict | None:
        """Event body when ``X-Razorpay-Signature`` matches, else None."""
        if not self.webhook_secret or not signature:
            return None
        expected = compute_webhook_signature(self.webhook_secret, payload)
        if not hmac.compare_digest(expected, signature):
            return None
        try:
            return json.loads(payload)
        except ValueError:
            return None
