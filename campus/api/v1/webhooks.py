"""Webhook endpoints for payment gateways."""

from fastapi import APIRouter, Header, Request, status

from campus.api.deps import DbSession
from campus.services.payment_service import payment_service

router = APIRouter()


@router.post("/razorpay", status_code=status.HTTP_200_OK)
async def razorpay_webhook(
    request: Request,
    db: DbSession,
    razorpay_signature: str | None = Header(None, alias="X-Razorpay-Signature"),
) -> dict:
    """Handle Razorpay payment.captured and payment.failed events."""
    # Signature covers the raw body
    payload = await request.body()
    outcome = await payment_service.handle_webhook(db, payload, razorpay_signature)
    return {"received": True, "status": outcome}
