import pytest
from httpx import AsyncClient

from conftest import venue_request_payload


@pytest.fixture
async def awaiting_payment(client: AsyncClient, student, admin, venue) -> dict:
    """A venue request approved with rent and waiting for the student to pay."""
    response = await client.post(
        "/api/venues/requests", json=venue_request_payload(venue.id), headers=student.headers
    )
    booking = response.json()["bookingRequest"]
    response = await client.put(
        f"/api/admin/venue-requests/{booking['id']}",
        json={"action": "approve", "rentAmount": 250000},
        headers=admin.headers,
    )
    assert response.status_code == 200
    return response.json()["bookingRequest"]


async def create_order(client: AsyncClient, account, booking_id: str):
    return await client.post(
        "/api/payments/venue-rent", json={"bookingRequestId": booking_id}, headers=account.headers
    )


async def verify(client: AsyncClient, account, booking_id: str, order_id: str, payment_id: str, signature: str):
    return await client.put(
        "/api/payments/venue-rent",
        json={
            "bookingRequestId": booking_id,
            "razorpay_order_id": order_id,
            "razorpay_payment_id": payment_id,
            "razorpay_signature": signature,
        },
        headers=account.headers,
    )


async def fetch(client: AsyncClient, account, booking_id: str) -> dict:
    response = await client.get(f"/api/venues/requests/{booking_id}", headers=account.headers)
    return response.json()["bookingRequest"]


@pytest.mark.asyncio
async def test_request_approve_pay_scenario(client: AsyncClient, student, admin, make_venue, razorpay):
    """Request, approval with rent, payment: three history entries"""
    v1 = await make_venue(name="V1", capacity=100)
    response = await client.post(
        "/api/venues/requests",
        json=venue_request_payload(v1.id, expectedAttendees=50),
        headers=student.headers,
    )
    assert response.status_code == 201
    booking_id = response.json()["bookingRequest"]["id"]
    assert response.json()["bookingRequest"]["status"] == "pending"

    response = await client.put(
        f"/api/admin/venue-requests/{booking_id}",
        json={"action": "approve", "rentAmount": 500},
        headers=admin.headers,
    )
    assert response.json()["bookingRequest"]["status"] == "payment_pending"

    order = (await create_order(client, student, booking_id)).json()["order"]
    payment_id, signature = razorpay.checkout(order["id"])
    response = await verify(client, student, booking_id, order["id"], payment_id, signature)

    booking = response.json()["bookingRequest"]
    assert booking["status"] == "completed"
    assert booking["paymentStatus"] == "paid"
    assert len(booking["statusHistory"]) == 3


@pytest.mark.asyncio
async def test_pay_venue_rent(client: AsyncClient, student, awaiting_payment, razorpay):
    booking_id = awaiting_payment["id"]

    response = await create_order(client, student, booking_id)
    assert response.status_code == 200
    order = response.json()["order"]
    assert order["amount"] == 250000
    assert order["currency"] == "INR"
    assert order["keyId"] == "rzp_test_key"
    assert order["receipt"] == awaiting_payment["bookingNumber"]

    payment_id, signature = razorpay.checkout(order["id"])
    response = await verify(client, student, booking_id, order["id"], payment_id, signature)

    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Payment verified successfully"
    paid = data["bookingRequest"]
    assert paid["status"] == "completed"
    assert paid["paymentStatus"] == "paid"
    assert paid["razorpayPaymentId"] == payment_id
    assert paid["paidAt"] is not None


@pytest.mark.asyncio
async def test_repeat_verification_is_idempotent(client: AsyncClient, student, awaiting_payment, razorpay):
    booking_id = awaiting_payment["id"]
    order = (await create_order(client, student, booking_id)).json()["order"]
    payment_id, signature = razorpay.checkout(order["id"])
    first = await verify(client, student, booking_id, order["id"], payment_id, signature)

    second = await verify(client, student, booking_id, order["id"], payment_id, signature)

    assert second.status_code == 200
    assert second.json()["message"] == "Payment already verified"
    assert second.json()["bookingRequest"]["version"] == first.json()["bookingRequest"]["version"]
    assert len(second.json()["bookingRequest"]["statusHistory"]) == len(
        first.json()["bookingRequest"]["statusHistory"]
    )


@pytest.mark.asyncio
async def test_second_payment_for_paid_booking(client: AsyncClient, student, awaiting_payment, razorpay):
    booking_id = awaiting_payment["id"]
    order = (await create_order(client, student, booking_id)).json()["order"]
    payment_id, signature = razorpay.checkout(order["id"])
    await verify(client, student, booking_id, order["id"], payment_id, signature)

    other_id, other_signature = razorpay.checkout(order["id"], payment_id="pay_other")
    response = await verify(client, student, booking_id, order["id"], other_id, other_signature)

    assert response.status_code == 409

    response = await create_order(client, student, booking_id)
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_bad_signature_marks_payment_failed(client: AsyncClient, student, awaiting_payment, razorpay):
    booking_id = awaiting_payment["id"]
    order = (await create_order(client, student, booking_id)).json()["order"]
    payment_id, _ = razorpay.checkout(order["id"])

    response = await verify(client, student, booking_id, order["id"], payment_id, "0" * 64)

    assert response.status_code == 400
    assert response.json() == {"error": "Payment verification failed: invalid payment signature"}

    # The failure is persisted even though the request failed
    booking = await fetch(client, student, booking_id)
    assert booking["status"] == "payment_pending"
    assert booking["paymentStatus"] == "failed"
    assert booking["statusHistory"][-1]["note"] == "Payment failed: invalid payment signature"

    # The student can retry with a fresh order
    retry = (await create_order(client, student, booking_id)).json()["order"]
    assert retry["id"] != order["id"]
    assert (await fetch(client, student, booking_id))["paymentStatus"] == "pending"

    payment_id, signature = razorpay.checkout(retry["id"])
    response = await verify(client, student, booking_id, retry["id"], payment_id, signature)
    assert response.json()["bookingRequest"]["status"] == "completed"


@pytest.mark.asyncio
async def test_failed_order_cannot_be_verified_again(client: AsyncClient, student, awaiting_payment, razorpay):
    booking_id = awaiting_payment["id"]
    order = (await create_order(client, student, booking_id)).json()["order"]
    payment_id, signature = razorpay.checkout(order["id"])
    await verify(client, student, booking_id, order["id"], payment_id, "0" * 64)

    response = await verify(client, student, booking_id, order["id"], payment_id, signature)

    assert response.status_code == 409
    assert response.json() == {"error": "Payment for this order failed, create a new payment order"}
    booking = await fetch(client, student, booking_id)
    assert booking["status"] == "payment_pending"
    assert booking["paymentStatus"] == "failed"


@pytest.mark.asyncio
async def test_order_mismatch_fails(client: AsyncClient, student, awaiting_payment, razorpay):
    booking_id = awaiting_payment["id"]
    await create_order(client, student, booking_id)
    stray = await razorpay.create_order(100, "INR", "elsewhere")
    payment_id, signature = razorpay.checkout(stray.reference)

    response = await verify(client, student, booking_id, stray.reference, payment_id, signature)

    assert response.status_code == 400
    assert (await fetch(client, student, booking_id))["paymentStatus"] == "failed"


@pytest.mark.asyncio
async def test_underpaid_charge_fails(client: AsyncClient, student, awaiting_payment, razorpay):
    booking_id = awaiting_payment["id"]
    order = (await create_order(client, student, booking_id)).json()["order"]
    payment_id, signature = razorpay.checkout(order["id"], amount=100)

    response = await verify(client, student, booking_id, order["id"], payment_id, signature)

    assert response.status_code == 400
    assert "amount" in response.json()["error"]


@pytest.mark.asyncio
async def test_uncaptured_payment_fails(client: AsyncClient, student, awaiting_payment, razorpay):
    booking_id = awaiting_payment["id"]
    order = (await create_order(client, student, booking_id)).json()["order"]
    payment_id, signature = razorpay.checkout(order["id"], status="failed")

    response = await verify(client, student, booking_id, order["id"], payment_id, signature)

    assert response.status_code == 400
    assert (await fetch(client, student, booking_id))["paymentStatus"] == "failed"


@pytest.mark.asyncio
async def test_gateway_outage_leaves_booking_untouched(client: AsyncClient, student, awaiting_payment, razorpay):
    booking_id = awaiting_payment["id"]
    order = (await create_order(client, student, booking_id)).json()["order"]
    payment_id, signature = razorpay.checkout(order["id"])
    razorpay.unreachable = True

    response = await verify(client, student, booking_id, order["id"], payment_id, signature)

    assert response.status_code == 502
    booking = await fetch(client, student, booking_id)
    assert booking["status"] == "payment_pending"
    assert booking["paymentStatus"] == "pending"


@pytest.mark.asyncio
async def test_order_creation_outage(client: AsyncClient, student, awaiting_payment, razorpay):
    razorpay.unreachable = True

    response = await create_order(client, student, awaiting_payment["id"])

    assert response.status_code == 502


@pytest.mark.asyncio
async def test_only_requester_pays(client: AsyncClient, make_account, awaiting_payment):
    stranger = await make_account("teacher")

    response = await create_order(client, stranger, awaiting_payment["id"])

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_no_payment_before_approval(client: AsyncClient, student, venue):
    response = await client.post(
        "/api/venues/requests", json=venue_request_payload(venue.id), headers=student.headers
    )
    booking = response.json()["bookingRequest"]

    response = await create_order(client, student, booking["id"])

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_cancel_paid_booking_refunds(client: AsyncClient, student, admin, awaiting_payment, razorpay):
    booking_id = awaiting_payment["id"]
    order = (await create_order(client, student, booking_id)).json()["order"]
    payment_id, signature = razorpay.checkout(order["id"])
    await verify(client, student, booking_id, order["id"], payment_id, signature)

    response = await client.post(
        f"/api/admin/bookings/{booking_id}/cancel",
        json={"reason": "Venue flooded"},
        headers=admin.headers,
    )

    assert response.status_code == 200
    booking = response.json()["booking"]
    assert booking["status"] == "cancelled"
    assert booking["paymentStatus"] == "refunded"
    assert booking["cancelledBy"] == "admin"
    assert razorpay.refunds == [{"id": "rfnd_000001", "payment_id": payment_id, "amount": 250000}]


@pytest.mark.asyncio
async def test_verification_body_is_strict(client: AsyncClient, student, awaiting_payment):
    response = await client.put(
        "/api/payments/venue-rent",
        json={"bookingRequestId": awaiting_payment["id"], "razorpay_order_id": "order_1"},
        headers=student.headers,
    )

    assert response.status_code == 400
