from datetime import UTC, date, datetime, timedelta

import pytest
from httpx import AsyncClient

from conftest import event_booking_payload


async def book(client: AsyncClient, account, event, **overrides):
    return await client.post(
        "/api/event-bookings", json=event_booking_payload(event.id, **overrides), headers=account.headers
    )


@pytest.mark.asyncio
async def test_free_event_is_confirmed(client: AsyncClient, participant, make_event):
    event = await make_event()

    response = await book(client, participant, event)

    assert response.status_code == 201
    data = response.json()
    assert data["message"] == "Registration confirmed"
    booking = data["booking"]
    assert booking["status"] == "approved"
    assert booking["totalAmount"] == 0
    assert booking["bookingNumber"].startswith(f"EVT-{datetime.now(UTC).year}-")
    assert booking["eventDate"] == event.start_date.isoformat()


@pytest.mark.asyncio
async def test_paid_event_waits_for_payment(client: AsyncClient, participant, make_event, razorpay):
    event = await make_event(fee=20000)

    response = await book(client, participant, event, attendeeCount=3)

    assert response.status_code == 201
    booking = response.json()["booking"]
    assert booking["status"] == "payment_pending"
    assert booking["totalAmount"] == 60000

    response = await client.post(
        "/api/payments/event-booking", json={"bookingId": booking["id"]}, headers=participant.headers
    )
    order = response.json()["order"]
    assert order["amount"] == 60000

    payment_id, signature = razorpay.checkout(order["id"])
    response = await client.put(
        "/api/payments/event-booking",
        json={
            "bookingId": booking["id"],
            "razorpay_order_id": order["id"],
            "razorpay_payment_id": payment_id,
            "razorpay_signature": signature,
        },
        headers=participant.headers,
    )
    assert response.status_code == 200
    assert response.json()["booking"]["status"] == "completed"


@pytest.mark.asyncio
async def test_offline_payment_marked_by_admin(client: AsyncClient, participant, admin, make_event):
    event = await make_event(fee=15000)

    response = await book(client, participant, event, paymentMethod="offline")

    assert response.status_code == 201
    assert "accounts office" in response.json()["message"]
    booking = response.json()["booking"]
    assert booking["paymentMethod"] == "offline"

    # Offline bookings are not paid through Razorpay
    response = await client.post(
        "/api/payments/event-booking", json={"bookingId": booking["id"]}, headers=participant.headers
    )
    assert response.status_code == 400

    response = await client.post(
        f"/api/admin/bookings/{booking['id']}/mark-paid",
        json={"note": "Cash receipt 1182"},
        headers=admin.headers,
    )
    assert response.status_code == 200
    paid = response.json()["booking"]
    assert paid["status"] == "completed"
    assert paid["paymentStatus"] == "paid"
    assert paid["statusHistory"][-1]["note"] == "Cash receipt 1182"

    # Marking twice is a conflict
    response = await client.post(f"/api/admin/bookings/{booking['id']}/mark-paid", headers=admin.headers)
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_duplicate_registration(client: AsyncClient, participant, make_event):
    event = await make_event()
    await book(client, participant, event)

    response = await book(client, participant, event)

    assert response.status_code == 409
    assert response.json() == {"error": "You are already registered for this event"}


@pytest.mark.asyncio
async def test_register_again_after_cancel(client: AsyncClient, participant, make_event):
    event = await make_event()
    booking = (await book(client, participant, event)).json()["booking"]

    response = await client.post(f"/api/event-bookings/{booking['id']}/cancel", headers=participant.headers)
    assert response.json()["booking"]["status"] == "cancelled"

    response = await book(client, participant, event)
    assert response.status_code == 201


@pytest.mark.asyncio
async def test_seat_limit(client: AsyncClient, make_account, make_event):
    event = await make_event(max_participants=3)
    first = await make_account("participant")
    second = await make_account("student")

    assert (await book(client, first, event, attendeeCount=2)).status_code == 201

    response = await book(client, second, event, attendeeCount=2)
    assert response.status_code == 400
    assert response.json() == {"error": "Only 1 seats left for this event"}

    assert (await book(client, second, event, attendeeCount=1)).status_code == 201


@pytest.mark.asyncio
async def test_registration_deadline(client: AsyncClient, participant, make_event):
    event = await make_event(registration_deadline=datetime.now(UTC) - timedelta(hours=1))

    response = await book(client, participant, event)

    assert response.status_code == 400
    assert response.json() == {"error": "Registration deadline has passed"}


@pytest.mark.asyncio
async def test_unpublished_event(client: AsyncClient, participant, make_event):
    event = await make_event(status="draft")

    response = await book(client, participant, event)

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_too_many_attendees(client: AsyncClient, participant, make_event):
    event = await make_event()

    response = await book(client, participant, event, attendeeCount=21)

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_cancel_paid_offline_booking(client: AsyncClient, participant, admin, make_event, razorpay):
    event = await make_event(fee=15000)
    booking = (await book(client, participant, event, paymentMethod="offline")).json()["booking"]
    await client.post(f"/api/admin/bookings/{booking['id']}/mark-paid", headers=admin.headers)

    response = await client.post(
        f"/api/event-bookings/{booking['id']}/cancel",
        json={"reason": "Cannot attend"},
        headers=participant.headers,
    )

    assert response.status_code == 200
    cancelled = response.json()["booking"]
    assert cancelled["paymentStatus"] == "refunded"
    assert cancelled["cancellationReason"] == "Cannot attend"
    # Offline money goes back through the accounts office, not Razorpay
    assert razorpay.refunds == []


@pytest.mark.asyncio
async def test_admin_listing_with_stats(client: AsyncClient, make_account, admin, make_event):
    event = await make_event(fee=10000)
    payer = await make_account("participant")
    waiter = await make_account("participant")
    quitter = await make_account("student")

    paid = (await book(client, payer, event, paymentMethod="offline", attendeeCount=2)).json()["booking"]
    await client.post(f"/api/admin/bookings/{paid['id']}/mark-paid", headers=admin.headers)
    await book(client, waiter, event)
    quit_booking = (await book(client, quitter, event)).json()["booking"]
    await client.post(f"/api/event-bookings/{quit_booking['id']}/cancel", headers=quitter.headers)

    response = await client.get(
        "/api/admin/event-bookings", params={"eventId": str(event.id)}, headers=admin.headers
    )

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 3
    assert data["stats"] == {
        "totalBookings": 3,
        "completedBookings": 1,
        "pendingPayments": 1,
        "cancelledBookings": 1,
        "totalRevenue": 20000,
        "refundedAmount": 0,
    }

    response = await client.get(
        "/api/admin/event-bookings", params={"paymentStatus": "paid"}, headers=admin.headers
    )
    assert [b["id"] for b in response.json()["bookings"]] == [paid["id"]]


@pytest.mark.asyncio
async def test_my_bookings(client: AsyncClient, participant, make_account, make_event):
    first = await make_event(title="Hackathon")
    second = await make_event(title="Quiz Night", start_date=date.today() + timedelta(days=3))
    await book(client, participant, first)
    await book(client, participant, second)
    other = await make_account("student")
    await book(client, other, first)

    response = await client.get("/api/event-bookings/mine", headers=participant.headers)

    assert response.json()["total"] == 2


@pytest.mark.asyncio
async def test_organizer_creates_event(client: AsyncClient, organizer, participant):
    payload = {
        "title": "Cultural Night",
        "description": "Music and dance",
        "eventType": "cultural",
        "startDate": (date.today() + timedelta(days=20)).isoformat(),
        "endDate": (date.today() + timedelta(days=20)).isoformat(),
        "startTime": "18:00",
        "endTime": "22:00",
        "venue": "Open Air Theatre",
        "fee": 5000,
    }

    response = await client.post("/api/events", json=payload, headers=participant.headers)
    assert response.status_code == 403

    response = await client.post("/api/events", json=payload, headers=organizer.headers)
    assert response.status_code == 201
    event = response.json()
    assert event["organizerId"] == str(organizer.user.id)

    response = await client.get("/api/events", params={"eventType": "cultural", "upcoming": "true"})
    assert [e["title"] for e in response.json()["events"]] == ["Cultural Night"]

    response = await client.put(
        f"/api/events/{event['id']}", json={"fee": 7500}, headers=organizer.headers
    )
    assert response.json()["fee"] == 7500


@pytest.mark.asyncio
async def test_organizer_sees_own_events_and_sales(
    client: AsyncClient, organizer, participant, admin, make_account, make_event
):
    workshop = await make_event(title="Robotics Workshop", fee=10000)
    talk = await make_event(title="Alumni Talk")
    await make_event(title="Drone Race", status="draft")
    payer = await make_account("participant")

    paid = (await book(client, payer, workshop, paymentMethod="offline", attendeeCount=2)).json()["booking"]
    await client.post(f"/api/admin/bookings/{paid['id']}/mark-paid", headers=admin.headers)
    await book(client, participant, workshop)
    await book(client, participant, talk)

    response = await client.get("/api/events/mine", headers=organizer.headers)
    assert response.status_code == 200
    assert response.json()["total"] == 3
    assert {e["title"] for e in response.json()["events"]} == {"Robotics Workshop", "Alumni Talk", "Drone Race"}

    response = await client.get("/api/events/dashboard", headers=organizer.headers)
    assert response.status_code == 200
    data = response.json()
    assert data["stats"] == {
        "totalEvents": 3,
        "activeEvents": 2,
        "totalRevenue": 20000,
        "totalTicketsSold": 3,
    }
    assert [(e["title"], e["ticketsSold"], e["revenue"]) for e in data["events"]] == [
        ("Robotics Workshop", 2, 20000),
        ("Alumni Talk", 1, 0),
        ("Drone Race", 0, 0),
    ]

    response = await client.get(f"/api/events/{workshop.id}/bookings", headers=organizer.headers)
    assert response.status_code == 200
    assert response.json()["total"] == 2
    assert response.json()["stats"]["totalRevenue"] == 20000
    assert response.json()["stats"]["pendingPayments"] == 1

    response = await client.get(
        f"/api/events/{workshop.id}/bookings", params={"status": "completed"}, headers=admin.headers
    )
    assert [b["id"] for b in response.json()["bookings"]] == [paid["id"]]


@pytest.mark.asyncio
async def test_event_registrations_are_private(client: AsyncClient, participant, make_account, make_event):
    event = await make_event()
    rival = await make_account("organizer")

    response = await client.get(f"/api/events/{event.id}/bookings", headers=rival.headers)
    assert response.status_code == 403

    response = await client.get(f"/api/events/{event.id}/bookings", headers=participant.headers)
    assert response.status_code == 403

    response = await client.get("/api/events/dashboard", headers=participant.headers)
    assert response.status_code == 403

    response = await client.get("/api/events/mine", headers=rival.headers)
    assert response.json() == {"events": [], "total": 0}
