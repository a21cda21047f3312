import pytest
from httpx import AsyncClient

from conftest import venue_request_payload


async def submit(client: AsyncClient, account, venue, **overrides) -> dict:
    response = await client.post(
        "/api/venues/requests",
        json=venue_request_payload(venue.id, **overrides),
        headers=account.headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["bookingRequest"]


async def decide(client: AsyncClient, admin, booking_id: str, **body):
    return await client.put(f"/api/admin/venue-requests/{booking_id}", json=body, headers=admin.headers)


@pytest.mark.asyncio
async def test_list_venues_only_active(client: AsyncClient, make_venue):
    await make_venue(name="Seminar Hall", capacity=80)
    await make_venue(name="Old Gym", status="maintenance")

    response = await client.get("/api/venues")

    assert response.status_code == 200
    assert [v["name"] for v in response.json()["venues"]] == ["Seminar Hall"]

    response = await client.get("/api/venues", params={"minCapacity": 100})
    assert response.json()["total"] == 0


@pytest.mark.asyncio
async def test_create_venue_request(client: AsyncClient, student, venue):
    """A new request is pending, numbered and has one history entry"""
    booking = await submit(client, student, venue)

    assert booking["status"] == "pending"
    assert booking["paymentStatus"] == "pending"
    assert booking["bookingNumber"].startswith("VNU-")
    assert booking["rentAmount"] == 500000
    assert booking["requesterRole"] == "student"
    assert [h["status"] for h in booking["statusHistory"]] == ["pending"]


@pytest.mark.asyncio
async def test_participant_cannot_request_venue(client: AsyncClient, participant, venue):
    response = await client.post(
        "/api/venues/requests",
        json=venue_request_payload(venue.id),
        headers=participant.headers,
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_attendees_over_capacity(client: AsyncClient, student, venue):
    response = await client.post(
        "/api/venues/requests",
        json=venue_request_payload(venue.id, expectedAttendees=201),
        headers=student.headers,
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Expected attendees cannot exceed venue capacity of 200"}


@pytest.mark.asyncio
async def test_past_date_rejected(client: AsyncClient, student, venue):
    response = await client.post(
        "/api/venues/requests",
        json=venue_request_payload(venue.id, days_ahead=-1),
        headers=student.headers,
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_end_time_must_follow_start(client: AsyncClient, student, venue):
    response = await client.post(
        "/api/venues/requests",
        json=venue_request_payload(venue.id, eventStartTime="18:00", eventEndTime="09:00"),
        headers=student.headers,
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_unknown_venue(client: AsyncClient, student):
    response = await client.post(
        "/api/venues/requests",
        json=venue_request_payload("00000000-0000-0000-0000-000000000000"),
        headers=student.headers,
    )

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_reject_requires_reason(client: AsyncClient, student, admin, venue):
    booking = await submit(client, student, venue)

    response = await decide(client, admin, booking["id"], action="reject")
    assert response.status_code == 400
    assert response.json() == {"error": "Rejection reason is required"}

    response = await decide(client, admin, booking["id"], action="reject", rejectionReason="Exams week")
    assert response.status_code == 200
    rejected = response.json()["bookingRequest"]
    assert rejected["status"] == "rejected"
    assert rejected["rejectionReason"] == "Exams week"

    # Rejected is terminal
    response = await decide(client, admin, booking["id"], action="approve")
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_approve_with_rent_waits_for_payment(client: AsyncClient, student, admin, venue):
    booking = await submit(client, student, venue)

    response = await decide(client, admin, booking["id"], action="approve", rentAmount=300000)

    assert response.status_code == 200
    approved = response.json()["bookingRequest"]
    assert approved["status"] == "payment_pending"
    assert approved["rentAmount"] == 300000
    assert approved["version"] == booking["version"] + 1


@pytest.mark.asyncio
async def test_approve_free_venue(client: AsyncClient, student, admin, make_venue):
    free_hall = await make_venue(name="Open Air Theatre", rent_price=0)
    booking = await submit(client, student, free_hall)

    response = await decide(client, admin, booking["id"], action="approve")

    assert response.status_code == 200
    assert response.json()["bookingRequest"]["status"] == "approved"


@pytest.mark.asyncio
async def test_only_admin_decides(client: AsyncClient, student, venue):
    booking = await submit(client, student, venue)

    response = await decide(client, student, booking["id"], action="approve")

    assert response.status_code == 403
    assert response.json() == {"error": "Admin access required"}


@pytest.mark.asyncio
async def test_same_day_conflict(client: AsyncClient, make_account, admin, venue):
    """Two requests may wait for the same day, only one can be approved"""
    first_user = await make_account("student")
    second_user = await make_account("teacher")
    first = await submit(client, first_user, venue)
    second = await submit(client, second_user, venue)

    assert (await decide(client, admin, first["id"], action="approve")).status_code == 200

    response = await decide(client, admin, second["id"], action="approve")
    assert response.status_code == 409
    assert response.json() == {"error": "Venue is already booked for this date"}

    # New requests for a booked day are refused upfront
    response = await client.post(
        "/api/venues/requests",
        json=venue_request_payload(venue.id),
        headers=second_user.headers,
    )
    assert response.status_code == 409

    # A different day is fine
    await submit(client, second_user, venue, days_ahead=31)


@pytest.mark.asyncio
async def test_cancelled_booking_frees_the_day(client: AsyncClient, student, admin, venue):
    booking = await submit(client, student, venue)
    await decide(client, admin, booking["id"], action="approve")

    response = await client.post(
        f"/api/venues/requests/{booking['id']}/cancel",
        json={"reason": "Plans changed"},
        headers=student.headers,
    )
    assert response.status_code == 200
    cancelled = response.json()["bookingRequest"]
    assert cancelled["status"] == "cancelled"
    assert cancelled["cancelledBy"] == "requester"
    assert cancelled["paymentStatus"] == "pending"

    await submit(client, student, venue)


@pytest.mark.asyncio
async def test_other_users_cannot_see_or_cancel(client: AsyncClient, make_account, venue):
    owner = await make_account("student")
    stranger = await make_account("teacher")
    booking = await submit(client, owner, venue)

    response = await client.get(f"/api/venues/requests/{booking['id']}", headers=stranger.headers)
    assert response.status_code == 403

    response = await client.post(f"/api/venues/requests/{booking['id']}/cancel", headers=stranger.headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_my_requests_and_admin_filters(client: AsyncClient, student, admin, venue):
    first = await submit(client, student, venue)
    await submit(client, student, venue, days_ahead=40)
    await decide(client, admin, first["id"], action="reject", rejectionReason="Clash with convocation")

    response = await client.get("/api/venues/requests/mine", headers=student.headers)
    assert response.json()["total"] == 2

    response = await client.get(
        "/api/venues/requests/mine", params={"status": "rejected"}, headers=student.headers
    )
    assert [b["id"] for b in response.json()["bookingRequests"]] == [first["id"]]

    response = await client.get(
        "/api/admin/venue-requests",
        params={"status": "pending", "venueId": str(venue.id)},
        headers=admin.headers,
    )
    assert response.json()["total"] == 1

    response = await client.get(
        "/api/venues/requests/mine", params={"status": "bogus"}, headers=student.headers
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_history_and_audit_trail(client: AsyncClient, student, admin, venue):
    booking = await submit(client, student, venue)
    await decide(client, admin, booking["id"], action="approve")
    await client.post(f"/api/admin/bookings/{booking['id']}/cancel", headers=admin.headers)

    response = await client.get(f"/api/admin/bookings/{booking['id']}/history", headers=admin.headers)
    assert response.status_code == 200
    history = response.json()["statusHistory"]
    assert [h["sequence"] for h in history] == [1, 2, 3]
    assert [h["status"] for h in history] == ["pending", "payment_pending", "cancelled"]

    response = await client.get(
        "/api/admin/audit-logs", params={"resourceId": booking["id"]}, headers=admin.headers
    )
    actions = [log["action"] for log in response.json()["logs"]]
    assert sorted(actions) == ["booking_approve", "booking_cancel"]


@pytest.mark.asyncio
async def test_admin_venue_management(client: AsyncClient, student, admin, venue):
    response = await client.post(
        "/api/admin/venues",
        json={
            "name": "Conference Room 2",
            "description": "Boardroom seating",
            "capacity": 20,
            "location": "Admin Block",
            "rentPrice": 100000,
            "amenities": ["projector"],
        },
        headers=admin.headers,
    )
    assert response.status_code == 201
    new_venue = response.json()
    assert new_venue["amenities"] == ["projector"]

    response = await client.put(
        f"/api/admin/venues/{new_venue['id']}", json={"status": "maintenance"}, headers=admin.headers
    )
    assert response.json()["status"] == "maintenance"

    response = await client.delete(f"/api/admin/venues/{new_venue['id']}", headers=admin.headers)
    assert response.status_code == 204

    # Venues with requests cannot be deleted
    await submit(client, student, venue)
    response = await client.delete(f"/api/admin/venues/{venue.id}", headers=admin.headers)
    assert response.status_code == 409
