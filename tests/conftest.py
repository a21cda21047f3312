"""
Festo Campus - Test Configuration and Fixtures
"""
import os
from collections.abc import AsyncGenerator
from dataclasses import dataclass
from datetime import date, timedelta

# Set testing environment before the app reads its settings
os.environ["ENVIRONMENT"] = "development"
os.environ["JWT_SECRET_KEY"] = "test-jwt-secret-key-for-testing"
os.environ["RAZORPAY_KEY_ID"] = "rzp_test_key"
os.environ["RAZORPAY_KEY_SECRET"] = "test_razorpay_secret"
os.environ["RAZORPAY_WEBHOOK_SECRET"] = "test_webhook_secret"
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest
from httpx import ASGITransport, AsyncClient

from campus.core.security import create_tokens, get_password_hash
from campus.database import Database
from campus.gateways.base import GatewayResult, RefundOutcome
from campus.gateways.razorpay_gateway import (
    CAPTURED_STATES,
    RazorpayGateway,
    compute_signature,
    compute_webhook_signature,
)
from campus.main import app
from campus.models.event import Event
from campus.models.user import User
from campus.models.venue import Venue
from campus.services.gateway_service import gateway_service

TEST_PASSWORD = "Campus@123"


class FakeRazorpayGateway(RazorpayGateway):
    """Razorpay adapter whose API calls hit an in-memory ledger.

    Signature checks are inherited, so tests exercise the real HMAC code.
    """

    def __init__(self):
        super().__init__()
        self.orders: dict[str, dict] = {}
        self.payments: dict[str, dict] = {}
        self.refunds: list[dict] = []
        self.unreachable = False

    def _down(self) -> GatewayResult:
        return GatewayResult(ok=False, reason="Connection refused", unreachable=True)

    async def create_order(self, amount, currency, receipt, notes=None):
        if self.unreachable:
            return self._down()
        order_id = f"order_{len(self.orders) + 1:06d}"
        self.orders[order_id] = {
            "id": order_id,
            "amount": amount,
            "currency": currency,
            "receipt": receipt,
        }
        return GatewayResult(ok=True, reference=order_id, entity=self.orders[order_id])

    def checkout(
        self,
        order_id: str,
        *,
        payment_id: str | None = None,
        amount: int | None = None,
        status: str = "captured",
    ) -> tuple[str, str]:
        """Simulate the payer finishing checkout; returns (payment_id, signature)."""
        payment_id = payment_id or f"pay_{order_id.removeprefix('order_')}"
        order = self.orders[order_id]
        self.payments[payment_id] = {
            "id": payment_id,
            "order_id": order_id,
            "amount": order["amount"] if amount is None else amount,
            "status": status,
        }
        return payment_id, compute_signature(self.key_secret, order_id, payment_id)

    async def fetch_payment(self, payment_id):
        if self.unreachable:
            return self._down()
        payment = self.payments.get(payment_id)
        if payment is None:
            return GatewayResult(ok=False, reference=payment_id, reason="The id provided does not exist")
        if payment["status"] not in CAPTURED_STATES:
            return GatewayResult(
                ok=False, reference=payment_id, reason=f"Payment status is {payment['status']}", entity=payment
            )
        return GatewayResult(ok=True, reference=payment_id, entity=payment)

    async def refund(self, payment_id, amount, reason):
        refund_id = f"rfnd_{len(self.refunds) + 1:06d}"
        self.refunds.append({"id": refund_id, "payment_id": payment_id, "amount": amount})
        return RefundOutcome(ok=True, refund_id=refund_id)


@dataclass
class Account:
    """A stored user plus the headers that authenticate as them."""

    user: User
    headers: dict[str, str]


@pytest.fixture
async def database(tmp_path) -> AsyncGenerator[Database, None]:
    """Fresh SQLite database for each test."""
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
def razorpay() -> FakeRazorpayGateway:
    gateway = FakeRazorpayGateway()
    gateway_service.register_gateway(gateway)
    yield gateway
    gateway_service.reset()


@pytest.fixture
async def client(database: Database, razorpay: FakeRazorpayGateway) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client talking to the app over ASGI, bound to the test database."""
    app.state.database = database
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def make_account(database: Database):
    """Factory creating a user directly in the database."""
    counter = 0

    async def _make(role: str = "student", **fields) -> Account:
        nonlocal counter
        counter += 1
        user = User(
            name=fields.pop("name", f"{role.title()} {counter}"),
            email=fields.pop("email", f"{role}{counter}@campus.edu"),
            password_hash=get_password_hash(fields.pop("password", TEST_PASSWORD)),
            role=role,
            **fields,
        )
        async with database.session() as session:
            session.add(user)
        tokens = create_tokens(user)
        return Account(user=user, headers={"Authorization": f"Bearer {tokens['access_token']}"})

    return _make


@pytest.fixture
async def student(make_account) -> Account:
    return await make_account("student")


@pytest.fixture
async def participant(make_account) -> Account:
    return await make_account("participant")


@pytest.fixture
async def organizer(make_account) -> Account:
    return await make_account("organizer", organization_name="Robotics Club")


@pytest.fixture
async def admin(make_account) -> Account:
    return await make_account("admin")


@pytest.fixture
def make_venue(database: Database):
    async def _make(**fields) -> Venue:
        venue = Venue(
            name=fields.pop("name", "Main Auditorium"),
            description=fields.pop("description", "Air-conditioned hall with stage"),
            capacity=fields.pop("capacity", 200),
            location=fields.pop("location", "Block A"),
            rent_price=fields.pop("rent_price", 500000),
            **fields,
        )
        async with database.session() as session:
            session.add(venue)
        return venue

    return _make


@pytest.fixture
async def venue(make_venue) -> Venue:
    return await make_venue()


@pytest.fixture
def make_event(database: Database, organizer: Account):
    async def _make(**fields) -> Event:
        start = fields.pop("start_date", date.today() + timedelta(days=14))
        event = Event(
            title=fields.pop("title", "Robotics Workshop"),
            description=fields.pop("description", "Hands-on session with line followers"),
            event_type=fields.pop("event_type", "workshop"),
            start_date=start,
            end_date=fields.pop("end_date", start),
            start_time=fields.pop("start_time", "10:00"),
            end_time=fields.pop("end_time", "16:00"),
            venue=fields.pop("venue", "Lab 3"),
            organizer_id=organizer.user.id,
            fee=fields.pop("fee", 0),
            **fields,
        )
        async with database.session() as session:
            session.add(event)
        return event

    return _make


def venue_request_payload(venue_id, days_ahead: int = 30, **overrides) -> dict:
    payload = {
        "venueId": str(venue_id),
        "eventName": "Annual Tech Fest",
        "eventDate": (date.today() + timedelta(days=days_ahead)).isoformat(),
        "eventStartTime": "09:00",
        "eventEndTime": "18:00",
        "expectedAttendees": 150,
        "purpose": "Inter-college technical festival",
        "organizerName": "Asha Verma",
        "organizerEmail": "asha.verma@campus.edu",
    }
    payload.update(overrides)
    return payload


def event_booking_payload(event_id, **overrides) -> dict:
    payload = {
        "eventId": str(event_id),
        "attendeeCount": 1,
        "attendeeName": "Rahul Nair",
        "attendeeEmail": "rahul.nair@campus.edu",
    }
    payload.update(overrides)
    return payload


def sign_webhook(body: bytes) -> dict[str, str]:
    """Headers Razorpay would send with ``body``."""
    signature = compute_webhook_signature(os.environ["RAZORPAY_WEBHOOK_SECRET"], body)
    return {"X-Razorpay-Signature": signature, "Content-Type": "application/json"}
