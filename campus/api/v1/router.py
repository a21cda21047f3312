"""Main API router that includes all endpoint routers."""

from fastapi import APIRouter

from campus.api.v1 import (
    admin,
    auth,
    event_bookings,
    events,
    payments,
    users,
    venues,
    webhooks,
)

api_router = APIRouter()

# Authentication
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])

# Users
api_router.include_router(users.router, prefix="/users", tags=["Users"])

# Venues
api_router.include_router(venues.router, prefix="/venues", tags=["Venues"])

# Events
api_router.include_router(events.router, prefix="/events", tags=["Events"])

# Event bookings
api_router.include_router(
    event_bookings.router, prefix="/event-bookings", tags=["Event Bookings"]
)

# Payments
api_router.include_router(payments.router, prefix="/payments", tags=["Payments"])

# Admin
api_router.include_router(admin.router, prefix="/admin", tags=["Admin"])

# Webhooks
api_router.include_router(webhooks.router, prefix="/webhooks", tags=["Webhooks"])
