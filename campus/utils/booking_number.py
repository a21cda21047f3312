"""Booking number generation utilities."""

import random
import string
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

VENUE_PREFIX = "VNU"
EVENT_PREFIX = "EVT"


def _random_part(k: int = 6) -> str:
    return "".join(random.choices(string.ascii_uppercase + string.digits, k=k))


def format_booking_number(kind: str, random_part: str, year: int | None = None) -> str:
    """Build a booking number for a booking kind.

    Venue requests look like ``VNU-A3B7K9``; event bookings carry the year,
    ``EVT-2025-A3B7K9``.
    """
    if kind == "event":
        year = year or datetime.now(UTC).year
        return f"{EVENT_PREFIX}-{year}-{random_part}"
    return f"{VENUE_PREFIX}-{random_part}"


async def generate_booking_number(db: AsyncSession, kind: str) -> str:
    """Generate a unique booking number for a venue request or event booking.

    Args:
        db: Database session for uniqueness check
        kind: ``venue`` or ``event``

    Returns:
        str: Unique booking number like 'VNU-A3B7K9' or 'EVT-2025-A3B7K9'
    """
    from campus.models.booking import BookingRequest

    while True:
        booking_number = format_booking_number(kind, _random_part())

        result = await db.execute(
            select(BookingRequest.id).where(BookingRequest.booking_number == booking_number)
        )
        if result.scalar_one_or_none() is None:
            return booking_number
