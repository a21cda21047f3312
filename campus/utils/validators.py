"""Custom validation utilities."""

import re
from datetime import UTC, datetime

TIME_OF_DAY_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def validate_indian_phone(phone: str) -> bool:
    """Validate Indian mobile number.

    Accepted formats:
    - +919876543210 (international)
    - 09876543210 (local with trunk prefix)
    - 9876543210 (bare ten digits)

    Args:
        phone: Phone number to validate

    Returns:
        bool: True if valid Indian mobile format
    """
    # Remove spaces, dashes, and parentheses
    cleaned = re.sub(r"[\s\-\(\)]", "", phone)

    if cleaned.startswith("+91"):
        cleaned = cleaned[3:]
    elif cleaned.startswith("0"):
        cleaned = cleaned[1:]

    return len(cleaned) == 10 and cleaned.isdigit() and cleaned[0] in "6789"


def normalize_phone(phone: str) -> str:
    """Normalize phone number to +91XXXXXXXXXX format.

    Returns the input unchanged when it cannot be normalized.
    """
    cleaned = re.sub(r"[^\d+]", "", phone)

    if cleaned.startswith("+91"):
        return cleaned
    if cleaned.startswith("0") and len(cleaned) == 11:
        return "+91" + cleaned[1:]
    if len(cleaned) == 10:
        return "+91" + cleaned

    return phone


def validate_time_of_day(value: str) -> bool:
    """Validate a 24-hour ``HH:MM`` time string."""
    return bool(TIME_OF_DAY_PATTERN.match(value))


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes read back from databases without tz support."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


def utcnow() -> datetime:
    """Current time in UTC."""
    return datetime.now(UTC)
