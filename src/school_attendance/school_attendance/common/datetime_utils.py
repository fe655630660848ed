from __future__ import annotations

import math
from datetime import date, datetime, time, timezone

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_hhmm(value: str) -> time:
    """Parse an ``HH:MM`` wall-clock string into a time."""
    return datetime.strptime(value.strip(), "%H:%M").time()


def date_key(timestamp: str) -> str:
    """Calendar-day part of an ISO-8601 timestamp (its first 10 characters)."""
    return timestamp[:10]


def require_timestamp(value, field_name: str = "timestamp") -> str:
    """Validate that ``value`` is an ISO-8601 string starting with a real date."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required")
    try:
        parse_iso_date(date_key(value))
    except ValueError:
        raise ValidationError(f"{field_name} must be an ISO-8601 timestamp") from None
    return value


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string with a ``Z`` suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def round_half_up(value: float) -> int:
    # Math.round semantics; Python's round() is banker's rounding.
    return int(math.floor(value + 0.5))
