"""Clock helpers shared by models, tokens and verification expiry."""

from datetime import UTC, datetime, timedelta


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(UTC)


def minutes_from_now(minutes: int) -> datetime:
    """Return the aware UTC instant ``minutes`` from now."""
    return utcnow() + timedelta(minutes=minutes)
