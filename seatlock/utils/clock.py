from datetime import datetime, timedelta, timezone
from typing import Optional


def utcnow() -> datetime:
    """Current instant as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalise a timestamp read back from the database.

    Backends without timezone support (SQLite) return naive values; every
    timestamp is written in UTC, so a naive value is UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def expires_in(seconds: float, now: Optional[datetime] = None) -> datetime:
    return (now or utcnow()) + timedelta(seconds=seconds)
