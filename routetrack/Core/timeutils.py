"""Timestamp helpers shared by the engine, the repositories and the schemas."""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalize a datetime to UTC.

    Naive values are assumed to already be UTC (SQLite drops tzinfo on
    read-back); aware values are converted.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def from_epoch_ms(value: float) -> datetime:
    """Convert epoch milliseconds (JavaScript ``Date.now()``) to UTC."""
    return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)


def to_iso_z(value: Optional[datetime]) -> Optional[str]:
    """ISO-8601 with a ``Z`` suffix, the format the API returns."""
    if value is None:
        return None
    return ensure_utc(value).isoformat().replace("+00:00", "Z")
