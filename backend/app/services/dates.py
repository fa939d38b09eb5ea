from __future__ import annotations

from datetime import datetime, timezone

# Timestamps are stored as naive UTC, matching the datetime.utcnow column defaults.


def utcnow() -> datetime:
    return datetime.utcnow()


def as_utc_naive(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def is_past(value: datetime | None, *, now: datetime | None = None) -> bool:
    if value is None:
        return False
    return as_utc_naive(value) < (now or utcnow())


def iso_z(value: datetime | None) -> str | None:
    """Serialise a stored timestamp as ISO-8601 UTC with a trailing Z."""
    if value is None:
        return None
    return as_utc_naive(value).replace(microsecond=0).isoformat() + "Z"
