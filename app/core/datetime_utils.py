import math
from datetime import UTC, datetime, timedelta
from typing import Annotated

from pydantic.functional_serializers import PlainSerializer

SECONDS_PER_DAY = 86400


def utcnow() -> datetime:
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes (e.g. read back from SQLite) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def weeks_from(start: datetime, weeks: int) -> datetime:
    return ensure_utc(start) + timedelta(days=weeks * 7)


def is_expired(expires_at: datetime, now: datetime | None = None) -> bool:
    now = ensure_utc(now) if now else utcnow()
    return ensure_utc(expires_at) <= now


def days_remaining(expires_at: datetime, now: datetime | None = None) -> int:
    """Whole days left until ``expires_at``, rounded up, never negative."""
    now = ensure_utc(now) if now else utcnow()
    seconds = (ensure_utc(expires_at) - now).total_seconds()
    return max(0, math.ceil(seconds / SECONDS_PER_DAY))


def _serialize_utc_datetime(v: datetime | None) -> str | None:
    if v is None:
        return None
    return ensure_utc(v).isoformat()


UTCDatetime = Annotated[datetime, PlainSerializer(_serialize_utc_datetime)]
