"""
Time helpers for SafeWatch.

All timestamps handled by the core are timezone-aware UTC datetimes.
"""

from datetime import datetime, timezone
from typing import Optional, Union


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def from_epoch(value: Union[int, float], *, millis: bool = False) -> datetime:
    if millis:
        value = value / 1000.0
    return datetime.fromtimestamp(value, tz=timezone.utc)


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 string ("Z" suffix accepted); None if unparseable."""
    if not value:
        return None
    try:
        return ensure_utc(datetime.fromisoformat(value.strip().replace("Z", "+00:00")))
    except ValueError:
        return None


def log_stamp(value: datetime) -> str:
    """Filesystem-safe timestamp, e.g. 2025-01-01T12-30-05."""
    return ensure_utc(value).strftime("%Y-%m-%dT%H-%M-%S")
