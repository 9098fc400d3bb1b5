"""
Time Utilities - Conversions between datetimes and epoch milliseconds.

All engine arithmetic happens on integer Unix milliseconds; naive datetimes
are interpreted as UTC.
"""

from datetime import datetime, timedelta, timezone

MS_PER_SECOND = 1_000
MS_PER_MINUTE = 60 * MS_PER_SECOND
MS_PER_HOUR = 60 * MS_PER_MINUTE
MS_PER_DAY = 24 * MS_PER_HOUR
MS_PER_WEEK = 7 * MS_PER_DAY
MS_PER_MONTH = 30 * MS_PER_DAY  # fixed approximation, not calendar-aware
MS_PER_YEAR = 365 * MS_PER_DAY

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def ensure_utc(instant: datetime) -> datetime:
    """Attach UTC to naive datetimes; convert aware ones to UTC."""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def to_millis(instant: datetime) -> int:
    """Convert a datetime to integer Unix epoch milliseconds."""
    delta = ensure_utc(instant) - _EPOCH
    return (delta.days * MS_PER_DAY) + (delta.seconds * MS_PER_SECOND) + (delta.microseconds // 1_000)


def from_millis(ms: int | float) -> datetime:
    """Convert Unix epoch milliseconds to an aware UTC datetime."""
    return _EPOCH + timedelta(milliseconds=ms)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
