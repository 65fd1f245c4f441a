"""Time utilities."""
from datetime import UTC, datetime, timedelta, timezone


def utcnow() -> datetime:
    """Return current UTC time with timezone awareness."""

    return datetime.now(tz=UTC)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and normalise aware ones to UTC."""

    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_epoch_ms(value: datetime) -> int:
    return int(as_utc(value).timestamp() * 1000)


def iso_millis(value: datetime) -> str:
    """Render ``value`` as ``2026-01-18T23:59:59.999Z``."""

    return as_utc(value).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def just_before(value: datetime) -> datetime:
    """Return the last millisecond strictly before ``value``."""

    return as_utc(value) - timedelta(milliseconds=1)


__all__ = ["utcnow", "as_utc", "to_epoch_ms", "iso_millis", "just_before"]
