"""Time helpers."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_ONE_MS = timedelta(milliseconds=1)


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


def to_epoch_ms(value: datetime) -> int:
    """Return ``value`` as integer milliseconds since the Unix epoch."""

    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return (value - _EPOCH) // _ONE_MS


__all__ = ["to_epoch_ms", "utc_now"]
