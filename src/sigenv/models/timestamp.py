"""Timestamp codec.

Timestamps are timezone-aware datetimes normalised to UTC. Their text form
is RFC 3339 with a ``Z`` suffix, a fixed-width year and fixed microsecond
precision, so that the text sorts in the same order as the instants it
represents::

    2024-12-27T14:59:30.000000Z
    2024-12-23T00:12:54.537530Z

Parsing accepts any RFC 3339 text with an offset, with or without fractional
seconds (e.g. ``2024-12-27T14:59:30Z``).

Use ``Timestamp`` as a pydantic field type for a required timestamp and
``Timestamp | None`` for an optional one. An optional field that is absent or
``null`` is ``None``; a field that is present but unparsable is always an error.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Annotated, Any

from pydantic import PlainSerializer, PlainValidator

from sigenv.errors import TimestampError

Clock = Callable[[], datetime]

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def now() -> datetime:
    """Current UTC time; the default clock."""
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    value = value.astimezone(timezone.utc)
    return (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
        f"T{value.hour:02d}:{value.minute:02d}:{value.second:02d}.{value.microsecond:06d}Z"
    )


def parse_timestamp(value: Any) -> datetime:
    """Parse RFC 3339 text (or an aware datetime) into a UTC datetime.

    Raises:
        TimestampError: If the value is not text, is malformed, carries no UTC offset,
            or falls outside years 1-9999 once converted to UTC.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if text[-1:] in ("z", "Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as e:
            raise TimestampError(value, "not an RFC 3339 timestamp") from e
    else:
        raise TimestampError(value, f"expected text, got {type(value).__name__}")
    if parsed.tzinfo is None or parsed.utcoffset() is None:
        raise TimestampError(value, "missing UTC offset")
    try:
        return parsed.astimezone(timezone.utc)
    except OverflowError as e:
        raise TimestampError(value, "out of the representable range") from e


def from_second(seconds: int) -> datetime:
    """Convert Unix seconds to a timestamp.

    Raises:
        TimestampError: If ``seconds`` is not an integer or is out of range.
    """
    if isinstance(seconds, bool) or not isinstance(seconds, int):
        raise TimestampError(seconds, f"expected integer seconds, got {type(seconds).__name__}")
    try:
        return _EPOCH + timedelta(seconds=seconds)
    except OverflowError as e:
        raise TimestampError(seconds, "out of the representable range") from e


def to_second(value: datetime) -> int:
    return int((value - _EPOCH) // timedelta(seconds=1))


def coerce_timestamp(value: int | datetime) -> datetime:
    """Accept Unix seconds or an aware datetime, as setters on builders and keys do."""
    if isinstance(value, datetime):
        return parse_timestamp(value)
    return from_second(value)


Timestamp = Annotated[
    datetime,
    PlainValidator(parse_timestamp),
    PlainSerializer(format_timestamp, return_type=str),
]
