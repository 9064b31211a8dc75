"""sigenv models.

Pydantic models for key metadata and message envelopes, and the timestamp
codec they share.
"""

# Base models
from sigenv.models.base import SigenvBaseModel

# Enums
from sigenv.models.enums import KeyUsage

# Timestamp codec
from sigenv.models.timestamp import (
    Clock,
    Timestamp,
    coerce_timestamp,
    format_timestamp,
    from_second,
    now,
    parse_timestamp,
    to_second,
)

# Metadata and envelope
from sigenv.models.metadata import Metadata
from sigenv.models.envelope import Message

__all__ = [
    "Clock",
    "KeyUsage",
    "Message",
    "Metadata",
    "SigenvBaseModel",
    "Timestamp",
    "coerce_timestamp",
    "format_timestamp",
    "from_second",
    "now",
    "parse_timestamp",
    "to_second",
]
