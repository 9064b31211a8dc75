"""Key metadata: creation time, optional expiration, optional untrusted comment."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import SerializerFunctionWrapHandler, model_serializer

from sigenv.models.base import SigenvBaseModel
from sigenv.models.timestamp import Clock, Timestamp, coerce_timestamp, now

C = TypeVar("C")

# Field names merged into the key record at the same nesting level as the key material.
METADATA_FIELDS = ("created_at", "expired_at", "comment")


class Metadata(SigenvBaseModel, Generic[C]):
    """Information attached to a key.

    The comment is advisory: it is never part of any signed byte stream.
    """

    created_at: Timestamp
    expired_at: Timestamp | None = None
    comment: C | None = None

    @classmethod
    def default(cls, clock: Clock | None = None) -> Metadata[C]:
        return cls(created_at=(clock or now)())

    def with_comment(self, comment: C) -> Metadata[C]:
        return self.model_copy(update={"comment": comment})

    def with_expiration(self, timestamp: int | datetime) -> Metadata[C]:
        """Set the expiration; raises TimestampError if it cannot be represented."""
        return self.model_copy(update={"expired_at": coerce_timestamp(timestamp)})

    @model_serializer(mode="wrap")
    def _omit_missing_comment(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data: dict[str, Any] = handler(self)
        if self.comment is None:
            data.pop("comment", None)
        return data


def nest_metadata_fields(data: Any) -> Any:
    """Move flat metadata fields of a key record under a ``metadata`` key.

    Records that already carry ``metadata`` (or are not dicts) are returned unchanged.
    """
    if not isinstance(data, dict) or "metadata" in data:
        return data
    nested = {k: data[k] for k in METADATA_FIELDS if k in data}
    rest = {k: v for k, v in data.items() if k not in METADATA_FIELDS}
    return {**rest, "metadata": nested}


def flatten_metadata_fields(data: dict[str, Any]) -> dict[str, Any]:
    """Inverse of nest_metadata_fields for serialized key records."""
    flat = {k: v for k, v in data.items() if k != "metadata"}
    flat.update(data.get("metadata") or {})
    return flat
