"""Message envelope: the exact value whose canonical encoding gets signed.

A Message carries the caller's payload together with the signing timestamp
and an optional expiration. Both timestamps are part of the signed bytes.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import SerializerFunctionWrapHandler, model_serializer

from sigenv.models.base import SigenvBaseModel
from sigenv.models.timestamp import Timestamp, now

T = TypeVar("T")


class Message(SigenvBaseModel, Generic[T]):
    """Signed artifact: payload, signing timestamp and optional expiration.

    Example:
        >>> from sigenv.models.timestamp import from_second
        >>> msg = Message[dict](data={"name": "Toto"}, timestamp=from_second(1700000000))
        >>> msg.model_dump(mode="json")
        {'data': {'name': 'Toto'}, 'timestamp': '2023-11-14T22:13:20.000000Z'}
    """

    data: T
    timestamp: Timestamp
    expiration: Timestamp | None = None

    def is_expired(self, at: datetime | None = None) -> bool:
        """Whether the expiration is strictly before ``at`` (default: now).

        Informational only: verification never enforces expiration.
        """
        if self.expiration is None:
            return False
        return self.expiration < (at or now())

    @model_serializer(mode="wrap")
    def _omit_missing_expiration(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data: dict[str, Any] = handler(self)
        if self.expiration is None:
            data.pop("expiration", None)
        return data
