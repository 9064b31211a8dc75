"""Signature builder: data waiting to be signed.

Every setter returns a new builder; a partially configured builder is never
mutated. The timestamp defaults to the clock reading at sign time, not at
construction time.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from sigenv.crypto.signature import Signature
from sigenv.crypto.signing import canonicalize
from sigenv.errors import PastExpirationError
from sigenv.models.envelope import Message
from sigenv.models.timestamp import Clock, coerce_timestamp, format_timestamp, now
from sigenv.observability import get_logger

if TYPE_CHECKING:
    from sigenv.crypto.keys import SigningKey

logger = get_logger(__name__)

M = TypeVar("M")
C = TypeVar("C")


@dataclass(frozen=True)
class SignatureBuilder(Generic[M, C]):
    """Payload plus the signing options applied when it is signed.

    Example:
        >>> builder = (
        ...     SignatureBuilder({"name": "Toto", "age": 42})
        ...     .with_timestamp(1735311570)
        ...     .with_expiration(1735397970)
        ...     .with_comment("anybody can change me")
        ... )
        >>> signature = builder.sign(signing_key)  # doctest: +SKIP
    """

    message: M
    # None means "now" at sign time
    timestamp: datetime | None = None
    expires_at: datetime | None = None
    comment: C | None = None

    def with_timestamp(self, timestamp: int | datetime) -> SignatureBuilder[M, C]:
        """This timestamp **will be** signed with the message. Raises TimestampError."""
        return dataclasses.replace(self, timestamp=coerce_timestamp(timestamp))

    def with_expiration(self, timestamp: int | datetime) -> SignatureBuilder[M, C]:
        """This expiration **will be** signed with the message. Raises TimestampError."""
        return dataclasses.replace(self, expires_at=coerce_timestamp(timestamp))

    def with_comment(self, comment: C) -> SignatureBuilder[M, C]:
        """The comment **will not be** signed (signify's "untrusted comment")."""
        return dataclasses.replace(self, comment=comment)

    def sign(self, signing_key: SigningKey[Any], clock: Clock | None = None) -> Signature[M, C]:
        """Sign the message, producing a Signature.

        Raises:
            PastExpirationError: If the expiration is before the resolved timestamp.
            EncodingFailedError: If the message cannot be canonically encoded.
        """
        timestamp = (
            self.timestamp if self.timestamp is not None else coerce_timestamp((clock or now)())
        )
        if self.expires_at is not None and timestamp > self.expires_at:
            raise PastExpirationError(timestamp=timestamp, expiration=self.expires_at)

        message = Message[Any](data=self.message, timestamp=timestamp, expiration=self.expires_at)
        signature = signing_key.sign_bytes(canonicalize(message))

        logger.debug(
            "signature.created",
            keynum=str(signing_key.keynum),
            timestamp=format_timestamp(timestamp),
            expiration=format_timestamp(self.expires_at) if self.expires_at else None,
        )
        return Signature[Any, Any](
            signed_artifact=message,
            signature=signature,
            comment=self.comment,
        )
