"""Signature: a signed Message, its encoded signature and an untrusted comment.

Serialized form::

    {
      "signed_artifact": {"data": ..., "timestamp": "...", "expiration": "..."},
      "signature": "RWQ...",
      "comment": "anybody can change me"
    }

Only ``signed_artifact`` is covered by the signature. ``comment`` (omitted when
absent) can be replaced without invalidating it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, TypeVar

from pydantic import SerializerFunctionWrapHandler, model_serializer

from sigenv.crypto import primitive
from sigenv.crypto.primitive import KeyId
from sigenv.crypto.signing import canonicalize
from sigenv.errors import SignatureError
from sigenv.models.base import SigenvBaseModel
from sigenv.models.envelope import Message
from sigenv.observability import get_logger

if TYPE_CHECKING:
    from sigenv.crypto.keys import PublicKey

logger = get_logger(__name__)

T = TypeVar("T")
C = TypeVar("C")


class Signature(SigenvBaseModel, Generic[T, C]):
    """Signed artifact with its signature and unsigned comment.

    Example:
        >>> signature = Signature[dict, str].model_validate_json(text)  # doctest: +SKIP
        >>> message = signature.verify(public_key)  # doctest: +SKIP
        >>> message.data["name"]  # doctest: +SKIP
        'Toto'
    """

    signed_artifact: Message[T]
    signature: str
    comment: C | None = None

    @model_serializer(mode="wrap")
    def _omit_missing_comment(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data: dict[str, Any] = handler(self)
        if self.comment is None:
            data.pop("comment", None)
        return data

    def raw_signature(self) -> bytes:
        """Decoded signature blob. Raises SignatureDecodeError if malformed."""
        return primitive.decode_signature_text(self.signature)

    @property
    def keynum(self) -> KeyId:
        """Key number of the key that produced this signature."""
        return primitive.signature_keynum(self.raw_signature())

    def with_comment(self, comment: C | None) -> Signature[T, C]:
        """Replace the untrusted comment; the signature stays valid."""
        return self.model_copy(update={"comment": comment})

    def verify(self, public_key: PublicKey[Any]) -> Message[T]:
        """Verify with ``public_key`` and release the signed Message.

        Raises:
            SignatureDecodeError: If the signature text is malformed.
            EncodingFailedError: If the Message cannot be canonically encoded.
            KeyMismatchError: If the signature was made by another key.
            SignatureVerificationError: If the signature does not match the Message.
        """
        try:
            blob = self.raw_signature()
            public_key.verify(canonicalize(self.signed_artifact), blob)
        except SignatureError as e:
            logger.warning(
                "signature.verify_failed",
                keynum=str(public_key.keynum),
                code=e.code,
                reason=e.message,
            )
            raise
        logger.debug("signature.verified", keynum=str(public_key.keynum))
        return self.signed_artifact
