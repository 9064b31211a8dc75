"""Signing and public keys with metadata.

A SigningKey owns Ed25519 secret material plus Metadata. A PublicKey is derived
from it one-way and carries a value copy of the metadata. Both serialize to a
flat record: the encoded key material next to the metadata fields::

    {
      "public_key": "RWQ...",
      "created_at": "2024-12-24T15:02:48.845298Z",
      "expired_at": null,
      "comment": "testing key, do not use"
    }

``comment`` is omitted when absent; ``expired_at`` is always present.
Unknown fields are rejected.
"""

from __future__ import annotations

import copy
import os
from abc import ABC, abstractmethod
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Any, Generic, TypeVar

from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)
from pydantic import (
    ConfigDict,
    PlainSerializer,
    PlainValidator,
    SerializerFunctionWrapHandler,
    model_serializer,
    model_validator,
)

from sigenv.crypto import primitive
from sigenv.crypto.primitive import KeyId
from sigenv.errors import KeyDecodeError, KeyExpirationError
from sigenv.models.base import SigenvBaseModel
from sigenv.models.enums import KeyUsage
from sigenv.models.metadata import Metadata, flatten_metadata_fields, nest_metadata_fields
from sigenv.models.timestamp import Clock, coerce_timestamp, now
from sigenv.observability import get_logger

if TYPE_CHECKING:
    from sigenv.crypto.builder import SignatureBuilder
    from sigenv.crypto.signature import Signature

logger = get_logger(__name__)

C = TypeVar("C")

# Age in days after which to log a key rotation warning.
KEY_ROTATION_WARNING_DAYS = 365
# Recommended mode for signing key files (owner read/write only).
KEY_FILE_RECOMMENDED_MODE = 0o600
# Environment variable holding a JSON-encoded signing key.
ENV_SIGNING_KEY = "SIGENV_SIGNING_KEY"


def _validate_secret(value: Any) -> Ed25519PrivateKey:
    if isinstance(value, Ed25519PrivateKey):
        return value
    if not isinstance(value, str):
        raise KeyDecodeError(f"expected base64 text, got {type(value).__name__}")
    return primitive.decode_secret(value)


def _validate_public(value: Any) -> Ed25519PublicKey:
    if isinstance(value, Ed25519PublicKey):
        return value
    if not isinstance(value, str):
        raise KeyDecodeError(f"expected base64 text, got {type(value).__name__}")
    return primitive.decode_public(value)


SecretMaterial = Annotated[
    Ed25519PrivateKey,
    PlainValidator(_validate_secret),
    PlainSerializer(primitive.encode_secret, return_type=str),
]

PublicMaterial = Annotated[
    Ed25519PublicKey,
    PlainValidator(_validate_public),
    PlainSerializer(primitive.encode_public, return_type=str),
]


class KeyMetadata(ABC):
    """Accessors shared by signing and public keys.

    Keys compare equal when they have the same usage, key number and metadata.
    """

    @property
    @abstractmethod
    def keynum(self) -> KeyId: ...

    @property
    @abstractmethod
    def usage(self) -> KeyUsage: ...

    @property
    def created_at(self) -> datetime:
        return self.metadata.created_at

    @property
    def expired_at(self) -> datetime | None:
        return self.metadata.expired_at

    @property
    def comment(self) -> Any:
        return self.metadata.comment

    def is_expired(self, at: datetime | None = None) -> bool:
        """Whether the key's expiration is strictly before ``at`` (default: now)."""
        if self.metadata.expired_at is None:
            return False
        return self.metadata.expired_at < (at or now())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KeyMetadata):
            return NotImplemented
        return (
            self.usage == other.usage
            and self.keynum == other.keynum
            and self.metadata.model_dump() == other.metadata.model_dump()
        )


class SigningKey(KeyMetadata, SigenvBaseModel, Generic[C]):
    """A key able to sign data, producing a Signature verifiable by its PublicKey.

    Example:
        >>> key = SigningKey[str].generate().with_comment("release key")
        >>> key.comment
        'release key'
        >>> public_key = key.public_key()
        >>> public_key.keynum == key.keynum
        True
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    secret_key: SecretMaterial
    metadata: Metadata[C]

    @model_validator(mode="before")
    @classmethod
    def _nest_metadata(cls, data: Any) -> Any:
        return nest_metadata_fields(data)

    @model_serializer(mode="wrap")
    def _flatten_metadata(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        return flatten_metadata_fields(handler(self))

    @classmethod
    def generate(cls, clock: Clock | None = None) -> SigningKey[C]:
        """Generate a new signing key from the OS random source."""
        key = cls(secret_key=primitive.generate(), metadata={"created_at": (clock or now)()})
        logger.debug("key.generated", keynum=str(key.keynum))
        return key

    def with_comment(self, comment: C) -> SigningKey[C]:
        return self.model_copy(update={"metadata": self.metadata.with_comment(comment)})

    def with_expiration(self, timestamp: int | datetime) -> SigningKey[C]:
        """Declare when the key is supposed to expire.

        Raises:
            TimestampError: If the timestamp cannot be represented.
            KeyExpirationError: If the expiration is before the key creation time.
        """
        expired_at = coerce_timestamp(timestamp)
        if expired_at < self.metadata.created_at:
            raise KeyExpirationError(created_at=self.metadata.created_at, expired_at=expired_at)
        return self.model_copy(update={"metadata": self.metadata.with_expiration(expired_at)})

    def sign(
        self, builder: SignatureBuilder[Any, Any], clock: Clock | None = None
    ) -> Signature[Any, Any]:
        """Consume a SignatureBuilder to produce a Signature. See SignatureBuilder.sign."""
        return builder.sign(self, clock=clock)

    def sign_bytes(self, data: bytes) -> str:
        """Sign raw bytes and return the encoded signature text."""
        return primitive.b64encode(primitive.sign(self.secret_key, data))

    def public_key(self) -> PublicKey[C]:
        return PublicKey.from_signing_key(self)

    @property
    def keynum(self) -> KeyId:
        return primitive.keynum(self.secret_key.public_key())

    @property
    def usage(self) -> KeyUsage:
        return KeyUsage.SIGNING

    def __hash__(self) -> int:
        return hash((KeyUsage.SIGNING, bytes(self.keynum)))

    def __repr_args__(self) -> Iterator[tuple[str, Any]]:
        yield "keynum", str(self.keynum)
        yield "secret_key", "<secret>"
        yield "metadata", self.metadata


class PublicKey(KeyMetadata, SigenvBaseModel, Generic[C]):
    """A key able to verify a Signature emitted by the matching SigningKey."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    public_key: PublicMaterial
    metadata: Metadata[C]

    @model_validator(mode="before")
    @classmethod
    def _nest_metadata(cls, data: Any) -> Any:
        return nest_metadata_fields(data)

    @model_serializer(mode="wrap")
    def _flatten_metadata(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        return flatten_metadata_fields(handler(self))

    @classmethod
    def from_signing_key(cls, key: SigningKey[C]) -> PublicKey[C]:
        """Derive the public key; metadata is copied, not shared."""
        return cls(
            public_key=primitive.derive_public(key.secret_key),
            metadata=copy.deepcopy(dict(key.metadata)),
        )

    def verify(self, data: bytes, signature: str | bytes) -> None:
        """Check ``signature`` (text or decoded blob) against ``data``.

        Raises:
            SignatureDecodeError: If the signature is malformed.
            KeyMismatchError: If the signature was made by another key.
            SignatureVerificationError: If the signature does not match the data.
        """
        if isinstance(signature, str):
            signature = primitive.decode_signature_text(signature)
        primitive.verify(self.public_key, data, signature)

    @property
    def keynum(self) -> KeyId:
        return primitive.keynum(self.public_key)

    @property
    def usage(self) -> KeyUsage:
        return KeyUsage.VERIFYING

    def __hash__(self) -> int:
        return hash((KeyUsage.VERIFYING, bytes(self.keynum)))


def warn_if_key_old(
    key: KeyMetadata,
    max_age_days: int = KEY_ROTATION_WARNING_DAYS,
) -> None:
    age_days = (now() - key.created_at).days
    if age_days >= max_age_days:
        logger.warning(
            "key_rotation_recommended",
            keynum=str(key.keynum),
            age_days=age_days,
            max_age_days=max_age_days,
            created_at=key.created_at.isoformat(),
        )
    if key.is_expired():
        logger.warning(
            "key_expired",
            keynum=str(key.keynum),
            expired_at=key.expired_at.isoformat() if key.expired_at else None,
        )


def warn_if_key_file_permissions_loose(path: Path) -> None:
    """Warn when key file is group/other readable (recommend chmod 0600)."""
    try:
        mode = path.stat().st_mode
    except OSError:
        return
    if (mode & 0o77) != 0:
        logger.warning(
            "key_file_permissions_loose",
            path=str(path),
            mode=oct(mode),
            recommended=oct(KEY_FILE_RECOMMENDED_MODE),
            message="Signing key file is readable by group or others; consider chmod 0600.",
        )


def load_signing_key_from_file(path: str | Path, comment_type: Any = Any) -> SigningKey[Any]:
    """Load a JSON signing key file (synchronous, blocking I/O).

    Logs a security warning if the file is readable by group or others, and a
    rotation warning if the key is older than KEY_ROTATION_WARNING_DAYS.

    Raises:
        pydantic.ValidationError: If the file content is not a valid signing key.
    """
    path = Path(path)
    warn_if_key_file_permissions_loose(path)
    key = SigningKey[comment_type].model_validate_json(path.read_text(encoding="utf-8"))
    logger.debug("key.loaded", keynum=str(key.keynum), path=str(path))
    warn_if_key_old(key)
    return key


def load_signing_key_from_env(
    var_name: str = ENV_SIGNING_KEY, comment_type: Any = Any
) -> SigningKey[Any]:
    """From env var (JSON string). Raises ValueError if unset or empty."""
    value = os.environ.get(var_name)
    if not value:
        raise ValueError(f"Environment variable {var_name!r} is not set or empty")
    return SigningKey[comment_type].model_validate_json(value)


def load_public_key_from_file(path: str | Path, comment_type: Any = Any) -> PublicKey[Any]:
    path = Path(path)
    return PublicKey[comment_type].model_validate_json(path.read_text(encoding="utf-8"))


def write_signing_key_file(key: SigningKey[Any], path: str | Path) -> Path:
    """Write the key as JSON and restrict the file to its owner (mode 0600)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, KEY_FILE_RECOMMENDED_MODE)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        f.write(key.model_dump_json(indent=2))
    path.chmod(KEY_FILE_RECOMMENDED_MODE)
    return path
