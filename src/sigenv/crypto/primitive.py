"""Ed25519 signing primitive with signify-style framing.

Every encoded blob starts with the algorithm tag ``Ed`` and the 8-byte key
number of the key it belongs to:

- secret key: ``Ed`` + keynum + 32-byte seed
- public key: ``Ed`` + keynum + 32-byte raw public key
- signature: ``Ed`` + keynum + 64-byte Ed25519 signature

The key number is the first 8 bytes of SHA-256 over the raw public key. Because
signatures embed it, verification can tell a signature made by another key
apart from a corrupted one.
"""

from __future__ import annotations

import base64
import binascii
import hashlib

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)

from sigenv.errors import (
    KeyDecodeError,
    KeyMismatchError,
    SignatureDecodeError,
    SignatureVerificationError,
)

PKALG = b"Ed"
KEYNUM_LEN = 8
SEED_LEN = 32
PUBLIC_KEY_LEN = 32
SIGNATURE_LEN = 64

_HEADER_LEN = len(PKALG) + KEYNUM_LEN


class KeyId(bytes):
    """Key number: public identifier derived from a key's public material."""

    def __str__(self) -> str:
        return self.hex()

    def __repr__(self) -> str:
        return f"KeyId('{self.hex()}')"


def generate() -> Ed25519PrivateKey:
    return Ed25519PrivateKey.generate()


def derive_public(secret: Ed25519PrivateKey) -> Ed25519PublicKey:
    return secret.public_key()


def _raw_public(public: Ed25519PublicKey) -> bytes:
    return public.public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )


def keynum(public: Ed25519PublicKey) -> KeyId:
    return KeyId(hashlib.sha256(_raw_public(public)).digest()[:KEYNUM_LEN])


def b64encode(blob: bytes) -> str:
    return base64.b64encode(blob).decode("ascii")


def b64decode(text: str) -> bytes:
    """Strict standard-alphabet base64; raises binascii.Error on invalid input."""
    return base64.b64decode(text.encode("ascii"), validate=True)


def _split(blob: bytes, body_len: int, what: str) -> tuple[KeyId, bytes]:
    if len(blob) != _HEADER_LEN + body_len:
        raise ValueError(f"{what} must be {_HEADER_LEN + body_len} bytes, got {len(blob)}")
    if blob[: len(PKALG)] != PKALG:
        raise ValueError(f"unsupported {what} algorithm {blob[: len(PKALG)]!r}")
    return KeyId(blob[len(PKALG) : _HEADER_LEN]), blob[_HEADER_LEN:]


def encode_secret(secret: Ed25519PrivateKey) -> str:
    seed = secret.private_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PrivateFormat.Raw,
        encryption_algorithm=serialization.NoEncryption(),
    )
    return b64encode(PKALG + keynum(secret.public_key()) + seed)


def decode_secret(text: str) -> Ed25519PrivateKey:
    """Decode a secret key blob. Raises KeyDecodeError if invalid."""
    try:
        embedded, seed = _split(b64decode(text), SEED_LEN, "secret key")
    except (binascii.Error, ValueError) as e:
        raise KeyDecodeError(str(e)) from e
    secret = Ed25519PrivateKey.from_private_bytes(seed)
    if keynum(secret.public_key()) != embedded:
        raise KeyDecodeError("embedded key number does not match the key")
    return secret


def encode_public(public: Ed25519PublicKey) -> str:
    return b64encode(PKALG + keynum(public) + _raw_public(public))


def decode_public(text: str) -> Ed25519PublicKey:
    """Decode a public key blob. Raises KeyDecodeError if invalid."""
    try:
        embedded, raw = _split(b64decode(text), PUBLIC_KEY_LEN, "public key")
        public = Ed25519PublicKey.from_public_bytes(raw)
    except (binascii.Error, ValueError) as e:
        raise KeyDecodeError(str(e)) from e
    if keynum(public) != embedded:
        raise KeyDecodeError("embedded key number does not match the key")
    return public


def sign(secret: Ed25519PrivateKey, data: bytes) -> bytes:
    raw_signature = secret.sign(data)
    return PKALG + keynum(secret.public_key()) + raw_signature


def decode_signature_text(text: str) -> bytes:
    """Decode signature text into a signature blob. Raises SignatureDecodeError."""
    try:
        blob = b64decode(text)
    except (binascii.Error, ValueError) as e:
        raise SignatureDecodeError(f"invalid base64: {e}") from e
    try:
        _split(blob, SIGNATURE_LEN, "signature")
    except ValueError as e:
        raise SignatureDecodeError(str(e)) from e
    return blob


def signature_keynum(blob: bytes) -> KeyId:
    try:
        embedded, _ = _split(blob, SIGNATURE_LEN, "signature")
    except ValueError as e:
        raise SignatureDecodeError(str(e)) from e
    return embedded


def verify(public: Ed25519PublicKey, data: bytes, blob: bytes) -> None:
    """Check a signature blob against ``data``.

    Raises:
        SignatureDecodeError: If the blob is malformed.
        KeyMismatchError: If the blob was made by another key.
        SignatureVerificationError: If the signature does not match the data.
    """
    try:
        embedded, raw_signature = _split(blob, SIGNATURE_LEN, "signature")
    except ValueError as e:
        raise SignatureDecodeError(str(e)) from e
    expected = keynum(public)
    if embedded != expected:
        raise KeyMismatchError(expected=expected.hex(), actual=embedded.hex())
    try:
        public.verify(raw_signature, data)
    except InvalidSignature as e:
        raise SignatureVerificationError(
            "Signature verification failed: message may have been tampered with "
            "or signature is invalid.",
            details={"keynum": expected.hex()},
        ) from e
