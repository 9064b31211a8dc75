"""sigenv Error Taxonomy.

This module defines the error hierarchy for signed envelopes,
providing structured error handling with specific error codes
and context information.

None of these errors are retried internally: they are raised to the
caller, which owns any retry policy (e.g. re-signing with a fresh timestamp).
"""
from __future__ import annotations

from datetime import datetime
from typing import Any


class SigenvError(Exception):
    """Base exception for all sigenv errors.

    Attributes:
        code: Error code following the sigenv:<area>/<reason> pattern
        message: Human-readable error message
        details: Optional additional error context
    """

    def __init__(self, code: str, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Serialize to ``{code, message, details}`` dict."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class TimestampError(SigenvError, ValueError):
    """Raised when a value cannot be interpreted as a valid timestamp.

    Covers integers outside the representable range as well as malformed
    or timezone-less text. Subclasses ValueError so that pydantic reports it
    as a validation error when it happens during deserialization.
    """

    def __init__(self, value: Any, reason: str, details: dict[str, Any] | None = None) -> None:
        message = f"Failed to parse timestamp {value!r}: {reason}"
        super().__init__(
            code="sigenv:timestamp/invalid",
            message=message,
            details={"value": repr(value), "reason": reason, **(details or {})},
        )
        self.value = value
        self.reason = reason


class KeyDecodeError(SigenvError, ValueError):
    """Raised when encoded key material cannot be decoded."""

    def __init__(self, reason: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            code="sigenv:key/malformed",
            message=f"Malformed key material: {reason}",
            details=details or {},
        )
        self.reason = reason


class KeyExpirationError(SigenvError, ValueError):
    """Raised when a key expiration is set earlier than the key creation time."""

    def __init__(
        self, created_at: datetime, expired_at: datetime, details: dict[str, Any] | None = None
    ) -> None:
        message = (
            f"Key expiration {expired_at.isoformat()} is before "
            f"its creation time {created_at.isoformat()}"
        )
        super().__init__(
            code="sigenv:key/expiration_before_creation",
            message=message,
            details={
                "created_at": created_at.isoformat(),
                "expired_at": expired_at.isoformat(),
                **(details or {}),
            },
        )
        self.created_at = created_at
        self.expired_at = expired_at


class SignatureBuilderError(SigenvError):
    """Base class for failures while signing a SignatureBuilder."""


class PastExpirationError(SignatureBuilderError):
    """Raised when the expiration is earlier than the signing timestamp.

    The expiration is never clamped: the caller must pick a later
    expiration or an earlier timestamp.

    Attributes:
        timestamp: Resolved timestamp the message would be signed with
        expiration: Requested expiration
    """

    def __init__(
        self, timestamp: datetime, expiration: datetime, details: dict[str, Any] | None = None
    ) -> None:
        message = f"Expiration {expiration.isoformat()} is before timestamp {timestamp.isoformat()}"
        super().__init__(
            code="sigenv:builder/past_expiration",
            message=message,
            details={
                "timestamp": timestamp.isoformat(),
                "expiration": expiration.isoformat(),
                **(details or {}),
            },
        )
        self.timestamp = timestamp
        self.expiration = expiration


class EncodingFailedError(SigenvError):
    """Raised when a message envelope cannot be canonically encoded.

    Indicates a payload type incompatible with the canonical encoding
    (e.g. NaN floats or objects without a JSON representation).
    """

    def __init__(self, reason: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            code="sigenv:encoding/failed",
            message=f"Encoding message in canonical format failed: {reason}",
            details=details or {},
        )
        self.reason = reason


class SignatureError(SigenvError):
    """Base class for failures while decoding or verifying a Signature."""


class SignatureDecodeError(SignatureError):
    """Raised when the stored signature text is not a valid encoded signature."""

    def __init__(self, reason: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            code="sigenv:signature/malformed",
            message=f"Decoding signature failed: {reason}",
            details=details or {},
        )
        self.reason = reason


class SignatureVerificationError(SignatureError):
    """Raised when the cryptographic check fails.

    Attributes:
        reason: Short machine-readable reason (``invalid_signature``, ``key_mismatch``)
    """

    def __init__(
        self,
        message: str,
        reason: str = "invalid_signature",
        details: dict[str, Any] | None = None,
        code: str = "sigenv:signature/invalid",
    ) -> None:
        super().__init__(
            code=code,
            message=message,
            details={"reason": reason, **(details or {})},
        )
        self.reason = reason


class KeyMismatchError(SignatureVerificationError):
    """Raised when a signature was produced by a different key than the verifying one.

    Attributes:
        expected: Key number of the verifying public key (hex)
        actual: Key number embedded in the signature (hex)
    """

    def __init__(self, expected: str, actual: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            message=f"Signature was made by key {actual}, not by key {expected}",
            reason="key_mismatch",
            details={"expected": expected, "actual": actual, **(details or {})},
            code="sigenv:signature/key_mismatch",
        )
        self.expected = expected
        self.actual = actual
