"""Tests for sigenv error handling."""

import pytest

from sigenv.errors import (
    EncodingFailedError,
    KeyDecodeError,
    KeyExpirationError,
    KeyMismatchError,
    PastExpirationError,
    SigenvError,
    SignatureBuilderError,
    SignatureDecodeError,
    SignatureError,
    SignatureVerificationError,
    TimestampError,
)
from sigenv.models.timestamp import from_second


class TestSigenvError:
    """Test SigenvError base class."""

    def test_basic_error_creation(self) -> None:
        error = SigenvError(code="sigenv:test/error", message="Test error message")

        assert error.code == "sigenv:test/error"
        assert error.message == "Test error message"
        assert error.details == {}
        assert str(error) == "Test error message"

    def test_error_with_details(self) -> None:
        details = {"context": "test", "value": 42}
        error = SigenvError(code="sigenv:test/detailed", message="Detailed error", details=details)

        assert error.details == details

    def test_to_dict(self) -> None:
        error = SigenvError("sigenv:test/error", "msg", {"key": "value"})
        assert error.to_dict() == {
            "code": "sigenv:test/error",
            "message": "msg",
            "details": {"key": "value"},
        }

    def test_error_details_not_shared(self) -> None:
        error1 = SigenvError("code", "msg")
        error2 = SigenvError("code", "msg")
        error1.details["key"] = "value"

        assert error2.details == {}


class TestTimestampError:
    def test_message_and_details(self) -> None:
        error = TimestampError("soon", "not an RFC 3339 timestamp")

        assert error.code == "sigenv:timestamp/invalid"
        assert error.message == "Failed to parse timestamp 'soon': not an RFC 3339 timestamp"
        assert error.details == {"value": "'soon'", "reason": "not an RFC 3339 timestamp"}
        assert error.value == "soon"

    def test_is_value_error(self) -> None:
        assert isinstance(TimestampError(1, "x"), ValueError)


class TestKeyErrors:
    def test_decode_error(self) -> None:
        error = KeyDecodeError("bad length")
        assert error.code == "sigenv:key/malformed"
        assert "bad length" in error.message
        assert isinstance(error, ValueError)

    def test_expiration_error(self) -> None:
        created, expired = from_second(1800000000), from_second(1700000000)
        error = KeyExpirationError(created_at=created, expired_at=expired)

        assert error.code == "sigenv:key/expiration_before_creation"
        assert error.created_at == created
        assert error.expired_at == expired
        assert error.details["created_at"] == created.isoformat()
        assert isinstance(error, ValueError)


class TestPastExpirationError:
    def test_attributes(self) -> None:
        timestamp, expiration = from_second(1800000000), from_second(1700000000)
        error = PastExpirationError(timestamp=timestamp, expiration=expiration)

        assert error.code == "sigenv:builder/past_expiration"
        assert error.timestamp == timestamp
        assert error.expiration == expiration
        assert error.details == {
            "timestamp": timestamp.isoformat(),
            "expiration": expiration.isoformat(),
        }
        assert isinstance(error, SignatureBuilderError)


class TestSignatureErrors:
    def test_decode_error(self) -> None:
        error = SignatureDecodeError("invalid base64")
        assert error.code == "sigenv:signature/malformed"
        assert isinstance(error, SignatureError)

    def test_verification_error_defaults(self) -> None:
        error = SignatureVerificationError("bad signature")
        assert error.code == "sigenv:signature/invalid"
        assert error.reason == "invalid_signature"
        assert error.details == {"reason": "invalid_signature"}

    def test_key_mismatch(self) -> None:
        error = KeyMismatchError(expected="00aa", actual="11bb")
        assert error.code == "sigenv:signature/key_mismatch"
        assert error.reason == "key_mismatch"
        assert error.expected == "00aa"
        assert error.actual == "11bb"
        assert "11bb" in error.message
        assert isinstance(error, SignatureVerificationError)

    def test_encoding_failed(self) -> None:
        error = EncodingFailedError("nan", details={"path": "data.x"})
        assert error.code == "sigenv:encoding/failed"
        assert error.details == {"path": "data.x"}
        assert not isinstance(error, SignatureError)


@pytest.mark.parametrize(
    "error",
    [
        TimestampError(1, "x"),
        KeyDecodeError("x"),
        EncodingFailedError("x"),
        SignatureDecodeError("x"),
        KeyMismatchError("a", "b"),
    ],
)
def test_all_errors_share_base(error: SigenvError) -> None:
    assert isinstance(error, SigenvError)
    assert error.to_dict()["code"].startswith("sigenv:")
