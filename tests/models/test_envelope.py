"""Tests for the Message envelope."""

from typing import Any

import pytest
from pydantic import ValidationError

from sigenv.models.envelope import Message
from sigenv.models.timestamp import from_second
from tests.factories import TIMESTAMP_1, TIMESTAMP_2, Person


class TestMessage:
    def test_accessors(self) -> None:
        message = Message[Person](
            data=Person(name="Toto", age=42),
            timestamp=from_second(TIMESTAMP_1),
            expiration=from_second(TIMESTAMP_2),
        )
        assert message.data.name == "Toto"
        assert message.timestamp == from_second(TIMESTAMP_1)
        assert message.expiration == from_second(TIMESTAMP_2)

    def test_expiration_omitted_when_absent(self) -> None:
        message = Message[Any](data={"name": "Toto"}, timestamp=from_second(TIMESTAMP_1))
        assert message.model_dump(mode="json") == {
            "data": {"name": "Toto"},
            "timestamp": "2023-11-14T22:13:20.000000Z",
        }

    def test_expiration_serialized_when_present(self) -> None:
        message = Message[Any](
            data=1, timestamp=from_second(TIMESTAMP_1), expiration=from_second(TIMESTAMP_2)
        )
        assert message.model_dump(mode="json")["expiration"] == "2027-01-15T08:00:00.000000Z"

    def test_json_roundtrip_typed_payload(self) -> None:
        message = Message[Person](
            data=Person(name="Toto", age=42), timestamp=from_second(TIMESTAMP_1)
        )
        restored = Message[Person].model_validate_json(message.model_dump_json())
        assert restored == message
        assert restored.expiration is None

    def test_payload_type_enforced(self) -> None:
        with pytest.raises(ValidationError):
            Message[Person].model_validate(
                {"data": {"name": "Toto"}, "timestamp": "2023-11-14T22:13:20Z"}
            )

    def test_missing_timestamp_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Message[Any].model_validate({"data": 1})

    def test_unknown_field_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Message[Any].model_validate(
                {"data": 1, "timestamp": "2023-11-14T22:13:20Z", "signer": "me"}
            )


class TestMessageExpiry:
    """is_expired is informational; it never affects verification."""

    def test_no_expiration_never_expires(self) -> None:
        message = Message[Any](data=1, timestamp=from_second(TIMESTAMP_1))
        assert message.is_expired() is False

    def test_expired_relative_to_instant(self) -> None:
        message = Message[Any](
            data=1, timestamp=from_second(TIMESTAMP_1), expiration=from_second(TIMESTAMP_2)
        )
        assert message.is_expired(at=from_second(TIMESTAMP_2 + 1)) is True
        assert message.is_expired(at=from_second(TIMESTAMP_2)) is False
        assert message.is_expired(at=from_second(TIMESTAMP_1)) is False
