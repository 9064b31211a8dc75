"""Tests for canonical signing bytes."""

from __future__ import annotations

from typing import Any

import jcs
import pytest

from sigenv.crypto.signing import canonicalize
from sigenv.errors import EncodingFailedError
from sigenv.models.envelope import Message
from sigenv.models.timestamp import from_second
from tests.factories import TIMESTAMP_1, TIMESTAMP_2, Person


def _message(data: Any, expiration: int | None = None) -> Message[Any]:
    return Message[Any](
        data=data,
        timestamp=from_second(TIMESTAMP_1),
        expiration=from_second(expiration) if expiration is not None else None,
    )


def test_canonicalize_exact_bytes() -> None:
    result = canonicalize(_message({"name": "Toto", "age": 42}))
    assert result == b'{"data":{"age":42,"name":"Toto"},"timestamp":"2023-11-14T22:13:20.000000Z"}'


def test_canonicalize_includes_expiration() -> None:
    result = canonicalize(_message(1, expiration=TIMESTAMP_2))
    assert result == (
        b'{"data":1,"expiration":"2027-01-15T08:00:00.000000Z",'
        b'"timestamp":"2023-11-14T22:13:20.000000Z"}'
    )


def test_canonicalize_same_content_different_key_order() -> None:
    a = canonicalize(_message({"name": "Toto", "age": 42}))
    b = canonicalize(_message({"age": 42, "name": "Toto"}))
    assert a == b


def test_canonicalize_model_payload_matches_dict_payload() -> None:
    """A typed payload and its JSON form produce the same bytes."""
    message = Message[Person](data=Person(name="Toto", age=42), timestamp=from_second(TIMESTAMP_1))
    typed = canonicalize(message)
    assert typed == canonicalize(_message({"name": "Toto", "age": 42}))


def test_canonicalize_matches_jcs_of_json_dump() -> None:
    message = _message({"nested": {"b": [1, 2.5, "x"], "a": None}}, expiration=TIMESTAMP_2)
    assert canonicalize(message) == jcs.canonicalize(message.model_dump(mode="json"))


def test_canonicalize_integral_float_same_as_int() -> None:
    assert canonicalize(_message({"age": 42})) == canonicalize(_message({"age": 42.0}))


def test_canonicalize_deterministic() -> None:
    message = _message({"name": "Toto", "unicode": "été"})
    assert canonicalize(message) == canonicalize(message)


@pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_float_rejected(value: float) -> None:
    with pytest.raises(EncodingFailedError) as exc_info:
        canonicalize(_message({"readings": [1.0, value]}))
    assert exc_info.value.details["path"] == "data.readings[1]"
    assert exc_info.value.code == "sigenv:encoding/failed"


def test_unserializable_payload_rejected() -> None:
    with pytest.raises(EncodingFailedError):
        canonicalize(_message({"handle": object()}))
