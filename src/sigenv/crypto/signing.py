"""Canonical signing bytes with JCS canonicalization (RFC 8785).

The signer and the verifier must derive byte-identical input from a Message,
whatever format the envelope travels in. Both sides go through canonicalize().
"""

import math
from typing import Any, cast

import jcs
from pydantic_core import PydanticSerializationError

from sigenv.errors import EncodingFailedError
from sigenv.models.envelope import Message


def _find_non_finite(value: Any, path: str = "data") -> str | None:
    if isinstance(value, float) and not math.isfinite(value):
        return path
    if isinstance(value, dict):
        for k, v in value.items():
            found = _find_non_finite(v, f"{path}.{k}")
            if found:
                return found
    elif isinstance(value, (list, tuple)):
        for i, v in enumerate(value):
            found = _find_non_finite(v, f"{path}[{i}]")
            if found:
                return found
    return None


def canonicalize(message: Message[Any]) -> bytes:
    """Encode a Message into its canonical signing bytes.

    Raises:
        EncodingFailedError: If the payload has no canonical JSON representation.
    """
    try:
        bad_path = _find_non_finite(message.model_dump()["data"])
        if bad_path:
            raise EncodingFailedError(
                "non-finite float values are not representable", details={"path": bad_path}
            )
        payload = message.model_dump(mode="json")
        return cast(bytes, jcs.canonicalize(payload))
    except (PydanticSerializationError, TypeError, ValueError) as e:
        raise EncodingFailedError(str(e)) from e
