"""Shared pytest fixtures for sigenv tests."""

from __future__ import annotations

from datetime import datetime
from typing import Any

import pytest

from sigenv.crypto.keys import PublicKey, SigningKey
from sigenv.models.timestamp import Clock, from_second
from tests.factories import SEED_A, SEED_B, TIMESTAMP_1, make_signing_key


@pytest.fixture
def signing_key() -> SigningKey[Any]:
    return make_signing_key(SEED_A)


@pytest.fixture
def other_signing_key() -> SigningKey[Any]:
    return make_signing_key(SEED_B)


@pytest.fixture
def public_key(signing_key: SigningKey[Any]) -> PublicKey[Any]:
    return signing_key.public_key()


@pytest.fixture
def other_public_key(other_signing_key: SigningKey[Any]) -> PublicKey[Any]:
    return other_signing_key.public_key()


@pytest.fixture
def fixed_clock() -> Clock:
    """Clock frozen at TIMESTAMP_1."""
    instant: datetime = from_second(TIMESTAMP_1)
    return lambda: instant
