"""
Pytest configuration and fixtures for payload encrypter tests.
"""

from __future__ import annotations

import pytest

from payload_encrypter import Encrypter
from tests.helpers import KEY, ZERO_KEY, FakeClock


@pytest.fixture
def clock() -> FakeClock:
    """Create a clock frozen at a fixed instant."""
    return FakeClock()


@pytest.fixture
def encrypter(clock: FakeClock) -> Encrypter:
    """Create an encrypter with a single key and a controllable clock."""
    return Encrypter(KEY, clock=clock)


@pytest.fixture
def zero_key_encrypter() -> Encrypter:
    """Create an encrypter keyed with 32 zero bytes."""
    return Encrypter(ZERO_KEY)
