"""
Shared constants and envelope manipulation helpers for tests.
"""

from __future__ import annotations

import base64
import json
from typing import Any, Callable, Dict

ZERO_KEY = bytes(32)
KEY = "base64:6uS6uS6uS6uS6uS6uS6uS6uS6uS6uS6uS6uS6uS6uS4="
OLD_KEY = "base64:AAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA="


class FakeClock:
    """Manually advanced clock for expiry tests."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def unwrap(payload: str) -> Dict[str, Any]:
    """Decode an envelope string to its JSON record."""
    return json.loads(base64.b64decode(payload).decode("utf-8"))


def wrap(record: Dict[str, Any]) -> str:
    """Encode a JSON record as an envelope string."""
    return base64.b64encode(json.dumps(record).encode("utf-8")).decode("ascii")


def flip_byte(field: str, index: int = 0) -> Callable[[Dict[str, Any]], None]:
    """Return a mutator flipping one byte of a base64 envelope field."""

    def mutate(record: Dict[str, Any]) -> None:
        raw = bytearray(base64.b64decode(record[field]))
        raw[index] ^= 0x01
        record[field] = base64.b64encode(bytes(raw)).decode("ascii")

    return mutate
