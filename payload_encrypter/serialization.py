"""
Value serialization and compression collaborators.

This module provides:
- Serializer: Abstract interface converting values to canonical bytes
- JsonSerializer: Canonical JSON (sorted keys, compact, UTF-8)
- Compressor: Abstract interface for reversible byte compression
- ZlibCompressor: DEFLATE compression via zlib
"""

from __future__ import annotations

import json
import zlib
from abc import ABC, abstractmethod
from typing import Any

from .errors import SerializationError


class Serializer(ABC):
    """Converts caller values to canonical bytes and back."""

    @abstractmethod
    def dumps(self, value: Any) -> bytes:
        """Serialize a value. Raises SerializationError if unsupported."""
        ...

    @abstractmethod
    def loads(self, data: bytes) -> Any:
        """Deserialize bytes produced by dumps."""
        ...


class JsonSerializer(Serializer):
    """Canonical JSON: identical values always produce identical bytes."""

    def dumps(self, value: Any) -> bytes:
        try:
            text = json.dumps(
                value,
                sort_keys=True,
                separators=(",", ":"),
                ensure_ascii=False,
                allow_nan=False,
            )
            return text.encode("utf-8")
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Value is not JSON serializable: {e}")

    def loads(self, data: bytes) -> Any:
        try:
            return json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            raise SerializationError(f"Invalid JSON: {e}")


class Compressor(ABC):
    """Reversible byte-stream compression."""

    @abstractmethod
    def compress(self, data: bytes) -> bytes:
        ...

    @abstractmethod
    def decompress(self, data: bytes) -> bytes:
        ...


class ZlibCompressor(Compressor):
    """zlib (DEFLATE) compression."""

    def __init__(self, level: int = 6) -> None:
        self.level = level

    def compress(self, data: bytes) -> bytes:
        return zlib.compress(data, self.level)

    def decompress(self, data: bytes) -> bytes:
        try:
            return zlib.decompress(data)
        except zlib.error as e:
            raise SerializationError(f"Decompression failed: {e}")
