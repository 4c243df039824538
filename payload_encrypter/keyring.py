"""
Ordered, immutable collection of encryption keys.

The key at index 0 is the active key: it is the only key used to encrypt
or sign. The remaining keys are rotation fallbacks, tried in order when
decrypting or verifying payloads issued before the last rotation.
"""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Iterable, Iterator, Sequence, Tuple, Union

from .crypto import AES_256_KEY_SIZE, KEY_PREFIX, SecureKey
from .errors import ConfigError

logger = logging.getLogger(__name__)

KeySpec = Union[str, bytes, bytearray, SecureKey]


def parse_key(spec: KeySpec) -> SecureKey:
    """
    Parse a single key specification into a validated SecureKey.

    Strings starting with ``base64:`` are base64-decoded; any other string
    is taken as its UTF-8 bytes. Bytes and SecureKey values are used as is.

    Raises:
        ConfigError: If the spec cannot be decoded or is not 32 bytes
    """
    if isinstance(spec, SecureKey):
        key = SecureKey(spec.as_bytes())
    elif isinstance(spec, (bytes, bytearray)):
        key = SecureKey(spec)
    elif isinstance(spec, str):
        if spec.startswith(KEY_PREFIX):
            try:
                raw = base64.b64decode(spec[len(KEY_PREFIX):], validate=True)
            except (binascii.Error, ValueError):
                raise ConfigError("The encryption key is not valid base64.") from None
            key = SecureKey(raw)
        else:
            key = SecureKey(spec.encode("utf-8"))
    else:
        raise ConfigError(f"Unsupported key type: {type(spec).__name__}")

    if len(key) != AES_256_KEY_SIZE:
        raise ConfigError(f"The encryption key must be {AES_256_KEY_SIZE} bytes.")
    return key


class KeyRing:
    """Non-empty ordered sequence of 32-byte keys, fixed at construction."""

    __slots__ = ("_keys",)

    def __init__(self, keys: Union[KeySpec, Sequence[KeySpec]]) -> None:
        if isinstance(keys, (str, bytes, bytearray, SecureKey)):
            keys = [keys]
        elif not isinstance(keys, Iterable):
            raise ConfigError(f"Unsupported key type: {type(keys).__name__}")

        parsed = tuple(parse_key(spec) for spec in keys)
        if not parsed:
            raise ConfigError("At least one encryption key is required.")

        self._keys: Tuple[SecureKey, ...] = parsed
        logger.debug("Key ring loaded with %d key(s)", len(parsed))

    def active(self) -> SecureKey:
        """Return the key used for all new encryption and signing."""
        return self._keys[0]

    def candidates(self) -> Iterator[SecureKey]:
        """Iterate every key in ring order, active key first."""
        return iter(self._keys)

    def __len__(self) -> int:
        return len(self._keys)

    def __repr__(self) -> str:
        return f"KeyRing(size={len(self._keys)})"
