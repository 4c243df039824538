"""
Cryptographic primitives consumed by the encrypter.

This module provides:
- SecureKey: Key wrapper with redacted repr and best-effort zeroization
- SealedData: AES-GCM output split into nonce, ciphertext and tag
- AesGcmCipher: AES-256-GCM encryption/decryption operations
- hmac_sha256: Keyed hash used by the signing engine
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import secrets
from dataclasses import dataclass
from typing import Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .errors import CryptoError

# Cryptographic constants
AES_256_KEY_SIZE: int = 32  # 256 bits
NONCE_SIZE: int = 12  # 96 bits (standard for AES-GCM)
TAG_SIZE: int = 16  # 128 bits (authentication tag)

KEY_PREFIX = "base64:"


class SecureKey:
    """
    Holder for secret key bytes that never prints them.

    The bytes live in a bytearray so they can be overwritten when the
    object is collected; CPython gives no timing guarantee for that.
    """

    __slots__ = ("_bytes",)

    def __init__(self, key_bytes: bytes | bytearray) -> None:
        if not isinstance(key_bytes, (bytes, bytearray)):
            raise CryptoError("Key must be bytes or bytearray")
        self._bytes = bytearray(key_bytes)

    @classmethod
    def generate(cls) -> SecureKey:
        """New random AES-256 key."""
        return cls(generate_key())

    def as_bytes(self) -> bytes:
        return bytes(self._bytes)

    def __len__(self) -> int:
        return len(self._bytes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SecureKey):
            return NotImplemented
        return hmac.compare_digest(bytes(self._bytes), bytes(other._bytes))

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return "SecureKey([REDACTED])"

    __str__ = __repr__

    def __del__(self) -> None:
        key_bytes = getattr(self, "_bytes", None)
        if key_bytes is not None:
            key_bytes[:] = bytes(len(key_bytes))


@dataclass(frozen=True)
class SealedData:
    """AES-GCM output with the tag held apart from the ciphertext."""

    nonce: bytes  # 12 bytes
    ciphertext: bytes
    tag: bytes  # 16 bytes


class AesGcmCipher:
    """
    AES-256-GCM authenticated encryption.

    Provides static methods for encryption and decryption with optional
    Additional Authenticated Data (AAD) for binding.
    """

    @staticmethod
    def encrypt(
        key: SecureKey,
        plaintext: bytes,
        aad: Optional[bytes] = None,
    ) -> SealedData:
        """
        Encrypt plaintext with AES-256-GCM under a fresh random nonce.

        Args:
            key: 32-byte encryption key
            plaintext: Data to encrypt
            aad: Optional Additional Authenticated Data for binding

        Returns:
            SealedData with nonce, ciphertext and authentication tag

        Raises:
            CryptoError: If key size is invalid or encryption fails
        """
        if len(key) != AES_256_KEY_SIZE:
            raise CryptoError(
                f"Invalid key size: expected {AES_256_KEY_SIZE}, got {len(key)}"
            )

        nonce = generate_random_bytes(NONCE_SIZE)
        aesgcm = AESGCM(key.as_bytes())

        try:
            combined = aesgcm.encrypt(nonce, plaintext, aad)
        except Exception as e:
            raise CryptoError(f"Encryption error: {e}")

        # AESGCM appends the tag to the ciphertext
        return SealedData(
            nonce=nonce,
            ciphertext=combined[:-TAG_SIZE],
            tag=combined[-TAG_SIZE:],
        )

    @staticmethod
    def decrypt(
        key: SecureKey,
        sealed: SealedData,
        aad: Optional[bytes] = None,
    ) -> bytes:
        """
        Decrypt and authenticate AES-256-GCM ciphertext.

        Args:
            key: 32-byte decryption key
            sealed: SealedData with nonce, ciphertext and tag
            aad: Optional Additional Authenticated Data (must match encryption)

        Returns:
            Decrypted plaintext bytes

        Raises:
            CryptoError: If key/nonce/tag size is invalid or authentication fails
        """
        if len(key) != AES_256_KEY_SIZE:
            raise CryptoError(
                f"Invalid key size: expected {AES_256_KEY_SIZE}, got {len(key)}"
            )

        if len(sealed.nonce) != NONCE_SIZE:
            raise CryptoError(
                f"Invalid nonce size: expected {NONCE_SIZE}, got {len(sealed.nonce)}"
            )

        if len(sealed.tag) != TAG_SIZE:
            raise CryptoError(
                f"Invalid tag size: expected {TAG_SIZE}, got {len(sealed.tag)}"
            )

        aesgcm = AESGCM(key.as_bytes())

        try:
            return aesgcm.decrypt(sealed.nonce, sealed.ciphertext + sealed.tag, aad)
        except InvalidTag:
            # Generic error to prevent oracle attacks
            raise CryptoError("Decryption failed") from None


def hmac_sha256(key: SecureKey, message: bytes) -> str:
    """Return the lower-case hex HMAC-SHA256 of ``message`` under ``key``."""
    return hmac.new(key.as_bytes(), message, hashlib.sha256).hexdigest()


def constant_time_equals(a: str, b: str) -> bool:
    """Compare two digests without leaking the matching prefix length."""
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


def generate_random_bytes(length: int) -> bytes:
    """
    Generate cryptographically secure random bytes.

    Args:
        length: Number of bytes to generate

    Returns:
        Random bytes of specified length
    """
    return secrets.token_bytes(length)


def generate_key() -> bytes:
    """Generate a raw 32-byte AES-256 key."""
    return generate_random_bytes(AES_256_KEY_SIZE)


def generate_key_string() -> str:
    """Generate a key in the ``base64:`` labeled form used in configuration."""
    return KEY_PREFIX + base64.standard_b64encode(generate_key()).decode("ascii")
