"""
Exception classes for payload encryption and signing.

Decryption and verification failures are deliberately coarse: every
internal reason (bad transport encoding, malformed envelope, wrong key,
tampered data) surfaces as the same DecryptionError or SignatureError.
"""

from __future__ import annotations


class EncrypterError(Exception):
    """Base exception for all payload encrypter operations."""

    pass


class ConfigError(EncrypterError):
    """Invalid key material or configuration (empty ring, wrong key size)."""

    pass


class InvalidOptionError(EncrypterError, ValueError):
    """A call-level option is malformed (negative ttl, non-string context)."""

    pass


class CryptoError(EncrypterError):
    """Cryptographic primitive failed (encryption, decryption, key generation)."""

    pass


class SerializationError(EncrypterError):
    """Value could not be serialized or compressed."""

    pass


class DecryptionError(EncrypterError):
    """The payload could not be decrypted."""

    def __init__(
        self, message: str = "The payload is invalid or has been tampered with."
    ) -> None:
        super().__init__(message)


class ExpiredPayloadError(DecryptionError):
    """The payload's expiry time has passed."""

    def __init__(self, message: str = "The payload has expired.") -> None:
        super().__init__(message)


class ContextRequiredError(DecryptionError):
    """The payload is bound to a context but none was supplied."""

    def __init__(
        self, message: str = "A context is required to decrypt this payload."
    ) -> None:
        super().__init__(message)


class SignatureError(EncrypterError):
    """The signed payload is invalid or its signature does not match."""

    def __init__(self, message: str = "The signature is invalid.") -> None:
        super().__init__(message)
