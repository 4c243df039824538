"""
Authenticated encryption and signing of application payloads.

This module provides:
- EncrypterContract: Abstract interface for encrypt/decrypt/sign/verify
- Encrypter: AES-256-GCM and HMAC-SHA256 implementation over a KeyRing

Key rotation:
- Only the active key (ring index 0) encrypts and signs
- Every key in the ring is tried, in order, to decrypt and verify
- Rotating means constructing a new Encrypter with the new key first

Envelope metadata (version, compression flag, expiry, context flag) is bound
into the AEAD associated data together with the caller's context, so none
of it can be altered without failing authentication.
"""

from __future__ import annotations

import json
import logging
import math
import time
from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Any, Callable, Iterable, Optional, Sequence, Union

from .codec import (
    ENVELOPE_VERSION,
    EncryptionEnvelope,
    SigningEnvelope,
    decode_encryption_envelope,
    decode_signing_envelope,
    encode_envelope,
)
from .crypto import (
    AesGcmCipher,
    SealedData,
    SecureKey,
    constant_time_equals,
    hmac_sha256,
)
from .errors import (
    ConfigError,
    ContextRequiredError,
    CryptoError,
    DecryptionError,
    ExpiredPayloadError,
    InvalidOptionError,
    SerializationError,
    SignatureError,
)
from .keyring import KeyRing, KeySpec, parse_key
from .serialization import Compressor, JsonSerializer, Serializer, ZlibCompressor

logger = logging.getLogger(__name__)

Clock = Callable[[], float]
Ttl = Union[int, float, timedelta]


class EncrypterContract(ABC):
    """Interface shared by payload encrypters."""

    @abstractmethod
    def encrypt(self, value: Any, **options: Any) -> str:
        """Encrypt the given value."""
        ...

    @abstractmethod
    def decrypt(self, payload: str, **options: Any) -> Any:
        """Decrypt the given payload."""
        ...

    @abstractmethod
    def sign(self, value: Any) -> str:
        """Sign the given value."""
        ...

    @abstractmethod
    def verify(self, payload: str) -> Any:
        """Verify the given signed payload and return its value."""
        ...


class Encrypter(EncrypterContract):
    """
    AES-256-GCM encrypter with key rotation, TTLs and context binding.

    Instances are immutable after construction and safe to share between
    threads.
    """

    def __init__(
        self,
        keys: Union[KeyRing, KeySpec, Sequence[KeySpec]],
        *,
        serializer: Optional[Serializer] = None,
        compressor: Optional[Compressor] = None,
        clock: Clock = time.time,
    ) -> None:
        """
        Create an encrypter.

        Args:
            keys: A KeyRing, a single key spec, or a sequence of key specs
                (active key first)
            serializer: Value serializer (default: canonical JSON)
            compressor: Compression codec used when compress=True (default: zlib)
            clock: Returns the current UNIX time in seconds

        Raises:
            ConfigError: If no key is given or any key is not 32 bytes
        """
        self._key_ring = keys if isinstance(keys, KeyRing) else KeyRing(keys)
        self._serializer = serializer if serializer is not None else JsonSerializer()
        self._compressor = compressor if compressor is not None else ZlibCompressor()
        self._clock = clock

    @property
    def key_ring(self) -> KeyRing:
        return self._key_ring

    @staticmethod
    def supported(key: KeySpec) -> bool:
        """Return whether ``key`` is usable as an encryption key."""
        try:
            parse_key(key)
        except ConfigError:
            return False
        return True

    # =========================================================================
    # Encryption
    # =========================================================================

    def encrypt(
        self,
        value: Any,
        *,
        serialize: bool = True,
        compress: bool = False,
        ttl: Optional[Ttl] = None,
        context: Optional[str] = None,
    ) -> str:
        """
        Encrypt a value into a transport-safe envelope string.

        Args:
            value: Value to encrypt; bytes or str when serialize is False
            serialize: Apply the serializer before encryption
            compress: Compress the serialized bytes before encryption
            ttl: Seconds (or timedelta) until the payload expires
            context: Associated data that must be supplied again to decrypt

        Returns:
            Base64 envelope string

        Raises:
            InvalidOptionError: If an option is malformed
            SerializationError: If the value cannot be serialized
        """
        _validate_flag("serialize", serialize)
        _validate_flag("compress", compress)
        ttl_seconds = _validate_ttl(ttl)
        _validate_context(context)

        if serialize:
            plaintext = self._serializer.dumps(value)
        else:
            plaintext = _raw_bytes(value)

        if compress:
            plaintext = self._compressor.compress(plaintext)

        expires_at = None
        if ttl_seconds is not None:
            expires_at = self._clock() + ttl_seconds

        header = EncryptionEnvelope(
            iv=b"",
            ciphertext=b"",
            auth_tag=b"",
            version=ENVELOPE_VERSION,
            compressed=compress,
            expires_at=expires_at,
            aad_required=context is not None,
        )
        sealed = AesGcmCipher.encrypt(
            self._key_ring.active(), plaintext, _associated_data(header, context)
        )

        return encode_envelope(
            EncryptionEnvelope(
                iv=sealed.nonce,
                ciphertext=sealed.ciphertext,
                auth_tag=sealed.tag,
                version=header.version,
                compressed=header.compressed,
                expires_at=header.expires_at,
                aad_required=header.aad_required,
            )
        )

    def encrypt_string(self, text: str, **options: Any) -> str:
        """Encrypt already-serialized text without the serializer."""
        return self.encrypt(text, serialize=False, **options)

    # =========================================================================
    # Decryption
    # =========================================================================

    def decrypt(
        self,
        payload: str,
        *,
        unserialize: bool = True,
        context: Optional[str] = None,
    ) -> Any:
        """
        Decrypt an envelope string produced by encrypt.

        Args:
            payload: Envelope string
            unserialize: Apply the deserializer; when False the raw
                plaintext bytes are returned
            context: Associated data given at encryption time, if any

        Returns:
            The decrypted value

        Raises:
            ExpiredPayloadError: If the payload's TTL has elapsed
            ContextRequiredError: If the payload needs a context and none was given
            DecryptionError: For malformed, tampered or foreign payloads
        """
        _validate_flag("unserialize", unserialize)
        _validate_context(context)
        envelope = decode_encryption_envelope(payload)

        if envelope.expires_at is not None and self._clock() > envelope.expires_at:
            raise ExpiredPayloadError()

        if envelope.aad_required and context is None:
            raise ContextRequiredError()

        sealed = SealedData(
            nonce=envelope.iv, ciphertext=envelope.ciphertext, tag=envelope.auth_tag
        )
        aad = _associated_data(envelope, context)
        plaintext = _first_success(
            self._key_ring.candidates(), lambda key: _try_open(key, sealed, aad)
        )
        if plaintext is None:
            logger.debug("Decryption failed at stage: authentication")
            raise DecryptionError()

        stage = "decompress"
        try:
            if envelope.compressed:
                plaintext = self._compressor.decompress(plaintext)
            stage = "deserialize"
            if unserialize:
                return self._serializer.loads(plaintext)
        except SerializationError:
            logger.debug("Decryption failed at stage: %s", stage)
            raise DecryptionError() from None
        return plaintext

    def decrypt_string(self, payload: str, **options: Any) -> str:
        """Decrypt a payload produced by encrypt_string."""
        plaintext = self.decrypt(payload, unserialize=False, **options)
        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError:
            raise DecryptionError() from None

    # =========================================================================
    # Signing
    # =========================================================================

    def sign(self, value: Any) -> str:
        """
        Sign a value with the active key.

        The value travels in cleartext; only its integrity is protected.

        Raises:
            SerializationError: If the value cannot be serialized
        """
        try:
            canonical = self._serializer.dumps(value).decode("utf-8")
        except UnicodeDecodeError as e:
            raise SerializationError(f"Signed values must serialize to UTF-8: {e}")

        signature = hmac_sha256(self._key_ring.active(), canonical.encode("utf-8"))
        return encode_envelope(SigningEnvelope(value=canonical, signature=signature))

    def verify(self, payload: str) -> Any:
        """
        Verify a signed payload against every key in the ring.

        Returns:
            The signed value

        Raises:
            SignatureError: If the payload is malformed or no key matches
        """
        envelope = decode_signing_envelope(payload)
        message = envelope.value.encode("utf-8")

        matched = _first_success(
            self._key_ring.candidates(),
            lambda key: _try_verify(key, message, envelope.signature),
        )
        if matched is None:
            logger.debug("Verification failed at stage: signature")
            raise SignatureError()

        try:
            return self._serializer.loads(message)
        except SerializationError:
            logger.debug("Verification failed at stage: deserialize")
            raise SignatureError() from None

    def __repr__(self) -> str:
        return f"Encrypter(keys={len(self._key_ring)})"


# =============================================================================
# Helpers
# =============================================================================


def _first_success(keys: Iterable[SecureKey], attempt: Callable[[SecureKey], Any]) -> Any:
    """Return the first non-None result of ``attempt`` over ``keys``, else None."""
    for key in keys:
        result = attempt(key)
        if result is not None:
            return result
    return None


def _try_open(key: SecureKey, sealed: SealedData, aad: bytes) -> Optional[bytes]:
    try:
        return AesGcmCipher.decrypt(key, sealed, aad)
    except CryptoError:
        return None


def _try_verify(key: SecureKey, message: bytes, signature: str) -> Optional[bool]:
    if constant_time_equals(hmac_sha256(key, message), signature):
        return True
    return None


def _associated_data(envelope: EncryptionEnvelope, context: Optional[str]) -> bytes:
    """Envelope metadata as canonical JSON, then a NUL, then the context."""
    header = json.dumps(
        {
            "aadRequired": envelope.aad_required,
            "compressed": envelope.compressed,
            "expiresAt": envelope.expires_at,
            "version": envelope.version,
        },
        sort_keys=True,
        separators=(",", ":"),
    ).encode("utf-8")
    if context is None:
        return header
    return header + b"\x00" + context.encode("utf-8")


def _validate_ttl(ttl: Optional[Ttl]) -> Optional[float]:
    if ttl is None:
        return None
    if isinstance(ttl, timedelta):
        seconds = ttl.total_seconds()
    elif isinstance(ttl, (int, float)) and not isinstance(ttl, bool):
        try:
            seconds = float(ttl)
        except OverflowError:
            raise InvalidOptionError("ttl is too large") from None
    else:
        raise InvalidOptionError(f"ttl must be a number of seconds, got {type(ttl).__name__}")
    if not (seconds > 0 and math.isfinite(seconds)):
        raise InvalidOptionError("ttl must be a positive, finite duration")
    return seconds


def _validate_flag(name: str, value: Any) -> None:
    if not isinstance(value, bool):
        raise InvalidOptionError(f"{name} must be a bool, got {type(value).__name__}")


def _validate_context(context: Optional[str]) -> None:
    if context is None:
        return
    if not isinstance(context, str):
        raise InvalidOptionError(f"context must be a string, got {type(context).__name__}")
    try:
        context.encode("utf-8")
    except UnicodeEncodeError:
        raise InvalidOptionError("context must be encodable as UTF-8") from None


def _raw_bytes(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        try:
            return value.encode("utf-8")
        except UnicodeEncodeError:
            raise InvalidOptionError("Unserialized text must be encodable as UTF-8") from None
    raise InvalidOptionError(
        f"Unserialized values must be bytes or str, got {type(value).__name__}"
    )
