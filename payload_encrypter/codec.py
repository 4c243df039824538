"""
Envelope transport format.

Envelopes are compact JSON records, base64-encoded as a whole so the result
is a single printable string safe for cookies, headers and queues.

Decoding fails in three possible stages (transport, structure, fields).
Callers only ever see one generic error per envelope kind; the stage is
reported on the debug log.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .crypto import NONCE_SIZE, TAG_SIZE
from .errors import DecryptionError, SignatureError

logger = logging.getLogger(__name__)

ENVELOPE_VERSION: int = 1


class _MalformedEnvelope(Exception):
    """Internal decode failure; never leaves this module."""

    def __init__(self, stage: str) -> None:
        super().__init__(stage)
        self.stage = stage


@dataclass(frozen=True)
class EncryptionEnvelope:
    """Encrypted value with everything needed to attempt decryption."""

    iv: bytes
    ciphertext: bytes
    auth_tag: bytes
    version: int = ENVELOPE_VERSION
    compressed: bool = False
    expires_at: Optional[float] = None
    aad_required: bool = False

    def to_dict(self) -> Dict[str, Any]:
        record: Dict[str, Any] = {
            "iv": _b64encode(self.iv),
            "ciphertext": _b64encode(self.ciphertext),
            "authTag": _b64encode(self.auth_tag),
            "version": self.version,
        }
        if self.compressed:
            record["compressed"] = True
        if self.expires_at is not None:
            record["expiresAt"] = self.expires_at
        if self.aad_required:
            record["aadRequired"] = True
        return record

    @classmethod
    def from_dict(cls, record: Dict[str, Any]) -> EncryptionEnvelope:
        for name in ("iv", "ciphertext", "authTag"):
            if not isinstance(record.get(name), str):
                raise _MalformedEnvelope("fields")

        iv = _b64decode_field(record["iv"])
        ciphertext = _b64decode_field(record["ciphertext"])
        auth_tag = _b64decode_field(record["authTag"])
        if len(iv) != NONCE_SIZE or len(auth_tag) != TAG_SIZE:
            raise _MalformedEnvelope("fields")

        version = record.get("version", ENVELOPE_VERSION)
        compressed = record.get("compressed", False)
        expires_at = record.get("expiresAt")
        aad_required = record.get("aadRequired", False)

        if not _is_int(version):
            raise _MalformedEnvelope("fields")
        if not isinstance(compressed, bool) or not isinstance(aad_required, bool):
            raise _MalformedEnvelope("fields")
        if expires_at is not None and not _is_number(expires_at):
            raise _MalformedEnvelope("fields")

        return cls(
            iv=iv,
            ciphertext=ciphertext,
            auth_tag=auth_tag,
            version=version,
            compressed=compressed,
            expires_at=expires_at,
            aad_required=aad_required,
        )


@dataclass(frozen=True)
class SigningEnvelope:
    """Cleartext canonical value with its keyed-hash signature."""

    value: str
    signature: str

    def to_dict(self) -> Dict[str, Any]:
        return {"value": self.value, "signature": self.signature}

    @classmethod
    def from_dict(cls, record: Dict[str, Any]) -> SigningEnvelope:
        value = record.get("value")
        signature = record.get("signature")
        if not isinstance(value, str) or not isinstance(signature, str):
            raise _MalformedEnvelope("fields")
        try:
            value.encode("utf-8")
            signature.encode("ascii")
        except UnicodeEncodeError:
            raise _MalformedEnvelope("fields") from None
        return cls(value=value, signature=signature)


# =============================================================================
# Public API
# =============================================================================


def encode_envelope(envelope: EncryptionEnvelope | SigningEnvelope) -> str:
    """Encode an envelope as base64 over compact UTF-8 JSON."""
    text = json.dumps(envelope.to_dict(), separators=(",", ":"))
    return _b64encode(text.encode("utf-8"))


def decode_encryption_envelope(payload: Any) -> EncryptionEnvelope:
    """
    Decode and validate an encryption envelope.

    Raises:
        DecryptionError: For any transport, structure or field failure
    """
    try:
        return EncryptionEnvelope.from_dict(_decode_record(payload))
    except _MalformedEnvelope as e:
        logger.debug("Rejected encryption envelope at stage: %s", e.stage)
        raise DecryptionError() from None


def decode_signing_envelope(payload: Any) -> SigningEnvelope:
    """
    Decode and validate a signing envelope.

    Raises:
        SignatureError: For any transport, structure or field failure
    """
    try:
        return SigningEnvelope.from_dict(_decode_record(payload))
    except _MalformedEnvelope as e:
        logger.debug("Rejected signing envelope at stage: %s", e.stage)
        raise SignatureError() from None


# =============================================================================
# Helpers
# =============================================================================


def _decode_record(payload: Any) -> Dict[str, Any]:
    if not isinstance(payload, (str, bytes)):
        raise _MalformedEnvelope("transport")
    try:
        raw = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise _MalformedEnvelope("transport") from None

    try:
        record = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        raise _MalformedEnvelope("structure") from None

    if not isinstance(record, dict):
        raise _MalformedEnvelope("structure")
    return record


def _b64encode(data: bytes) -> str:
    return base64.standard_b64encode(data).decode("ascii")


def _b64decode_field(value: str) -> bytes:
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        raise _MalformedEnvelope("fields") from None


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
