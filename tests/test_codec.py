from __future__ import annotations

import base64

import pytest

from payload_encrypter import (
    DecryptionError,
    EncryptionEnvelope,
    SignatureError,
    SigningEnvelope,
    decode_encryption_envelope,
    decode_signing_envelope,
    encode_envelope,
)
from tests.helpers import unwrap, wrap


def _envelope(**overrides) -> EncryptionEnvelope:
    fields = dict(iv=bytes(12), ciphertext=b"cipher", auth_tag=bytes(16))
    fields.update(overrides)
    return EncryptionEnvelope(**fields)


def _valid_record() -> dict:
    return unwrap(encode_envelope(_envelope()))


def test_encoded_envelope_is_printable_ascii() -> None:
    payload = encode_envelope(_envelope(compressed=True, expires_at=12.5, aad_required=True))
    assert payload.isascii() and payload.isprintable()


def test_optional_fields_omitted_when_unset() -> None:
    record = _valid_record()
    assert set(record) == {"iv", "ciphertext", "authTag", "version"}
    assert record["version"] == 1


def test_decode_restores_every_field() -> None:
    original = _envelope(compressed=True, expires_at=1700000000.25, aad_required=True)
    assert decode_encryption_envelope(encode_envelope(original)) == original


def test_unknown_fields_are_ignored() -> None:
    record = _valid_record()
    record["kid"] = "future"
    record["version"] = 7
    envelope = decode_encryption_envelope(wrap(record))
    assert envelope.version == 7
    assert envelope.ciphertext == b"cipher"


@pytest.mark.parametrize(
    "payload",
    [
        "invalid-base64",
        "!!!!",
        base64.b64encode(b"\xff\xfe not utf8").decode("ascii"),
        base64.b64encode(b"{not json").decode("ascii"),
        base64.b64encode(b"[1, 2, 3]").decode("ascii"),
        wrap({"foo": "bar"}),
        None,
        12,
    ],
)
def test_malformed_payloads_raise_generic_error(payload) -> None:
    with pytest.raises(DecryptionError) as exc_info:
        decode_encryption_envelope(payload)
    assert str(exc_info.value) == "The payload is invalid or has been tampered with."
    assert exc_info.value.__cause__ is None


@pytest.mark.parametrize("missing", ["iv", "ciphertext", "authTag"])
def test_missing_required_field(missing: str) -> None:
    record = _valid_record()
    del record[missing]
    with pytest.raises(DecryptionError):
        decode_encryption_envelope(wrap(record))


@pytest.mark.parametrize(
    "field, value",
    [
        ("iv", base64.b64encode(bytes(11)).decode("ascii")),
        ("authTag", base64.b64encode(bytes(15)).decode("ascii")),
        ("ciphertext", "***"),
        ("iv", 5),
        ("version", "1"),
        ("version", True),
        ("compressed", "yes"),
        ("aadRequired", 1),
        ("expiresAt", "tomorrow"),
    ],
)
def test_badly_typed_fields_rejected(field: str, value) -> None:
    record = _valid_record()
    record[field] = value
    with pytest.raises(DecryptionError):
        decode_encryption_envelope(wrap(record))


def test_stage_failures_are_indistinguishable() -> None:
    messages = set()
    for payload in ["invalid-base64", base64.b64encode(b"nope").decode(), wrap({"iv": "x"})]:
        with pytest.raises(DecryptionError) as exc_info:
            decode_encryption_envelope(payload)
        messages.add((type(exc_info.value), str(exc_info.value)))
    assert len(messages) == 1


def test_signing_envelope_roundtrip() -> None:
    envelope = SigningEnvelope(value='"important"', signature="ab" * 32)
    assert decode_signing_envelope(encode_envelope(envelope)) == envelope


@pytest.mark.parametrize(
    "payload",
    [
        "invalid-base64",
        wrap({"value": '"x"'}),
        wrap({"signature": "00"}),
        wrap({"value": 1, "signature": "00"}),
    ],
)
def test_malformed_signing_envelope(payload) -> None:
    with pytest.raises(SignatureError):
        decode_signing_envelope(payload)
