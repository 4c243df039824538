from __future__ import annotations

import json

import pytest

from payload_encrypter import Encrypter, SerializationError, SignatureError
from payload_encrypter.crypto import hmac_sha256
from payload_encrypter.keyring import parse_key
from tests.helpers import KEY, OLD_KEY, unwrap, wrap


def test_sign_and_verify(encrypter: Encrypter) -> None:
    data = {"foo": "bar"}
    assert encrypter.verify(encrypter.sign(data)) == data


@pytest.mark.parametrize("value", ["important", 42, None, [1, "two"], {"b": 2, "a": 1}])
def test_sign_round_trip(encrypter: Encrypter, value) -> None:
    assert encrypter.verify(encrypter.sign(value)) == value


def test_signed_value_is_cleartext_and_canonical(encrypter: Encrypter) -> None:
    record = unwrap(encrypter.sign({"b": 2, "a": 1}))
    assert record["value"] == '{"a":1,"b":2}'
    assert record["signature"] == hmac_sha256(parse_key(KEY), b'{"a":1,"b":2}')


def test_signing_is_deterministic(encrypter: Encrypter) -> None:
    assert encrypter.sign({"x": 1}) == encrypter.sign({"x": 1})


def test_tampered_value_detected(encrypter: Encrypter) -> None:
    record = unwrap(encrypter.sign("important"))
    record["value"] = json.dumps("tampered")
    with pytest.raises(SignatureError):
        encrypter.verify(wrap(record))


def test_tampered_signature_detected(encrypter: Encrypter) -> None:
    record = unwrap(encrypter.sign("important"))
    last = record["signature"][-1]
    record["signature"] = record["signature"][:-1] + ("0" if last != "0" else "1")
    with pytest.raises(SignatureError):
        encrypter.verify(wrap(record))


def test_truncated_signature_detected(encrypter: Encrypter) -> None:
    record = unwrap(encrypter.sign("important"))
    record["signature"] = record["signature"][:32]
    with pytest.raises(SignatureError):
        encrypter.verify(wrap(record))


def test_key_rotation_for_signatures() -> None:
    signed_with_old = Encrypter(OLD_KEY).sign("old signature")
    assert Encrypter([KEY, OLD_KEY]).verify(signed_with_old) == "old signature"


def test_new_signatures_use_active_key() -> None:
    signed = Encrypter([KEY, OLD_KEY]).sign("new")
    assert Encrypter(KEY).verify(signed) == "new"
    with pytest.raises(SignatureError):
        Encrypter(OLD_KEY).verify(signed)


@pytest.mark.parametrize(
    "payload",
    ["invalid-base64", wrap({"foo": "bar"}), wrap({"value": '"x"'}), wrap({"signature": "00"})],
)
def test_malformed_signed_payload(encrypter: Encrypter, payload: str) -> None:
    with pytest.raises(SignatureError):
        encrypter.verify(payload)


def test_verified_but_undecodable_value_is_generic_failure(encrypter: Encrypter) -> None:
    # Correctly signed, but the value is not valid JSON
    signature = hmac_sha256(parse_key(KEY), b"{not json")
    with pytest.raises(SignatureError):
        encrypter.verify(wrap({"value": "{not json", "signature": signature}))


def test_encrypted_payload_is_not_a_signed_payload(encrypter: Encrypter) -> None:
    with pytest.raises(SignatureError):
        encrypter.verify(encrypter.encrypt("value"))


def test_unserializable_value_cannot_be_signed(encrypter: Encrypter) -> None:
    with pytest.raises(SerializationError):
        encrypter.sign({1, 2, 3})
