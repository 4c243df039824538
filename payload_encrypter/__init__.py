"""
Payload Encrypter

Authenticated encryption and signing for values that cross untrusted
storage or transport: sessions, cookies, queued jobs, signed tokens.

Quick Start
-----------
```python
from payload_encrypter import Encrypter, generate_key_string

key = generate_key_string()  # "base64:..."
encrypter = Encrypter(key)

token = encrypter.encrypt({"id": 1, "name": "Arika"}, ttl=3600, context="user:1")
value = encrypter.decrypt(token, context="user:1")

signed = encrypter.sign({"cart": [1, 2, 3]})
cart = encrypter.verify(signed)
```

Key rotation
------------
Pass several keys, newest first. New payloads use the first key; payloads
issued under any listed key remain readable:

```python
encrypter = Encrypter([new_key, old_key])
```

Key Features
------------
- **AES-256-GCM**: Authenticated encryption for every payload
- **Key Rotation**: Active key encrypts, every key in the ring decrypts
- **Context Binding**: Associated data ties a payload to an external fact
- **Expiry**: Optional TTL checked before any cryptographic work
- **Signing**: HMAC-SHA256 integrity for cleartext values
- **Opaque Errors**: Malformed, tampered and foreign payloads fail alike
"""

__version__ = "0.1.0"

# =============================================================================
# Crypto Exports
# =============================================================================

from .crypto import (
    AES_256_KEY_SIZE,
    NONCE_SIZE,
    TAG_SIZE,
    AesGcmCipher,
    SealedData,
    SecureKey,
    generate_key,
    generate_key_string,
    generate_random_bytes,
)

# =============================================================================
# Error Exports
# =============================================================================

from .errors import (
    ConfigError,
    ContextRequiredError,
    CryptoError,
    DecryptionError,
    EncrypterError,
    ExpiredPayloadError,
    InvalidOptionError,
    SerializationError,
    SignatureError,
)

# =============================================================================
# Key Ring / Envelope Exports
# =============================================================================

from .keyring import KeyRing, parse_key

from .codec import (
    ENVELOPE_VERSION,
    EncryptionEnvelope,
    SigningEnvelope,
    decode_encryption_envelope,
    decode_signing_envelope,
    encode_envelope,
)

from .serialization import (
    Compressor,
    JsonSerializer,
    Serializer,
    ZlibCompressor,
)

# =============================================================================
# Encrypter Exports (Primary API)
# =============================================================================

from .encrypter import Encrypter, EncrypterContract

from .config import EncrypterConfig

# =============================================================================
# Public API
# =============================================================================

__all__ = [
    # Version
    "__version__",
    # Crypto
    "AES_256_KEY_SIZE",
    "NONCE_SIZE",
    "TAG_SIZE",
    "AesGcmCipher",
    "SealedData",
    "SecureKey",
    "generate_key",
    "generate_key_string",
    "generate_random_bytes",
    # Errors
    "EncrypterError",
    "ConfigError",
    "InvalidOptionError",
    "CryptoError",
    "SerializationError",
    "DecryptionError",
    "ExpiredPayloadError",
    "ContextRequiredError",
    "SignatureError",
    # Key ring / envelopes
    "KeyRing",
    "parse_key",
    "ENVELOPE_VERSION",
    "EncryptionEnvelope",
    "SigningEnvelope",
    "encode_envelope",
    "decode_encryption_envelope",
    "decode_signing_envelope",
    "Serializer",
    "JsonSerializer",
    "Compressor",
    "ZlibCompressor",
    # Encrypter (Primary API)
    "Encrypter",
    "EncrypterContract",
    "EncrypterConfig",
]
