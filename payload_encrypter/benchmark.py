"""
Payload Encrypter Benchmark CLI.

Usage:
    payload-benchmark

Or run directly:
    python -m payload_encrypter.benchmark

Key setup:
    Set APP_KEY (and optionally APP_PREVIOUS_KEYS) in the environment or a
    .env file. A random key is generated when none is configured.
"""

from __future__ import annotations

import sys
import time
from typing import Callable, Dict

from payload_encrypter.config import EncrypterConfig
from payload_encrypter.crypto import generate_key_string
from payload_encrypter.encrypter import Encrypter
from payload_encrypter.errors import ConfigError

DEFAULT_ITERATIONS = 2000

SAMPLE_VALUE = {
    "id": 1,
    "name": "Arika",
    "roles": ["admin", "editor"],
    "bio": "Sensitive data protected by authenticated encryption " * 8,
}


def _measure(label: str, iterations: int, fn: Callable[[], object]) -> float:
    """Run ``fn`` ``iterations`` times and print the rate."""
    start = time.perf_counter()
    for _ in range(iterations):
        fn()
    duration = time.perf_counter() - start

    rate = iterations / duration
    print(f"[PERF] {label:<28} {duration * 1000:10.3f}ms | {rate:12.2f} ops/sec")
    return rate


def run_benchmark() -> None:
    """Run the payload encrypter benchmark."""
    print("=== Payload Encrypter Benchmark ===\n")

    try:
        config = EncrypterConfig.from_env()
        print(f"[STARTUP] Loaded key ring from environment ({1 + len(config.previous_keys)} key(s))")
    except ConfigError:
        config = EncrypterConfig(key=generate_key_string())
        print("[STARTUP] APP_KEY not set, using a generated key")

    encrypter = config.build_encrypter()

    try:
        user_input = input(f"Enter number of iterations (default: {DEFAULT_ITERATIONS}): ").strip()
        iterations = int(user_input) if user_input else DEFAULT_ITERATIONS
    except (ValueError, EOFError):
        iterations = DEFAULT_ITERATIONS
    print(f"Testing with {iterations} iterations\n")

    print("=" * 70)
    print("                    BENCHMARK START")
    print("=" * 70 + "\n")

    rates: Dict[str, float] = {}

    encrypted = encrypter.encrypt(SAMPLE_VALUE)
    rates["Encryption"] = _measure("Encrypt", iterations, lambda: encrypter.encrypt(SAMPLE_VALUE))
    rates["Decryption"] = _measure("Decrypt", iterations, lambda: encrypter.decrypt(encrypted))

    compressed = encrypter.encrypt(SAMPLE_VALUE, compress=True)
    rates["Compressed"] = _measure(
        "Encrypt (compressed)", iterations, lambda: encrypter.encrypt(SAMPLE_VALUE, compress=True)
    )
    _measure("Decrypt (compressed)", iterations, lambda: encrypter.decrypt(compressed))

    bound = encrypter.encrypt(SAMPLE_VALUE, context="user:1", ttl=3600)
    rates["Context + TTL"] = _measure(
        "Decrypt (context + ttl)", iterations, lambda: encrypter.decrypt(bound, context="user:1")
    )

    signed = encrypter.sign(SAMPLE_VALUE)
    rates["Signing"] = _measure("Sign", iterations, lambda: encrypter.sign(SAMPLE_VALUE))
    rates["Verification"] = _measure("Verify", iterations, lambda: encrypter.verify(signed))

    # Rotation fallback: payload sealed under the last key in a 4-key ring
    old_key = generate_key_string()
    legacy = Encrypter(old_key).encrypt(SAMPLE_VALUE)
    rotated = Encrypter([generate_key_string() for _ in range(3)] + [old_key])
    rates["Rotation fallback"] = _measure(
        "Decrypt (4th key in ring)", iterations, lambda: rotated.decrypt(legacy)
    )

    print("\n" + "=" * 70)
    print("                    BENCHMARK SUMMARY")
    print("=" * 70 + "\n")

    print("+- Performance Summary ----------------------------------------------+")
    print("|                                                                    |")
    for label, rate in rates.items():
        line = f"|  {label + ':':<20} {rate:.2f} ops/sec"
        print(line + " " * (69 - len(line)) + "|")
    print("|                                                                    |")
    print("+--------------------------------------------------------------------+")

    print("\nTest Configuration:")
    print(f"  - Iterations: {iterations}")
    print(f"  - Envelope size: {len(encrypted)} chars ({len(compressed)} compressed)")
    print("  - Crypto: AES-256-GCM with AEAD, HMAC-SHA256 signatures")

    print("\n" + "=" * 70)
    print("                    BENCHMARK COMPLETE")
    print("=" * 70 + "\n")


def main() -> None:
    """CLI entry point for payload-benchmark command."""
    try:
        run_benchmark()
    except ConfigError as e:
        print(f"ERROR: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
