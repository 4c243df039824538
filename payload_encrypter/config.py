"""
Environment-based configuration.

Keys are read from the process environment, after loading a ``.env`` file
if one is present:

- ``APP_KEY``: active key (required), e.g. ``base64:...``
- ``APP_PREVIOUS_KEYS``: comma-separated retired keys still accepted for
  decryption and verification (optional)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional, Union

from dotenv import load_dotenv

from .encrypter import Encrypter
from .errors import ConfigError

KEY_ENV = "APP_KEY"
PREVIOUS_KEYS_ENV = "APP_PREVIOUS_KEYS"


@dataclass
class EncrypterConfig:
    """Key material for building an Encrypter."""

    key: str
    previous_keys: List[str] = field(default_factory=list)

    def __repr__(self) -> str:
        return f"EncrypterConfig(key=[REDACTED], previous_keys={len(self.previous_keys)})"

    @classmethod
    def from_env(
        cls,
        env_file: Optional[Union[str, Path]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> EncrypterConfig:
        """
        Load configuration from the environment.

        Args:
            env_file: Optional .env path (default: search from the working directory)
            environ: Mapping to read instead of os.environ (the .env file is
                not loaded in that case)

        Raises:
            ConfigError: If APP_KEY is missing or empty
        """
        if environ is None:
            load_dotenv(env_file)
            environ = os.environ

        key = environ.get(KEY_ENV, "").strip()
        if not key:
            raise ConfigError(f"{KEY_ENV} must be set in environment or .env file")

        previous = environ.get(PREVIOUS_KEYS_ENV, "")
        previous_keys = [k.strip() for k in previous.split(",") if k.strip()]

        return cls(key=key, previous_keys=previous_keys)

    def build_encrypter(self, **kwargs) -> Encrypter:
        """Create an Encrypter whose ring is the active key then previous keys."""
        return Encrypter([self.key, *self.previous_keys], **kwargs)
