"""
Vault Configuration — Validated settings for the local secret store.

Reads settings from environment variables:
    WOZ_HOME                 = <store root, defaults to $XDG_CONFIG_HOME/.woz or $HOME/.woz>
    WOZ_ENCRYPTION_PASSWORD  = <application password fed to the KDF>
    WOZ_ENCRYPTION_SALT      = <application salt fed to the KDF>
    WOZ_KDF_ITERATIONS       = <integer, default 100>
    WOZ_CIPHER_BACKEND       = chacha20 | aesgcm

Security Note:
    Never log the password, salt or derived key. Only log the root path,
    iteration count and cipher backend.
"""
import os
import logging
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, Field, field_validator

from ..conf import (
    HOME_ENV,
    ENCRYPTION_PASSWORD_ENV,
    ENCRYPTION_SALT_ENV,
    KDF_ITERATIONS_ENV,
    CIPHER_BACKEND_ENV,
    DEFAULT_KDF_ITERATIONS,
    DEFAULT_CIPHER_BACKEND,
    default_home_path,
    require_env,
)
from .crypto import CIPHER_BACKENDS

logger = logging.getLogger("woz.session")


class StoreConfig(BaseModel):
    """Validated secret store configuration."""

    root: Path
    password: str = Field(repr=False, min_length=1)
    salt: str = Field(repr=False, min_length=1)
    iterations: int = Field(default=DEFAULT_KDF_ITERATIONS, ge=1)
    cipher_backend: str = Field(default=DEFAULT_CIPHER_BACKEND)

    model_config = {"frozen": True}

    @field_validator("cipher_backend")
    @classmethod
    def validate_cipher(cls, v: str) -> str:
        """Validate cipher backend is supported."""
        v = v.lower()
        if v not in CIPHER_BACKENDS:
            raise ValueError(f"Unsupported cipher backend: {v}")
        return v

    @classmethod
    def from_env(cls, home: Optional[Union[str, Path]] = None) -> "StoreConfig":
        """Create StoreConfig by loading values from environment.

        Args:
            home: Explicit store root (the CLI ``--home`` flag); takes
                precedence over WOZ_HOME and the default home path.

        Returns:
            Populated StoreConfig instance.

        Raises:
            RuntimeError: If the encryption password or salt is not set.
        """
        if home is None:
            home = os.environ.get(HOME_ENV) or default_home_path()
        config = cls(
            root=Path(home).expanduser(),
            password=require_env(ENCRYPTION_PASSWORD_ENV),
            salt=require_env(ENCRYPTION_SALT_ENV),
            iterations=int(
                os.environ.get(KDF_ITERATIONS_ENV, DEFAULT_KDF_ITERATIONS)
            ),
            cipher_backend=os.environ.get(
                CIPHER_BACKEND_ENV, DEFAULT_CIPHER_BACKEND
            ),
        )
        logger.debug(
            "Store config: root=%s iterations=%d cipher=%s",
            config.root, config.iterations, config.cipher_backend,
        )
        return config
