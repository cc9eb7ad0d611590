"""Environment-driven settings shared by the vault and auth layers.

Only names and pure helpers live here; actual configuration objects are
built once by the caller and passed down explicitly.
"""
import os
from pathlib import Path

# Secret store
HOME_ENV = "WOZ_HOME"
ENCRYPTION_PASSWORD_ENV = "WOZ_ENCRYPTION_PASSWORD"
ENCRYPTION_SALT_ENV = "WOZ_ENCRYPTION_SALT"
KDF_ITERATIONS_ENV = "WOZ_KDF_ITERATIONS"
CIPHER_BACKEND_ENV = "WOZ_CIPHER_BACKEND"

# Identity provider
REGION_ENV = "WOZ_REGION"
CLIENT_ID_ENV = "WOZ_CLIENT_ID"
IDENTITY_POOL_ID_ENV = "WOZ_IDENTITY_POOL_ID"
IDENTITY_POOL_URL_ENV = "WOZ_IDENTITY_POOL_URL"
HTTP_TIMEOUT_ENV = "WOZ_HTTP_TIMEOUT"

HOME_DIRNAME = ".woz"
DEFAULT_KDF_ITERATIONS = 100
DEFAULT_CIPHER_BACKEND = "chacha20"
DEFAULT_REGION = "us-west-2"

# Cached entry names
REFRESH_TOKEN_KEY = "refresh_token"
IDENTITY_KEY = "identity"
USER_KEY = "user"


def default_home_path() -> Path:
    """Return the default secret store root.

    ``$XDG_CONFIG_HOME/.woz`` when set, otherwise ``$HOME/.woz``.

    Raises:
        RuntimeError: If neither variable is set.
    """
    base = os.environ.get("XDG_CONFIG_HOME") or os.environ.get("HOME")
    if not base:
        raise RuntimeError(
            "Cannot determine the woz home directory: "
            "set HOME, XDG_CONFIG_HOME or pass --home"
        )
    return Path(base) / HOME_DIRNAME


def require_env(name: str) -> str:
    """Read a mandatory environment variable."""
    value = os.environ.get(name)
    if not value:
        raise RuntimeError(f"{name} environment variable is not set")
    return value
