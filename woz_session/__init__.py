"""Woz Session.

Encrypted local secret store and authentication token lifecycle for the
woz command-line tool.
"""
from .version import __version__
from .exceptions import (
    WozSessionError,
    VaultError,
    CacheMiss,
    CryptoFailure,
    CacheCorrupt,
    AuthProviderError,
    LoginFailed,
    AuthRejected,
    AccountUnverified,
    ProviderUnavailable,
    ConfigurationFault,
)
from .vault import StoreConfig, SecretStore, CredentialCache
from .auth import (
    AuthenticatedSessionBuilder,
    TokenLifecycleManager,
)

__all__ = (
    "__version__",
    "WozSessionError",
    "VaultError",
    "CacheMiss",
    "CryptoFailure",
    "CacheCorrupt",
    "AuthProviderError",
    "LoginFailed",
    "AuthRejected",
    "AccountUnverified",
    "ProviderUnavailable",
    "ConfigurationFault",
    "StoreConfig",
    "SecretStore",
    "CredentialCache",
    "AuthenticatedSessionBuilder",
    "TokenLifecycleManager",
)
