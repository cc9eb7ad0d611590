"""Error taxonomy for the local identity layer.

Vault errors come from the on-disk secret store; provider errors come from
the identity provider. Callers switch on the class, never on message text.
"""
from typing import Optional


class WozSessionError(Exception):
    """Base class for every error raised by woz_session."""


class VaultError(WozSessionError):
    """The local secret store could not satisfy a request."""


class CacheMiss(VaultError, KeyError):
    """No entry is stored under the requested key."""

    def __init__(self, key: str):
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"No cached entry for {self.key!r}"


class CryptoFailure(VaultError):
    """An encrypted entry failed authentication and was not decrypted."""


class CacheCorrupt(CryptoFailure):
    """An entry decrypted (or read) fine but its content is unusable."""


class AuthProviderError(WozSessionError):
    """The identity provider rejected or failed a request."""

    retryable = False

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code


class LoginFailed(AuthProviderError):
    """Interactive login did not produce tokens."""


class AuthRejected(LoginFailed):
    """Bad credentials or an expired/revoked token."""

    retryable = True


class AccountUnverified(LoginFailed):
    """The account exists but its email address was never confirmed."""


class ProviderUnavailable(AuthProviderError):
    """Network or transport failure talking to the provider."""

    retryable = True


class ConfigurationFault(AuthProviderError):
    """A provider response is missing fields it always carries."""
