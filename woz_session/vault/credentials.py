"""
CredentialCache — Names which cached values are secrets.

Secrets (the refresh token) are sealed with the store's master key;
non-secret values that still have to persist (identity id, user id) are
written as plain UTF-8.
"""
import logging

from ..conf import REFRESH_TOKEN_KEY, IDENTITY_KEY, USER_KEY
from ..exceptions import CacheCorrupt, CacheMiss
from .store import SecretStore

logger = logging.getLogger("woz.session")


def _decode(key: str, raw: bytes) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as err:
        raise CacheCorrupt(f"Cached entry {key!r} is not valid UTF-8") from err


class CredentialCache:
    """Text accessor over a SecretStore."""

    def __init__(self, store: SecretStore):
        self._store = store

    @property
    def store(self) -> SecretStore:
        return self._store

    # ------------------------------------------------------------------
    # Generic accessors
    # ------------------------------------------------------------------

    def get_secret(self, key: str) -> str:
        """Return a decrypted secret.

        Raises:
            CacheMiss: If nothing is cached under key.
            CryptoFailure: If the entry is tampered or undecodable.
        """
        return _decode(key, self._store.get_encrypted(key))

    def set_secret(self, key: str, value: str) -> None:
        self._store.set_encrypted(key, value.encode("utf-8"))

    def get_plain(self, key: str) -> str:
        """Return a plaintext value.

        Raises:
            CacheMiss: If nothing is cached under key.
            CacheCorrupt: If the entry is not valid UTF-8.
        """
        return _decode(key, self._store.get(key))

    def set_plain(self, key: str, value: str) -> None:
        self._store.set(key, value.encode("utf-8"))

    # ------------------------------------------------------------------
    # Named entries
    # ------------------------------------------------------------------

    def refresh_token(self) -> str:
        return self.get_secret(REFRESH_TOKEN_KEY)

    def store_refresh_token(self, token: str) -> None:
        self.set_secret(REFRESH_TOKEN_KEY, token)
        logger.debug("Cached refresh token")

    def identity_id(self) -> str:
        value = self.get_plain(IDENTITY_KEY).strip()
        if not value:
            raise CacheMiss(IDENTITY_KEY)
        return value

    def store_identity_id(self, identity_id: str) -> None:
        self.set_plain(IDENTITY_KEY, identity_id)
        logger.debug("Cached identity id")

    def user_id(self) -> str:
        return self.get_plain(USER_KEY).strip()

    def store_user_id(self, user_id: str) -> None:
        self.set_plain(USER_KEY, user_id)
