"""
SecretStore — Encrypted file-backed storage for named entries.

Provides the public API for the local secret store:
- ``set(key, value)`` / ``get(key)`` — plaintext entries
- ``set_encrypted(key, value)`` / ``get_encrypted(key)`` — sealed entries
- ``exists(key)`` — check whether an entry is on disk
- ``from_config(config)`` — factory that derives the master key

Each entry is the file ``<root>/.<key>``. Writes go to a temporary file in
the same directory and are moved into place with ``os.replace``, so a
reader sees either the previous value or the new one.

Security Note:
    Never log entry values. Only log key names and operations.
"""
import os
import logging
import tempfile
from pathlib import Path
from typing import Union

from ..exceptions import CacheMiss
from .config import StoreConfig
from .crypto import derive_key, encrypt, decrypt

logger = logging.getLogger("woz.session")

_FILE_MODE = 0o600


class SecretStore:
    """Named byte entries under a root directory, optionally sealed.

    The master key is held for the lifetime of the instance and never
    written anywhere.
    """

    def __init__(
        self,
        root: Union[str, Path],
        master_key: bytes,
        cipher_backend: str = "chacha20",
    ):
        self._root = Path(root)
        self._key = master_key
        self._cipher_backend = cipher_backend

    def __repr__(self) -> str:
        return f"<SecretStore root={str(self._root)!r} cipher={self._cipher_backend}>"

    @property
    def root(self) -> Path:
        return self._root

    # ------------------------------------------------------------------
    # Key validation
    # ------------------------------------------------------------------

    def _validate_key(self, key: str) -> None:
        """Validate an entry name.

        Raises:
            ValueError: If key is empty or could escape the root directory.
        """
        if not key:
            raise ValueError("Entry key cannot be empty")
        if "/" in key or "\\" in key or os.sep in key:
            raise ValueError("Entry key cannot contain path separators")
        if key.startswith("."):
            raise ValueError("Entry key cannot start with '.'")

    def path_for(self, key: str) -> Path:
        """Return the file path backing ``key``."""
        self._validate_key(key)
        return self._root / f".{key}"

    # ------------------------------------------------------------------
    # Crypto
    # ------------------------------------------------------------------

    def encrypt(self, plaintext: bytes) -> bytes:
        """Seal plaintext under the store's master key."""
        return encrypt(plaintext, self._key, self._cipher_backend)

    def decrypt(self, blob: bytes) -> bytes:
        """Open a sealed blob; raises CryptoFailure on any mismatch."""
        return decrypt(blob, self._key, self._cipher_backend)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get(self, key: str) -> bytes:
        """Read a plaintext entry.

        Raises:
            CacheMiss: If no entry exists for key.
        """
        path = self.path_for(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            raise CacheMiss(key) from None

    def set(self, key: str, value: bytes) -> None:
        """Write a plaintext entry, replacing any previous value.

        Args:
            key: Entry name.
            value: Raw bytes to store.

        Raises:
            TypeError: If value is not bytes.
        """
        if not isinstance(value, (bytes, bytearray)):
            raise TypeError(
                f"Entry values must be bytes, got {type(value).__name__}"
            )
        path = self.path_for(key)
        self._root.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{key}.", suffix=".tmp", dir=self._root,
        )
        try:
            with os.fdopen(fd, "wb") as fp:
                fp.write(value)
                fp.flush()
                os.fsync(fp.fileno())
            os.chmod(tmp_name, _FILE_MODE)
            os.replace(tmp_name, path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise
        logger.debug("Store set: key=%s", key)

    def get_encrypted(self, key: str) -> bytes:
        """Read and decrypt a sealed entry.

        Raises:
            CacheMiss: If no entry exists for key.
            CryptoFailure: If the entry fails authentication.
        """
        blob = self.get(key)
        return self.decrypt(blob)

    def set_encrypted(self, key: str, value: bytes) -> None:
        """Encrypt and write a sealed entry, replacing any previous value."""
        if not isinstance(value, (bytes, bytearray)):
            raise TypeError(
                f"Entry values must be bytes, got {type(value).__name__}"
            )
        self.set(key, self.encrypt(bytes(value)))

    def exists(self, key: str) -> bool:
        """Check if an entry is present on disk."""
        return self.path_for(key).is_file()

    # ------------------------------------------------------------------
    # Factory
    # ------------------------------------------------------------------

    @classmethod
    def from_config(cls, config: StoreConfig) -> "SecretStore":
        """Derive the master key from config and open the store.

        Args:
            config: Validated store configuration.

        Returns:
            SecretStore rooted at ``config.root``.
        """
        master_key = derive_key(config.password, config.salt, config.iterations)
        logger.debug(
            "Secret store opened at %s (cipher=%s)",
            config.root, config.cipher_backend,
        )
        return cls(
            root=config.root,
            master_key=master_key,
            cipher_backend=config.cipher_backend,
        )
