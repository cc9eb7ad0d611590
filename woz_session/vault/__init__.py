"""Secret Vault — Encrypted local storage for the woz CLI.

Security Note (Threat Model):
    The master key is derived from an application-wide password and salt
    shipped with the CLI, so the store protects cached tokens against
    casual disclosure and tampering, not against an attacker who holds
    both the user's files and the CLI binary configuration.
"""

from .config import StoreConfig
from .crypto import derive_key, encrypt, decrypt
from .store import SecretStore
from .credentials import CredentialCache

__all__ = [
    "StoreConfig",
    "SecretStore",
    "CredentialCache",
    "derive_key",
    "encrypt",
    "decrypt",
]
