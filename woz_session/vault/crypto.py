"""
Vault Crypto Core — Key derivation and authenticated encryption.

- MasterKey: PBKDF2-HMAC-SHA256(password, salt, iterations) → 32 bytes
- Sealed entry: AEAD(MasterKey) → [ciphertext][tag 16B][nonce 12B]

The nonce trails the blob so every entry is self-describing.

Security Note:
    Never log plaintext, ciphertext or key material.
    Nonces are random 96-bit; collision probability negligible under normal usage.
"""
import os
import logging

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from cryptography.hazmat.primitives.ciphers.aead import AESGCM, ChaCha20Poly1305

from ..exceptions import CryptoFailure

logger = logging.getLogger("woz.session")

NONCE_SIZE = 12  # 96-bit nonce
TAG_SIZE = 16  # Poly1305 / GCM tag
KEY_LENGTH = 32  # 256-bit key

CIPHER_BACKENDS = {
    "chacha20": ChaCha20Poly1305,
    "aesgcm": AESGCM,
}


def get_cipher_cls(backend: str) -> type:
    """Return the AEAD cipher class for a backend name."""
    try:
        return CIPHER_BACKENDS[backend]
    except KeyError:
        raise ValueError(f"Unsupported cipher backend: {backend}") from None


# ---------------------------------------------------------------------------
# Key derivation
# ---------------------------------------------------------------------------

def derive_key(password: str, salt: str, iterations: int) -> bytes:
    """Derive the 32-byte master key using PBKDF2-HMAC-SHA256.

    Args:
        password: Application password.
        salt: Application salt.
        iterations: PBKDF2 iteration count; must match across runs.

    Returns:
        32-byte derived key.

    Raises:
        ValueError: If iterations is not a positive integer.
    """
    if isinstance(iterations, bool) or not isinstance(iterations, int) or iterations < 1:
        raise ValueError(f"iterations must be a positive integer, got {iterations!r}")
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=salt.encode("utf-8"),
        iterations=iterations,
    )
    return kdf.derive(password.encode("utf-8"))


# ---------------------------------------------------------------------------
# Sealing / opening
# ---------------------------------------------------------------------------

def encrypt(plaintext: bytes, key: bytes, cipher_backend: str = "chacha20") -> bytes:
    """Seal plaintext under key with a fresh random nonce.

    Format: [ciphertext][tag 16B][nonce 12B]

    Args:
        plaintext: Data to encrypt; any byte sequence, including empty.
        key: 32-byte master key.
        cipher_backend: AEAD backend name.

    Returns:
        Self-describing sealed blob.
    """
    cipher = get_cipher_cls(cipher_backend)(key)
    nonce = os.urandom(NONCE_SIZE)
    sealed = cipher.encrypt(nonce, plaintext, None)
    return sealed + nonce


def split_nonce(blob: bytes) -> tuple[bytes, bytes]:
    """Split a sealed blob into (ciphertext+tag, nonce).

    Raises:
        CryptoFailure: If the blob cannot hold a tag and a nonce.
    """
    _min = TAG_SIZE + NONCE_SIZE
    if len(blob) < _min:
        raise CryptoFailure(
            f"sealed blob too short: {len(blob)} bytes (minimum {_min})"
        )
    return blob[:-NONCE_SIZE], blob[-NONCE_SIZE:]


def decrypt(blob: bytes, key: bytes, cipher_backend: str = "chacha20") -> bytes:
    """Open a sealed blob produced by :func:`encrypt`.

    Fails closed: a wrong key, a swapped backend or any modified byte
    raises instead of returning plaintext.

    Args:
        blob: Sealed blob in format [ciphertext][tag][nonce].
        key: 32-byte master key.
        cipher_backend: AEAD backend name.

    Returns:
        Decrypted plaintext bytes.

    Raises:
        CryptoFailure: If the blob is truncated or fails authentication.
    """
    sealed, nonce = split_nonce(blob)
    cipher = get_cipher_cls(cipher_backend)(key)
    try:
        return cipher.decrypt(nonce, sealed, None)
    except InvalidTag as err:
        raise CryptoFailure(
            "sealed blob failed authentication (wrong key or tampered data)"
        ) from err
