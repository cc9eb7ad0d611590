"""
Tests for SecretStore and CredentialCache.

Tests cover:
- Plain and encrypted entry round-trips
- On-disk layout (dot-prefixed files, sealed bytes, file mode)
- Missing entries vs. corrupt entries
- Key validation
- Named credential accessors
"""
import os
import stat

import pytest

from woz_session.exceptions import CacheMiss, CacheCorrupt, CryptoFailure
from woz_session.vault import SecretStore, CredentialCache, StoreConfig
from woz_session.vault.crypto import NONCE_SIZE, TAG_SIZE


# --- Plain entries ---

class TestPlainEntries:
    """Tests for get/set."""

    def test_set_then_get(self, store):
        store.set("test-get-key", b"test value")
        assert store.get("test-get-key") == b"test value"

    def test_file_layout(self, store):
        store.set("test-set-key", b"test value")
        path = store.root / ".test-set-key"
        assert path.read_bytes() == b"test value"
        assert store.path_for("test-set-key") == path

    def test_creates_root(self, tmp_path):
        root = tmp_path / "nested" / "home" / ".woz"
        store = SecretStore(root, b"k" * 32)
        store.set("identity", b"id_123")
        assert root.is_dir()

    def test_overwrite_replaces_value(self, store):
        store.set("identity", b"a much longer first value")
        store.set("identity", b"short")
        assert store.get("identity") == b"short"

    def test_no_temp_files_left(self, store):
        store.set("identity", b"one")
        store.set("identity", b"two")
        assert sorted(os.listdir(store.root)) == [".identity"]

    def test_file_mode(self, store):
        store.set("identity", b"id_123")
        mode = stat.S_IMODE(store.path_for("identity").stat().st_mode)
        assert mode == 0o600

    def test_empty_value(self, store):
        store.set("empty", b"")
        assert store.get("empty") == b""

    def test_missing_entry(self, store):
        with pytest.raises(CacheMiss) as exc:
            store.get("identity")
        assert exc.value.key == "identity"

    def test_cache_miss_is_key_error(self, store):
        with pytest.raises(KeyError):
            store.get("identity")

    def test_exists(self, store):
        assert store.exists("identity") is False
        store.set("identity", b"id_123")
        assert store.exists("identity") is True

    def test_str_value_rejected(self, store):
        with pytest.raises(TypeError):
            store.set("identity", "id_123")

    @pytest.mark.parametrize("key", ["", "a/b", "../escape", ".hidden"])
    def test_invalid_keys(self, store, key):
        with pytest.raises(ValueError):
            store.set(key, b"value")


# --- Encrypted entries ---

class TestEncryptedEntries:
    """Tests for get_encrypted/set_encrypted."""

    def test_set_then_get(self, store):
        store.set_encrypted("test-get-encrypted-key", b"test value")
        assert store.get_encrypted("test-get-encrypted-key") == b"test value"

    def test_stored_bytes_are_sealed(self, store):
        store.set_encrypted("refresh_token", b"test value")
        raw = store.path_for("refresh_token").read_bytes()
        assert raw != b"test value"
        assert len(raw) == len(b"test value") + TAG_SIZE + NONCE_SIZE
        assert store.decrypt(raw) == b"test value"

    def test_non_utf8_roundtrip(self, store):
        store.set_encrypted("blob", b"\xff\x00\xfe")
        assert store.get_encrypted("blob") == b"\xff\x00\xfe"

    def test_empty_roundtrip(self, store):
        store.set_encrypted("blob", b"")
        assert store.get_encrypted("blob") == b""

    def test_missing_entry(self, store):
        with pytest.raises(CacheMiss):
            store.get_encrypted("refresh_token")

    def test_corrupt_entry(self, store):
        store.set_encrypted("refresh_token", b"test value")
        path = store.path_for("refresh_token")
        raw = bytearray(path.read_bytes())
        raw[0] ^= 0x01
        path.write_bytes(bytes(raw))
        with pytest.raises(CryptoFailure):
            store.get_encrypted("refresh_token")

    def test_plain_entry_read_as_encrypted(self, store):
        store.set("refresh_token", b"not actually sealed, just long enough")
        with pytest.raises(CryptoFailure):
            store.get_encrypted("refresh_token")

    def test_readable_by_new_instance_with_same_config(self, store_config):
        SecretStore.from_config(store_config).set_encrypted("k", b"v")
        assert SecretStore.from_config(store_config).get_encrypted("k") == b"v"

    def test_unreadable_with_other_password(self, store_config):
        SecretStore.from_config(store_config).set_encrypted("k", b"v")
        other = StoreConfig(
            root=store_config.root, password="other", salt=store_config.salt,
        )
        with pytest.raises(CryptoFailure):
            SecretStore.from_config(other).get_encrypted("k")

    def test_repr_hides_key(self, store):
        assert "test password" not in repr(store)


# --- Credential cache ---

class TestCredentialCache:
    """Tests for CredentialCache."""

    def test_secret_roundtrip(self, cache, store):
        cache.set_secret("refresh_token", "rt-123")
        assert cache.get_secret("refresh_token") == "rt-123"
        assert store.path_for("refresh_token").read_bytes() != b"rt-123"

    def test_plain_roundtrip(self, cache, store):
        cache.set_plain("identity", "id_123")
        assert cache.get_plain("identity") == "id_123"
        assert store.get("identity") == b"id_123"

    def test_refresh_token_is_encrypted(self, cache, store):
        cache.store_refresh_token("rt-123")
        assert cache.refresh_token() == "rt-123"
        assert store.get_encrypted("refresh_token") == b"rt-123"

    def test_identity_is_plain(self, cache, store):
        cache.store_identity_id("us-west-2:abc")
        assert store.get("identity") == b"us-west-2:abc"
        assert cache.identity_id() == "us-west-2:abc"

    def test_identity_strips_trailing_newline(self, cache, store):
        store.set("identity", b"id_123\n")
        assert cache.identity_id() == "id_123"

    def test_blank_identity_is_a_miss(self, cache, store):
        store.set("identity", b"  \n")
        with pytest.raises(CacheMiss):
            cache.identity_id()

    def test_user_id(self, cache, store):
        cache.store_user_id("user-sub")
        assert store.get("user") == b"user-sub"
        assert cache.user_id() == "user-sub"

    def test_missing(self, cache):
        with pytest.raises(CacheMiss):
            cache.refresh_token()
        with pytest.raises(CacheMiss):
            cache.identity_id()

    def test_undecodable_secret(self, cache, store):
        store.set_encrypted("refresh_token", b"\xff\xfe")
        with pytest.raises(CacheCorrupt):
            cache.refresh_token()

    def test_undecodable_plain(self, cache, store):
        store.set("identity", b"\xff\xfe")
        with pytest.raises(CacheCorrupt):
            cache.identity_id()

    def test_wraps_store(self, store):
        assert CredentialCache(store).store is store
