"""Tests for key derivation and AES-GCM sealing."""

import hashlib
import secrets

import pytest

from credvault import config
from credvault.crypto import CryptoManager, EncryptionKey
from credvault.exceptions import (
    AuthenticationFailed,
    DecryptError,
    EncodingError,
    InsufficientData,
)


@pytest.fixture
def crypto():
    return CryptoManager()


def random_key() -> EncryptionKey:
    return EncryptionKey(secrets.token_bytes(32))


class TestDeriveKey:
    def test_is_sha256_of_password(self, crypto):
        key = crypto.derive_key("hunter2")
        assert bytes(key.material) == hashlib.sha256(b"hunter2").digest()

    def test_deterministic(self, crypto):
        assert crypto.derive_key("same") == crypto.derive_key("same")

    def test_different_passwords_differ(self, crypto):
        assert crypto.derive_key("one") != crypto.derive_key("two")

    def test_empty_password_allowed(self, crypto):
        key = crypto.derive_key("")
        assert len(key.material) == config.KEY_SIZE

    def test_unicode_password_uses_utf8(self, crypto):
        key = crypto.derive_key("päss\U0001f511")
        assert bytes(key.material) == hashlib.sha256("päss\U0001f511".encode("utf-8")).digest()


class TestHardenedKey:
    def test_same_salt_same_key(self, crypto, fast_argon2):
        salt = crypto.generate_salt()
        assert crypto.derive_hardened_key("pw", salt) == crypto.derive_hardened_key("pw", salt)

    def test_salt_changes_key(self, crypto, fast_argon2):
        a = crypto.derive_hardened_key("pw", crypto.generate_salt())
        b = crypto.derive_hardened_key("pw", crypto.generate_salt())
        assert a != b

    def test_differs_from_unsalted_key(self, crypto, fast_argon2):
        hardened = crypto.derive_hardened_key("pw", crypto.generate_salt())
        assert hardened != crypto.derive_key("pw")

    def test_salt_size(self, crypto):
        assert len(crypto.generate_salt()) == config.SALT_SIZE


class TestEncryptionKey:
    def test_rejects_wrong_length(self):
        with pytest.raises(ValueError):
            EncryptionKey(b"short")

    def test_wipe_zeroes_buffer(self):
        key = random_key()
        buffer = key.material
        key.wipe()
        assert buffer == bytearray(config.KEY_SIZE)
        assert key.wiped

    def test_material_unavailable_after_wipe(self):
        key = random_key()
        key.wipe()
        with pytest.raises(ValueError, match="wiped"):
            key.material

    def test_context_manager_wipes(self):
        with random_key() as key:
            buffer = key.material
        assert buffer == bytearray(config.KEY_SIZE)

    def test_repr_hides_key(self):
        raw = b"\x41" * config.KEY_SIZE
        key = EncryptionKey(raw)
        assert "41" not in repr(key)
        assert "AAAA" not in repr(key)
        assert "redacted" in repr(key)


class TestEncryptDecrypt:
    def test_roundtrip(self, crypto):
        key = random_key()
        blob = crypto.encrypt(b"alice;bob;secret", key)
        assert crypto.decrypt(blob, key) == "alice;bob;secret"

    def test_empty_plaintext(self, crypto):
        key = random_key()
        assert crypto.decrypt(crypto.encrypt(b"", key), key) == ""

    def test_unicode(self, crypto):
        key = random_key()
        plaintext = "sekrit: \U0001f511 emoji-key"
        assert crypto.decrypt(crypto.encrypt(plaintext.encode("utf-8"), key), key) == plaintext

    def test_layout_is_ciphertext_tag_nonce(self, crypto):
        key = random_key()
        blob = crypto.encrypt(b"12345", key)
        assert len(blob) == 5 + config.TAG_SIZE + config.NONCE_SIZE

    def test_nonces_are_unique(self, crypto):
        key = random_key()
        nonces = {crypto.encrypt(b"same", key)[-config.NONCE_SIZE:] for _ in range(10_000)}
        assert len(nonces) == 10_000

    def test_wrong_key_fails(self, crypto):
        blob = crypto.encrypt(b"secret", random_key())
        with pytest.raises(AuthenticationFailed, match="Master password is incorrect"):
            crypto.decrypt(blob, random_key())

    @pytest.mark.parametrize("position", [0, 3, 7, 8 + config.TAG_SIZE - 1])
    def test_tampered_ciphertext_fails(self, crypto, position):
        key = random_key()
        blob = bytearray(crypto.encrypt(b"8 bytes!", key))
        blob[position] ^= 0x01
        with pytest.raises(AuthenticationFailed):
            crypto.decrypt(bytes(blob), key)

    def test_tampered_nonce_fails(self, crypto):
        key = random_key()
        blob = bytearray(crypto.encrypt(b"payload", key))
        blob[-1] ^= 0x80
        with pytest.raises(AuthenticationFailed):
            crypto.decrypt(bytes(blob), key)

    def test_shorter_than_nonce(self, crypto):
        with pytest.raises(InsufficientData):
            crypto.decrypt(b"short", random_key())

    def test_nonce_without_tag(self, crypto):
        with pytest.raises(AuthenticationFailed):
            crypto.decrypt(b"\x00" * (config.NONCE_SIZE + 4), random_key())

    def test_non_utf8_plaintext(self, crypto):
        key = random_key()
        blob = crypto.encrypt(b"\xff\xfe\xfd", key)
        with pytest.raises(EncodingError, match="UTF-8"):
            crypto.decrypt(blob, key)

    def test_errors_share_base_class(self):
        for error in (AuthenticationFailed, InsufficientData, EncodingError):
            assert issubclass(error, DecryptError)
