"""
Cryptographic operations for the credential store.

Keys are derived from the master password and used for AES-256-GCM. A sealed
blob is laid out as ciphertext || tag || nonce, with the 12-byte nonce at the
end.
"""

import os
import hmac
import logging

from argon2.low_level import hash_secret_raw, Type
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from . import config
from .exceptions import AuthenticationFailed, EncodingError, InsufficientData

logger = logging.getLogger(__name__)


class EncryptionKey:
    """
    A 256-bit key that lives in a mutable buffer so it can be scrubbed.

    Use it as a context manager, or call wipe() once it is no longer needed.
    The key bytes never appear in repr() output.
    """

    __slots__ = ("_material", "_wiped")
    __hash__ = None

    def __init__(self, material: bytes):
        if len(material) != config.KEY_SIZE:
            raise ValueError(f"Key must be {config.KEY_SIZE} bytes, got {len(material)}")
        self._material = bytearray(material)
        self._wiped = False

    @property
    def material(self) -> bytearray:
        if self._wiped:
            raise ValueError("Key has been wiped")
        return self._material

    @property
    def wiped(self) -> bool:
        return self._wiped

    def wipe(self) -> None:
        """Overwrite the key bytes with zeros."""
        for i in range(len(self._material)):
            self._material[i] = 0
        self._wiped = True

    def __enter__(self) -> "EncryptionKey":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.wipe()

    def __del__(self):
        if getattr(self, "_material", None) is not None:
            self.wipe()

    def __eq__(self, other) -> bool:
        if not isinstance(other, EncryptionKey):
            return NotImplemented
        return hmac.compare_digest(bytes(self.material), bytes(other.material))

    def __repr__(self) -> str:
        return "EncryptionKey(<wiped>)" if self._wiped else "EncryptionKey(<redacted>)"


class CryptoManager:
    """Handles all cryptographic operations for the credential store."""

    def __init__(self):
        """Initialize the crypto manager."""
        self.backend = default_backend()

    def generate_salt(self) -> bytes:
        """Generate a cryptographically secure random salt."""
        return os.urandom(config.SALT_SIZE)

    def derive_key(self, password: str) -> EncryptionKey:
        """
        Derive an encryption key from a password with a single SHA-256 pass.

        The same password always yields the same key, which is what lets an
        unsalted store be reopened with nothing but the password.

        Args:
            password: The master password (may be empty)

        Returns:
            32-byte encryption key
        """
        digest = hashes.Hash(hashes.SHA256(), backend=self.backend)
        digest.update(password.encode('utf-8'))
        return EncryptionKey(digest.finalize())

    def derive_hardened_key(self, password: str, salt: bytes) -> EncryptionKey:
        """
        Derive an encryption key from a password using Argon2id.

        Args:
            password: The master password
            salt: Random salt stored alongside the ciphertext

        Returns:
            32-byte encryption key
        """
        raw = hash_secret_raw(
            secret=password.encode('utf-8'),
            salt=salt,
            time_cost=config.ARGON2_TIME_COST,
            memory_cost=config.ARGON2_MEMORY_COST,
            parallelism=config.ARGON2_PARALLELISM,
            hash_len=config.KEY_SIZE,
            type=Type.ID
        )
        return EncryptionKey(raw)

    def encrypt(self, plaintext: bytes, key: EncryptionKey) -> bytes:
        """
        Encrypt data using AES-256-GCM with a fresh random nonce.

        Args:
            plaintext: Data to encrypt
            key: Encryption key

        Returns:
            ciphertext || tag || nonce
        """
        nonce = os.urandom(config.NONCE_SIZE)
        cipher = Cipher(
            algorithms.AES(key.material),
            modes.GCM(nonce),
            backend=self.backend
        )
        encryptor = cipher.encryptor()
        ciphertext = encryptor.update(plaintext) + encryptor.finalize()
        return ciphertext + encryptor.tag + nonce

    def decrypt(self, blob: bytes, key: EncryptionKey) -> str:
        """
        Decrypt a blob produced by encrypt().

        Args:
            blob: ciphertext || tag || nonce
            key: Decryption key

        Returns:
            Decrypted plaintext as text

        Raises:
            InsufficientData: If the blob cannot hold a nonce
            AuthenticationFailed: If the tag does not verify
            EncodingError: If the plaintext is not valid UTF-8
        """
        if len(blob) < config.NONCE_SIZE:
            raise InsufficientData()

        body, nonce = blob[:-config.NONCE_SIZE], blob[-config.NONCE_SIZE:]
        if len(body) < config.TAG_SIZE:
            logger.debug(f"Sealed data is {len(body)} bytes, too short for a GCM tag")
            raise AuthenticationFailed()

        ciphertext, tag = body[:-config.TAG_SIZE], body[-config.TAG_SIZE:]
        cipher = Cipher(
            algorithms.AES(key.material),
            modes.GCM(nonce, tag),
            backend=self.backend
        )
        decryptor = cipher.decryptor()
        try:
            plaintext = decryptor.update(ciphertext) + decryptor.finalize()
        except InvalidTag as e:
            raise AuthenticationFailed() from e

        try:
            return plaintext.decode('utf-8')
        except UnicodeDecodeError as e:
            raise EncodingError(f"UTF-8 error: {e}") from e
