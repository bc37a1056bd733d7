"""
Encrypted on-disk storage for the credential collection.

Two layouts are understood:

* unsalted: ``ciphertext || tag || nonce``, keyed by SHA-256 of the password;
* salted: ``CVA2 || uint32 salt length || salt || ciphertext || tag || nonce``,
  keyed by Argon2id over the password and salt.

Reads accept either layout. Writes keep the layout the file already has
unless CREDVAULT_KDF asks for a specific one, in which case the store is
converted the first time it is touched after the setting changes.
"""

import os
import shutil
import struct
import logging
from typing import Optional, Tuple

from . import codec
from . import config
from .codec import CredentialCollection
from .crypto import CryptoManager, EncryptionKey
from .exceptions import AuthenticationFailed
from .utils import set_owner_only_permissions

logger = logging.getLogger(__name__)

SALT_LENGTH_FORMAT = '<I'
SALTED_HEADER_SIZE = len(config.SALTED_MAGIC) + struct.calcsize(SALT_LENGTH_FORMAT)
OWNER_ONLY_MODE = 0o600


class StorageManager:
    """Manages encrypted storage of credential entries."""

    def __init__(self, filepath: str, kdf: Optional[str] = None):
        """
        Initialize storage manager.

        Args:
            filepath: Path to the encrypted storage file
            kdf: Key derivation for writes; defaults to CREDVAULT_KDF, and
                when that is unset the store keeps the layout it already has
        """
        self.filepath = filepath
        self.kdf = kdf or config.get_kdf()
        self.crypto = CryptoManager()
        self._key: Optional[EncryptionKey] = None
        self._salt: Optional[bytes] = None

    def is_unlocked(self) -> bool:
        """Check if a key is loaded."""
        return self._key is not None

    def unlock(self, master_password: str) -> CredentialCollection:
        """
        Read, decrypt and decode the store.

        An absent or empty file is an empty store.

        Args:
            master_password: The master password

        Returns:
            The decoded collection

        Raises:
            DecryptError: If the file cannot be decrypted with this password
            MalformedRecord: If the decrypted text is not a valid record list
        """
        self.lock()
        data = self._read_file()
        if not data:
            logger.debug(f"Store {self.filepath} is empty, starting a new collection")
            self._use_key(master_password, None, None, None)
            return {}

        plaintext, key, salt = self._open(data, master_password)
        self._use_key(master_password, key, salt, salt is not None)
        return codec.decode(plaintext)

    def save(self, collection: CredentialCollection) -> None:
        """Encode, encrypt and write the collection under the current key."""
        if not self.is_unlocked():
            raise RuntimeError("Vault is locked")

        plaintext = codec.encode(collection).encode('utf-8')
        blob = self.crypto.encrypt(plaintext, self._key)
        if self._salt is not None:
            blob = (
                config.SALTED_MAGIC
                + struct.pack(SALT_LENGTH_FORMAT, len(self._salt))
                + self._salt
                + blob
            )
        self._write_file(blob)
        logger.debug(f"Saved {len(collection)} records ({len(blob)} bytes) to {self.filepath}")

    def change_master_password(self, new_password: str) -> None:
        """Replace the key so the next save() seals under the new password."""
        if not self.is_unlocked():
            raise RuntimeError("Vault is locked")
        salted = self._salt is not None
        self._key.wipe()
        self._key = None
        self._use_key(new_password, None, None, salted)
        logger.info(f"Master key replaced ({self.active_kdf})")

    @property
    def active_kdf(self) -> Optional[str]:
        """Key derivation of the loaded key, or None when locked."""
        if self._key is None:
            return None
        return config.KDF_ARGON2ID if self._salt is not None else config.KDF_SHA256

    def lock(self) -> None:
        """Scrub the key from memory."""
        if self._key is not None:
            self._key.wipe()
        self._key = None
        self._salt = None

    def _open(self, data: bytes, master_password: str) -> Tuple[str, EncryptionKey, Optional[bytes]]:
        salted = self._split_salted(data)
        if salted is not None:
            salt, blob = salted
            key = self.crypto.derive_hardened_key(master_password, salt)
            try:
                return self.crypto.decrypt(blob, key), key, salt
            except AuthenticationFailed:
                key.wipe()
                logger.debug("Salted layout did not authenticate, trying unsalted layout")

        key = self.crypto.derive_key(master_password)
        try:
            return self.crypto.decrypt(data, key), key, None
        except Exception:
            key.wipe()
            raise

    def _split_salted(self, data: bytes) -> Optional[Tuple[bytes, bytes]]:
        if not data.startswith(config.SALTED_MAGIC) or len(data) < SALTED_HEADER_SIZE:
            return None
        salt_size = struct.unpack(
            SALT_LENGTH_FORMAT, data[len(config.SALTED_MAGIC):SALTED_HEADER_SIZE]
        )[0]
        if len(data) < SALTED_HEADER_SIZE + salt_size:
            return None
        salt = data[SALTED_HEADER_SIZE:SALTED_HEADER_SIZE + salt_size]
        return salt, data[SALTED_HEADER_SIZE + salt_size:]

    def _use_key(self, password: str, key: Optional[EncryptionKey], salt: Optional[bytes],
                 salted: Optional[bool]) -> None:
        """Keep the key that opened the file if it matches the target KDF, else derive one."""
        target = self._target_kdf(salted)
        if key is not None and salted == (target == config.KDF_ARGON2ID):
            self._key, self._salt = key, salt
            return

        if key is not None:
            key.wipe()
            if salted:
                logger.warning(
                    f"{config.KDF_ENV_VAR}={target}: store {self.filepath} is rewritten "
                    f"without its Argon2id salt"
                )
            else:
                logger.info(f"Converting store to {target} key derivation")
        if target == config.KDF_ARGON2ID:
            self._salt = self.crypto.generate_salt()
            self._key = self.crypto.derive_hardened_key(password, self._salt)
        else:
            self._salt = None
            self._key = self.crypto.derive_key(password)

    def _target_kdf(self, salted: Optional[bool]) -> str:
        """An explicit setting wins; otherwise an existing store keeps its layout."""
        if self.kdf is not None:
            return self.kdf
        if salted is None:
            return config.DEFAULT_KDF
        return config.KDF_ARGON2ID if salted else config.KDF_SHA256

    def _read_file(self) -> bytes:
        if not os.path.exists(self.filepath):
            return b''
        with open(self.filepath, 'rb') as f:
            return f.read()

    def _write_file(self, data: bytes) -> None:
        directory = os.path.dirname(self.filepath)
        if directory:
            os.makedirs(directory, exist_ok=True)

        tmp_path = self.filepath + config.TEMP_FILE_SUFFIX
        try:
            # a stale temp file would keep its old mode through O_CREAT
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, OWNER_ONLY_MODE)
            with os.fdopen(fd, 'wb') as f:
                f.write(data)

            # Atomic replace using shutil.move
            shutil.move(tmp_path, self.filepath)

            if not set_owner_only_permissions(self.filepath):
                logger.warning(f"Failed to set secure file permissions for store: {self.filepath}")
        except OSError as e:
            logger.error(f"Error saving store file {self.filepath}: {e}")
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
