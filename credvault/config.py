"""
Configuration constants for the credvault credential store.
"""

import os
from typing import Optional

# Application Metadata
APP_VERSION = "0.3.0"  # Use: Current version of the application. Type: str. Range: Semantic versioning string (e.g., "1.0.0")
APP_NAME = "credvault"  # Use: Program name shown in help output and used for the config directory. Type: str. Range: Any valid string.
APP_DESCRIPTION = "Local encrypted credential store"  # Use: One-line description for the command line help. Type: str. Range: Any valid string.

# Security Settings
KEY_SIZE = 32  # Use: Size of the encryption key in bytes. Corresponds to AES-256. Type: int. Range: 32 bytes; must equal the SHA-256 digest size.
NONCE_SIZE = 12  # Use: Size of the Nonce (Number used once) in bytes for AES-GCM. Type: int. Range: 12 bytes (96 bits) is the recommended size for GCM.
TAG_SIZE = 16  # Use: Size of the authentication tag in bytes for AES-GCM. Type: int. Range: 16 bytes (128 bits) is the recommended size for GCM.
SALT_SIZE = 16  # Use: Size of the cryptographic salt in bytes for Argon2id key derivation. Type: int. Range: Recommended to be at least 16 bytes (128 bits) for security.
ARGON2_TIME_COST = 2  # Use: Argon2id time cost parameter. Controls the number of iterations. Type: int. Range: Typically 1 to 10. Higher values increase security but also computation time.
ARGON2_MEMORY_COST = 65536  # Use: Argon2id memory cost parameter. Controls the memory usage in KiB. Type: int. Range: Recommended to be at least 65536 (64 MB).
ARGON2_PARALLELISM = 4  # Use: Argon2id parallelism parameter. Controls the number of threads/lanes. Type: int. Range: Typically 1 to 8.

# Key Derivation Selection
KDF_SHA256 = "sha256"  # Use: Name of the unsalted single-hash key derivation. Type: str. Range: "sha256"
KDF_ARGON2ID = "argon2id"  # Use: Name of the salted Argon2id key derivation. Type: str. Range: "argon2id"
SUPPORTED_KDFS = (KDF_SHA256, KDF_ARGON2ID)  # Use: Accepted values for the KDF setting. Type: tuple[str]. Range: Fixed.
DEFAULT_KDF = KDF_SHA256  # Use: Key derivation for a new store when CREDVAULT_KDF is not set; existing stores keep their layout. Type: str. Range: One of SUPPORTED_KDFS.
SALTED_MAGIC = b"CVA2"  # Use: Magic bytes opening a salted (Argon2id) store file. Type: bytes. Range: Exactly 4 bytes.

# Record Format
FIELD_DELIMITER = ";"  # Use: Separator between id, username and password on one record line. Type: str. Range: Single character.
DELIMITER_SENTINEL = "###semicolon###"  # Use: Token that stands in for the delimiter inside username and password fields. Type: str. Range: Any string not containing FIELD_DELIMITER.
RECORD_SEPARATOR = "\n"  # Use: Separator between record lines. Type: str. Range: "\n"
ID_PATTERN = r"[A-Za-z0-9_-]+"  # Use: Regular expression every credential id must fully match when added. Type: str. Range: Valid regular expression.

# File and Directory Names
CONFIG_DIR_NAME = ".credvault"  # Use: Name of the hidden directory within the user's home directory holding the store. Type: str. Range: Any valid directory name.
DEFAULT_STORE_FILE = "data"  # Use: Filename of the encrypted credential store. Type: str. Range: Any valid filename.
TEMP_FILE_SUFFIX = ".tmp"  # Use: Suffix of the file written before atomically replacing the store. Type: str. Range: Any valid filename suffix.

# Environment Overrides
HOME_ENV_VAR = "CREDVAULT_HOME"  # Use: Environment variable naming the directory that holds the store file. Type: str. Range: Any valid variable name.
KDF_ENV_VAR = "CREDVAULT_KDF"  # Use: Environment variable selecting the key derivation for new writes. Type: str. Range: Any valid variable name.

# Logging
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"  # Use: Format string passed to logging.basicConfig. Type: str. Range: Valid logging format.

# Prompt Texts
PROMPT_MASTER_PASSWORD = "Enter master password"  # Use: Prompt for the master password at the start of every command. Type: str. Range: Any descriptive string.
PROMPT_NEW_MASTER_PASSWORD = "Enter new master password"  # Use: Prompt for the replacement master password. Type: str. Range: Any descriptive string.
PROMPT_CONFIRM_MASTER_PASSWORD = "Confirm master password"  # Use: Confirmation prompt for the replacement master password. Type: str. Range: Any descriptive string.
PROMPT_USERNAME = "Enter username/email"  # Use: Prompt for the username of a new entry. Type: str. Range: Any descriptive string.
PROMPT_NEW_USERNAME = "Enter new username"  # Use: Prompt for a replacement username. Type: str. Range: Any descriptive string.
PROMPT_PASSWORD = "Enter password"  # Use: Prompt for the password of a new entry. Type: str. Range: Any descriptive string.
PROMPT_NEW_PASSWORD = "Enter new password"  # Use: Prompt for a replacement password. Type: str. Range: Any descriptive string.
PROMPT_CONFIRM_PASSWORD = "Confirm password"  # Use: Confirmation prompt for entry passwords. Type: str. Range: Any descriptive string.
PROMPT_MISMATCH = "Passwords don't match"  # Use: Message shown when a confirmation does not match. Type: str. Range: Any descriptive string.
PROMPT_MODIFY_CHOICE = "What would you like to modify?"  # Use: Prompt for choosing which field to modify. Type: str. Range: Any descriptive string.
CLIPBOARD_NOT_CLEARED_NOTICE = "The clipboard is not cleared automatically; clear it once you have pasted the password."  # Use: Reminder printed after a password is copied, since the process exits before it could clear the clipboard. Type: str. Range: Any descriptive string.
MODIFY_FIELDS = ("password", "username")  # Use: Choices offered by the modify command, in display order. Type: tuple[str]. Range: Fixed.


def get_store_path() -> str:
    """Return the path of the encrypted store file for the current user."""
    base_dir = os.environ.get(HOME_ENV_VAR)
    if not base_dir:
        base_dir = os.path.join(os.path.expanduser("~"), CONFIG_DIR_NAME)
    return os.path.join(base_dir, DEFAULT_STORE_FILE)


def get_kdf() -> Optional[str]:
    """
    Return the key derivation explicitly requested for writes.

    Returns:
        The CREDVAULT_KDF value, or None when it is unset, in which case an
        existing store keeps the layout it already has

    Raises:
        ValueError: If CREDVAULT_KDF names an unsupported derivation
    """
    kdf = os.environ.get(KDF_ENV_VAR, "").strip().lower()
    if not kdf:
        return None
    if kdf not in SUPPORTED_KDFS:
        raise ValueError(
            f"Unsupported {KDF_ENV_VAR} value '{kdf}', expected one of: {', '.join(SUPPORTED_KDFS)}"
        )
    return kdf
