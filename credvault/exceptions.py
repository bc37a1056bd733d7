"""
Error types raised by the credential store.

Domain no-ops (unknown id, duplicate id, invalid id) are not errors and never
show up here; they are reported to the user by the store itself.
"""


class VaultError(Exception):
    """Base class for every fault that ends an invocation."""


class DecryptError(VaultError):
    """The store file could not be turned back into plaintext."""


class AuthenticationFailed(DecryptError):
    """The GCM tag did not verify: wrong master password or a corrupted file."""

    def __init__(self, message: str = "Master password is incorrect"):
        super().__init__(message)


class InsufficientData(DecryptError):
    """The blob is too short to hold a nonce."""

    def __init__(self, message: str = "Insufficient data length"):
        super().__init__(message)


class EncodingError(DecryptError):
    """Decrypted bytes are not valid UTF-8."""


class MalformedRecord(VaultError):
    """A record line does not split into id, username and password."""

    def __init__(self, line_number: int, field_count: int):
        self.line_number = line_number
        self.field_count = field_count
        super().__init__(
            f"Malformed record on line {line_number}: expected 3 fields, found {field_count}"
        )
