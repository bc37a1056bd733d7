"""
Plaintext record format for the credential collection.

Each entry becomes one line ``id;username;password``. A literal ``;`` inside
the username or password is replaced by a sentinel token before writing and
restored after reading. A value that already contains the sentinel reads
back with a ``;`` in its place. Line breaks are not escaped, so values must
not contain them.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Dict

from . import config
from .exceptions import MalformedRecord

logger = logging.getLogger(__name__)

FIELD_COUNT = 3


@dataclass
class CredentialEntry:
    """A username and password stored under one id."""
    username: str
    password: str = field(repr=False)

    def copy(self) -> 'CredentialEntry':
        """Return an independent copy for handing out to callers."""
        return replace(self)


CredentialCollection = Dict[str, CredentialEntry]


def escape(value: str) -> str:
    return value.replace(config.FIELD_DELIMITER, config.DELIMITER_SENTINEL)


def unescape(value: str) -> str:
    return value.replace(config.DELIMITER_SENTINEL, config.FIELD_DELIMITER)


def encode(collection: CredentialCollection) -> str:
    """
    Serialize a collection in ascending id order.

    An empty collection encodes to an empty string. There is no trailing
    newline.
    """
    lines = []
    for entry_id in sorted(collection):
        entry = collection[entry_id]
        lines.append(config.FIELD_DELIMITER.join(
            (entry_id, escape(entry.username), escape(entry.password))
        ))
    return config.RECORD_SEPARATOR.join(lines)


def decode(text: str) -> CredentialCollection:
    """
    Parse text produced by encode() back into a collection.

    Args:
        text: Decrypted store contents

    Returns:
        Mapping of id to entry, in ascending id order

    Raises:
        MalformedRecord: If a non-empty line does not have exactly three fields
    """
    collection: CredentialCollection = {}
    for line_number, line in enumerate(text.split(config.RECORD_SEPARATOR), start=1):
        if not line:
            continue
        fields = line.split(config.FIELD_DELIMITER)
        if len(fields) != FIELD_COUNT:
            raise MalformedRecord(line_number, len(fields))
        entry_id, username, password = fields
        collection[entry_id] = CredentialEntry(unescape(username), unescape(password))

    logger.debug(f"Decoded {len(collection)} records")
    return dict(sorted(collection.items()))
