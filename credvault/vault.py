"""
Credential store operations.

One invocation opens the store, applies a single command and writes the
collection back. The write happens for every command, read-only ones
included, so each touch of the file seals it under a fresh nonce.
"""

import re
import logging
from enum import Enum
from typing import Callable, List, Optional

from . import config
from .codec import CredentialCollection, CredentialEntry
from .prompts import Prompter
from .storage import StorageManager
from .utils import copy_to_clipboard

logger = logging.getLogger(__name__)


class Command(Enum):
    ADD = "add"
    GET = "get"
    MODIFY = "modify"
    DELETE = "delete"
    LIST = "list"
    CHANGE_PASSWORD = "change-password"


COMMANDS_WITH_ID = (Command.ADD, Command.GET, Command.MODIFY, Command.DELETE)


def is_valid_id(entry_id: str) -> bool:
    return re.fullmatch(config.ID_PATTERN, entry_id) is not None


def _has_line_break(*values: str) -> bool:
    return any("\n" in value or "\r" in value for value in values)


class CredentialStore:
    """Applies CRUD commands to the decrypted collection."""

    def __init__(self, storage: StorageManager, prompter: Prompter,
                 clipboard: Callable[[str], bool] = copy_to_clipboard,
                 write: Callable[[str], None] = print):
        self.storage = storage
        self.prompter = prompter
        self._clipboard = clipboard
        self._write = write
        self._entries: CredentialCollection = {}

    def run(self, command: Command, entry_id: Optional[str] = None) -> None:
        """
        Prompt for the master password, apply one command and persist.

        Raises:
            DecryptError: If the store cannot be opened with the password
            MalformedRecord: If the decrypted store is not a valid record list
            OSError: If the store file cannot be read or written
        """
        if command in COMMANDS_WITH_ID and entry_id is None:
            raise ValueError(f"Command '{command.value}' requires an id")

        master_password = self.prompter.password(config.PROMPT_MASTER_PASSWORD)
        self.open(master_password)
        try:
            self.dispatch(command, entry_id)
            self.persist()
        finally:
            self.close()

    def open(self, master_password: str) -> None:
        self._entries = self.storage.unlock(master_password)
        logger.debug(f"Opened store with {len(self._entries)} entries")

    def persist(self) -> None:
        self.storage.save(self._entries)

    def close(self) -> None:
        self.storage.lock()
        self._entries = {}

    def dispatch(self, command: Command, entry_id: Optional[str] = None) -> None:
        if command is Command.ADD:
            self.add(entry_id)
        elif command is Command.GET:
            self.get(entry_id)
        elif command is Command.MODIFY:
            self.modify(entry_id)
        elif command is Command.DELETE:
            self.delete(entry_id)
        elif command is Command.LIST:
            self.list_ids()
        elif command is Command.CHANGE_PASSWORD:
            self.change_master_password()

    def list_ids(self) -> List[str]:
        """Print and return all ids in ascending order."""
        ids = sorted(self._entries)
        self._write("--- credvault IDs ---")
        for entry_id in ids:
            self._write(entry_id)
        self._write("---------------------")
        return ids

    def get(self, entry_id: str) -> Optional[CredentialEntry]:
        """
        Show the username for an id and copy its password to the clipboard.

        The password is never written to the terminal.

        Returns:
            A copy of the entry, or None if the id does not exist
        """
        entry = self._entries.get(entry_id)
        if entry is None:
            self._write(f"ID '{entry_id}' does not exist")
            return None

        result = entry.copy()
        self._write(f"--- Credentials for {entry_id} ---")
        self._write(f"username: {result.username}")
        if self._clipboard(result.password):
            self._write("password: [hidden] (copied to clipboard)")
            self._write(config.CLIPBOARD_NOT_CLEARED_NOTICE)
        else:
            self._write("password: [hidden] (clipboard unavailable, nothing copied)")
        return result

    def add(self, entry_id: str) -> bool:
        """Prompt for a username and password and store them under a new id."""
        if not is_valid_id(entry_id):
            self._write("Invalid ID: only a-z, A-Z, 0-9, '-', and '_' are allowed")
            return False
        if entry_id in self._entries:
            self._write("Credentials with given ID already exist")
            return False

        username = self.prompter.text(config.PROMPT_USERNAME)
        password = self.prompter.password(config.PROMPT_PASSWORD, config.PROMPT_CONFIRM_PASSWORD)
        if _has_line_break(username, password):
            self._write("Username and password cannot contain line breaks")
            return False

        self._entries[entry_id] = CredentialEntry(username, password)
        self._entries = dict(sorted(self._entries.items()))
        logger.info(f"Added entry {entry_id}")
        self._write(f"Added credentials with ID '{entry_id}'")
        return True

    def delete(self, entry_id: str) -> bool:
        """Remove an entry after explicit confirmation."""
        if entry_id not in self._entries:
            self._write(f"Credentials with id '{entry_id}' does not exist.")
            return False

        if not self.prompter.confirm(f"Do you want to delete credentials with id '{entry_id}'?"):
            return False

        del self._entries[entry_id]
        logger.info(f"Deleted entry {entry_id}")
        self._write(f"Deleted credentials with id '{entry_id}'")
        return True

    def modify(self, entry_id: str) -> bool:
        """Replace either the password or the username of an entry."""
        entry = self._entries.get(entry_id)
        if entry is None:
            self._write(f"Credentials with id '{entry_id}' does not exist.")
            return False

        self._write(f"Modifying credentials with ID - {entry_id}")
        choice = self.prompter.select(config.PROMPT_MODIFY_CHOICE, config.MODIFY_FIELDS)
        field_name = config.MODIFY_FIELDS[choice]

        if field_name == "password":
            value = self.prompter.password(config.PROMPT_NEW_PASSWORD, config.PROMPT_CONFIRM_PASSWORD)
        else:
            value = self.prompter.text(config.PROMPT_NEW_USERNAME)
        if _has_line_break(value):
            self._write(f"The {field_name} cannot contain line breaks")
            return False

        setattr(entry, field_name, value)
        logger.info(f"Modified {field_name} of entry {entry_id}")
        self._write(f"{field_name.capitalize()} updated.")
        return True

    def change_master_password(self) -> None:
        """Re-key the store; the next persist() seals it under the new password."""
        new_password = self.prompter.password(
            config.PROMPT_NEW_MASTER_PASSWORD, config.PROMPT_CONFIRM_MASTER_PASSWORD
        )
        self.storage.change_master_password(new_password)
        self._write("Master password updated.")

    @property
    def entries(self) -> CredentialCollection:
        """Copies of the currently loaded entries."""
        return {entry_id: entry.copy() for entry_id, entry in self._entries.items()}
