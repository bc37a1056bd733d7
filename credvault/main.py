"""
Main entry point for the credvault command line.

Usage:
    credvault add <id>          # Store a new username and password
    credvault get <id>          # Show the username, copy the password
    credvault modify <id>       # Replace the username or the password
    credvault delete <id>       # Remove an entry
    credvault list              # List all ids
    credvault change-password   # Change the master password
"""

import sys
import logging
import argparse
from typing import List, Optional

from . import config
from .exceptions import VaultError
from .prompts import Prompter
from .storage import StorageManager
from .vault import Command, CredentialStore

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=config.APP_NAME, description=config.APP_DESCRIPTION)
    parser.add_argument("--version", action="version", version=f"%(prog)s {config.APP_VERSION}")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command")

    add_parser = subparsers.add_parser(Command.ADD.value, help="Add login credentials")
    add_parser.add_argument("id", help="ID")

    get_parser = subparsers.add_parser(Command.GET.value, help="Get login credentials by an ID")
    get_parser.add_argument("id", help="ID")

    modify_parser = subparsers.add_parser(Command.MODIFY.value, help="Modify login credentials")
    modify_parser.add_argument("id", help="ID")

    delete_parser = subparsers.add_parser(Command.DELETE.value, help="Delete login credentials")
    delete_parser.add_argument("id", help="ID")

    subparsers.add_parser(Command.LIST.value, help="List all IDs")
    subparsers.add_parser(Command.CHANGE_PASSWORD.value, help="Change master password")

    return parser


def main(argv: Optional[List[str]] = None, prompter: Optional[Prompter] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format=config.LOG_FORMAT,
    )

    if args.command is None:
        parser.print_help()
        return 0

    command = Command(args.command)
    entry_id = getattr(args, "id", None)

    try:
        storage = StorageManager(config.get_store_path())
        store = CredentialStore(storage, prompter or Prompter())
        store.run(command, entry_id)
    except (VaultError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        logger.debug("I/O failure", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (KeyboardInterrupt, EOFError):
        print("\nAborted.", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
