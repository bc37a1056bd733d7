"""
Interactive terminal prompts.

Every method blocks until the user gives a usable answer. Ctrl-C and EOF are
not caught here; they end the invocation.
"""

import getpass
from typing import Callable, Optional, Sequence

from . import config


class Prompter:
    """Reads answers from the terminal."""

    def __init__(self,
                 read_line: Callable[[str], str] = input,
                 read_secret: Callable[[str], str] = getpass.getpass,
                 write: Callable[[str], None] = print):
        self._read_line = read_line
        self._read_secret = read_secret
        self._write = write

    def password(self, prompt: str, confirmation: Optional[str] = None) -> str:
        """
        Read a masked password.

        Args:
            prompt: Prompt text
            confirmation: If given, ask again with this prompt and repeat
                until both entries match

        Returns:
            The password (may be empty)
        """
        while True:
            value = self._read_secret(f"{prompt}: ")
            if confirmation is None:
                return value
            if self._read_secret(f"{confirmation}: ") == value:
                return value
            self._write(config.PROMPT_MISMATCH)

    def text(self, prompt: str) -> str:
        """Read a non-empty line of plain text."""
        while True:
            value = self._read_line(f"{prompt}: ")
            if value:
                return value

    def confirm(self, prompt: str, default: bool = False) -> bool:
        """Ask a yes/no question. An empty answer returns the default."""
        suffix = "[Y/n]" if default else "[y/N]"
        while True:
            answer = self._read_line(f"{prompt} {suffix} ").strip().lower()
            if not answer:
                return default
            if answer in ("y", "yes"):
                return True
            if answer in ("n", "no"):
                return False
            self._write("Please answer 'y' or 'n'")

    def select(self, prompt: str, items: Sequence[str], default: int = 0) -> int:
        """
        Let the user pick one item from a numbered list.

        Returns:
            Zero-based index of the chosen item
        """
        self._write(prompt)
        for number, item in enumerate(items, start=1):
            marker = "*" if number - 1 == default else " "
            self._write(f" {marker} {number}) {item}")

        while True:
            answer = self._read_line(f"Choice [{default + 1}]: ").strip()
            if not answer:
                return default
            if answer.isdigit() and 1 <= int(answer) <= len(items):
                return int(answer) - 1
            self._write(f"Enter a number between 1 and {len(items)}")
