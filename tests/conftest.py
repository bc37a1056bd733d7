"""
Shared test fixtures.
"""

from __future__ import annotations

from collections import deque

import pytest

from credvault import config
from credvault.storage import StorageManager
from credvault.vault import CredentialStore


class ScriptedPrompter:
    """Answers prompts from pre-recorded lists and remembers what was asked."""

    def __init__(self, passwords=(), texts=(), confirms=(), selections=()):
        self.passwords = deque(passwords)
        self.texts = deque(texts)
        self.confirms = deque(confirms)
        self.selections = deque(selections)
        self.asked: list[str] = []

    def password(self, prompt, confirmation=None):
        self.asked.append(prompt)
        return self.passwords.popleft()

    def text(self, prompt):
        self.asked.append(prompt)
        return self.texts.popleft()

    def confirm(self, prompt, default=False):
        self.asked.append(prompt)
        return self.confirms.popleft()

    def select(self, prompt, items, default=0):
        self.asked.append(prompt)
        return self.selections.popleft()


class FakeClipboard:
    def __init__(self, available=True):
        self.available = available
        self.contents = None

    def __call__(self, text):
        if not self.available:
            return False
        self.contents = text
        return True


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Point the store at a temp dir and clear the KDF override."""
    monkeypatch.setenv(config.HOME_ENV_VAR, str(tmp_path / "home"))
    monkeypatch.delenv(config.KDF_ENV_VAR, raising=False)


@pytest.fixture
def fast_argon2(monkeypatch):
    """Cheap Argon2id parameters so hardened-key tests run quickly."""
    monkeypatch.setattr(config, "ARGON2_TIME_COST", 1)
    monkeypatch.setattr(config, "ARGON2_MEMORY_COST", 64)
    monkeypatch.setattr(config, "ARGON2_PARALLELISM", 1)


@pytest.fixture
def scripted_prompter():
    return ScriptedPrompter


@pytest.fixture
def store_path(tmp_path):
    return str(tmp_path / "vault" / "data")


@pytest.fixture
def clipboard():
    return FakeClipboard()


@pytest.fixture
def output():
    lines: list[str] = []
    return lines


@pytest.fixture
def make_store(store_path, clipboard, output):
    """Build a CredentialStore over a fresh StorageManager with scripted answers."""

    def _make(kdf=config.KDF_SHA256, **answers):
        prompter = ScriptedPrompter(**answers)
        storage = StorageManager(store_path, kdf=kdf)
        return CredentialStore(storage, prompter, clipboard=clipboard, write=output.append)

    return _make
