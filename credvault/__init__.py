"""
credvault Credential Store

A single-user command line store for (id -> username, password) entries,
kept in one file encrypted with AES-256-GCM under a key derived from a master
password. All data stays on this device.
"""

from .config import APP_VERSION as __version__
