import os
import stat
import logging
import platform

import pyperclip

logger = logging.getLogger(__name__)


def set_owner_only_permissions(filepath: str) -> bool:
    """
    Make a file readable and writable by its owner only (0600).

    Windows ignores POSIX permission bits, so there the call is skipped and
    False is returned.
    """
    if platform.system() == "Windows":
        logger.warning(f"Skipping owner-only permissions for {filepath}: not supported on Windows.")
        return False

    try:
        os.chmod(filepath, stat.S_IRUSR | stat.S_IWUSR)
    except OSError as e:
        logger.error(f"Failed to set file permissions for {filepath}: {e}")
        return False
    return True


def copy_to_clipboard(text: str) -> bool:
    """
    Place text on the system clipboard.

    Returns:
        True if the clipboard accepted the text, False if no clipboard
        mechanism is available on this system
    """
    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException as e:
        logger.warning(f"Clipboard unavailable: {e}")
        return False
    return True
