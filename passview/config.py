"""
Configuration constants for the PassView application.
"""

import os
import logging

logger = logging.getLogger(__name__)


def _env_int(name: str, default: int) -> int:
    """Read a positive integer from the environment, falling back to default."""
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"Ignoring {name}={raw!r}: not an integer, using {default}")
        return default
    if value <= 0:
        logger.warning(f"Ignoring {name}={raw!r}: must be positive, using {default}")
        return default
    return value


# Application Metadata
APP_VERSION = "0.4"  # Use: Current version of the application. Type: str. Range: Semantic versioning string.
APP_NAME = "PassView"  # Use: Full name of the application. Type: str. Range: Any valid string.
APP_TITLE_PREFIX = f"{APP_NAME} v{APP_VERSION}"  # Use: Prefix for window titles. Type: str (f-string). Range: Derived from APP_NAME and APP_VERSION.
APP_STYLE = 'Fusion'  # Use: PyQt5 application style. Type: str. Range: Valid PyQt5 style names.

# Password Store Settings
PASSWORD_STORE_DIR = os.environ.get(  # Use: Root directory of the password store. Type: str. Range: Any directory path.
    "PASSWORD_STORE_DIR", os.path.join(os.path.expanduser("~"), ".password-store")
)
SECRET_FILE_EXTENSION = ".gpg"  # Use: Extension of encrypted secret files. Type: str. Range: ".gpg"
GPG_ID_FILE = ".gpg-id"  # Use: File listing the recipients a directory's secrets are encrypted to. Type: str. Range: ".gpg-id"
GPG_BINARY = os.environ.get("PASSVIEW_GPG", "gpg")  # Use: gpg executable used for decrypt/encrypt. Type: str. Range: Command name or absolute path.
GPG_TIMEOUT_SECONDS = 60  # Use: Upper bound for one gpg invocation, pinentry included. Type: int. Range: Positive integer.

# Clipboard Settings
CLIPBOARD_CLEAR_TIMEOUT_DEFAULT_SECONDS = 10  # Use: Default delay before a copied secret is erased. Type: int. Range: Positive integer.
CLIPBOARD_CLEAR_TIMEOUT_SECONDS = _env_int(  # Use: Effective erase delay, overridable like pass(1). Type: int. Range: Positive integer.
    "PASSWORD_STORE_CLIP_TIME", CLIPBOARD_CLEAR_TIMEOUT_DEFAULT_SECONDS
)
CLIPBOARD_HISTORY_MAX_ENTRIES = 60  # Use: Maximum number of fragments kept in the copy history. Type: int. Range: Positive integer.

# Masking Settings
MASK_GLYPH = "*"  # Use: Character drawn in place of each secret character. Type: str. Range: A single character.
MASK_HIDDEN_DEFAULT = True  # Use: Whether the first line starts hidden when a secret is opened. Type: bool. Range: True / False.

# Status Messages
STATUS_PASSWORD_SHOWN = "Password shown"  # Use: Status indicator after unmasking. Type: str. Range: Any string.
STATUS_PASSWORD_HIDDEN = "Password hidden"  # Use: Status indicator after masking. Type: str. Range: Any string.
STATUS_COPIED = "Copied password to clipboard. Will clear in {seconds} seconds."  # Use: Message after a copy. Type: str (format). Range: Must contain {seconds}.
STATUS_CLEARED = "Clipboard cleared"  # Use: Message when the tracked secret was removed from the clipboard. Type: str. Range: Any string.
STATUS_NOT_CLEARED = "Clipboard left untouched; copy history scrubbed"  # Use: Message when the clipboard no longer held the secret. Type: str. Range: Any string.
STATUS_NOTHING_TRACKED = "No copied password to clear"  # Use: Message when Clear Clipboard is used with nothing tracked. Type: str. Range: Any string.
STATUS_MESSAGE_TIMEOUT_MS = 3000  # Use: How long transient status bar messages stay visible. Type: int. Range: Milliseconds.

# Logging
LOG_LEVEL = os.environ.get("PASSVIEW_LOG_LEVEL", "INFO").upper()  # Use: Root logging level. Type: str. Range: DEBUG, INFO, WARNING, ERROR.
LOG_FORMAT = '%(asctime)s - %(levelname)s - %(name)s - %(message)s'  # Use: Root logging format. Type: str. Range: logging format string.
