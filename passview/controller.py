"""
User-facing operations, independent of any widget toolkit.
"""

import logging
from typing import Callable, List, Optional

from . import config
from .clipboard import ClipboardSession, EraseResult
from .store import LoadedSecret, PasswordStore, SecretSource

logger = logging.getLogger(__name__)

PromptCallback = Callable[[List[str]], Optional[str]]
OpenEditorCallback = Callable[[str, str], object]


class PassController:
    """
    Wires the password store to the clipboard session and the editor.

    Errors from the store or the clipboard propagate as PassViewError; callers
    report them to the user.
    """

    def __init__(
        self,
        store: PasswordStore,
        clipboard: ClipboardSession,
        prompt: PromptCallback,
        open_editor: OpenEditorCallback,
        notify: Optional[Callable[[str], None]] = None,
    ):
        self.store = store
        self.clipboard = clipboard
        self.prompt = prompt
        self.open_editor = open_editor
        self.notify = notify or (lambda message: logger.info(message))

    def select_identifier(self) -> Optional[str]:
        """Ask the user to pick a secret. Returns None if they cancelled."""
        identifiers = self.store.list_secrets()
        selected = self.prompt(identifiers)
        if not selected:
            logger.debug("Secret selection cancelled")
            return None
        return selected

    def copy_source(self, source: SecretSource, close_source: bool = False) -> int:
        """Copy the password of an already open source."""
        return self.clipboard.place(source, close_source=close_source)

    def copy_identifier(self, identifier: str) -> int:
        """Decrypt a secret and copy its password, keeping nothing else in memory."""
        source = LoadedSecret(identifier, self.store.read_secret(identifier))
        return self.clipboard.place(source, close_source=True)

    def copy_selected(self) -> Optional[int]:
        """Prompt for a secret and copy its password. Returns the erase delay, or None if cancelled."""
        identifier = self.select_identifier()
        if identifier is None:
            return None
        return self.copy_identifier(identifier)

    def edit_identifier(self, identifier: str):
        content = self.store.read_secret(identifier)
        return self.open_editor(identifier, content)

    def edit_selected(self):
        """Prompt for a secret and open it for masked editing."""
        identifier = self.select_identifier()
        if identifier is None:
            return None
        return self.edit_identifier(identifier)

    def clear_clipboard(self) -> EraseResult:
        """Erase the tracked secret now."""
        tracked = self.clipboard.active
        result = self.clipboard.erase()
        if not tracked:
            self.notify(config.STATUS_NOTHING_TRACKED)
        elif result.clipboard_cleared:
            self.notify(config.STATUS_CLEARED)
        else:
            self.notify(config.STATUS_NOT_CLEARED)
        return result

    def save(self, identifier: str, content: str) -> None:
        self.store.write_secret(identifier, content)
        self.notify(f"Saved {identifier}")
