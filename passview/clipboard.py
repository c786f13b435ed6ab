"""
Clipboard handoff for decrypted secrets.

LEGAL NOTICE:
This module places passwords on the system clipboard. Every copy is tracked and
erased after a timeout; erasure only touches data that still equals the copied
secret.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from . import config
from .errors import ClipboardUnavailable, SourceNotFound
from .scheduler import ScheduledTask, Scheduler
from .secret import SecretValue

logger = logging.getLogger(__name__)


class ClipboardBackend:
    """Access to the system clipboard."""

    def read(self) -> str:
        raise NotImplementedError

    def write(self, text: str) -> None:
        raise NotImplementedError

    def clear(self) -> None:
        self.write("")


class QtClipboardBackend(ClipboardBackend):
    """System clipboard through QApplication.clipboard()."""

    def _clipboard(self):
        from PyQt5.QtWidgets import QApplication

        app = QApplication.instance()
        if app is None:
            raise ClipboardUnavailable("No QApplication is running")
        clipboard = app.clipboard()
        if clipboard is None:
            raise ClipboardUnavailable("The platform exposes no clipboard")
        return clipboard

    def read(self) -> str:
        return self._clipboard().text()

    def write(self, text: str) -> None:
        self._clipboard().setText(text)

    def clear(self) -> None:
        self._clipboard().clear()


class ClipboardHistory:
    """
    Ordered record of recently copied or cut text fragments, most recent first.

    Editor windows push to it on copy/cut; ClipboardSession scrubs it.
    """

    def __init__(self, max_entries: int = config.CLIPBOARD_HISTORY_MAX_ENTRIES):
        self.max_entries = max_entries
        self._entries: List[str] = []

    def push(self, text: str) -> None:
        if not text:
            return
        if self._entries and self._entries[0] == text:
            return
        self._entries.insert(0, text)
        del self._entries[self.max_entries:]

    def entries(self) -> List[str]:
        return list(self._entries)

    def set_entries(self, entries: List[str]) -> None:
        self._entries = list(entries)[:self.max_entries]

    def __len__(self) -> int:
        return len(self._entries)


@dataclass
class EraseResult:
    """Outcome of one erase() call."""
    clipboard_cleared: bool = False
    history_removed: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.errors


class ClipboardSession:
    """
    Tracks the last secret placed on the clipboard and erases it.

    At most one secret is tracked and at most one erase timer is pending at any
    time. place() always erases the previous secret before tracking a new one.
    """

    def __init__(
        self,
        clipboard: ClipboardBackend,
        history: ClipboardHistory,
        scheduler: Scheduler,
        timeout: int = config.CLIPBOARD_CLEAR_TIMEOUT_SECONDS,
        notify: Optional[Callable[[str], None]] = None,
    ):
        self.clipboard = clipboard
        self.history = history
        self.scheduler = scheduler
        self.timeout = timeout
        self.notify = notify or (lambda message: logger.info(message))
        self._tracked: Optional[SecretValue] = None
        self._pending: Optional[ScheduledTask] = None

    @property
    def active(self) -> bool:
        """True while a secret is tracked."""
        return self._tracked is not None

    @property
    def pending(self) -> bool:
        """True while an erase timer is armed."""
        return self._pending is not None

    def place(self, source, close_source: bool = False) -> int:
        """
        Copy the first line of a secret source to the clipboard.

        Args:
            source: Object with read() returning decrypted content and close().
            close_source: Close the source once the secret has been extracted.

        Returns:
            The erase delay in seconds.

        Raises:
            SourceNotFound: If the source is missing or has no content.
            ClipboardUnavailable: If the clipboard cannot be written. Nothing is
                tracked and no timer is armed in that case.
        """
        content = source.read() if source is not None else None
        if content is None:
            raise SourceNotFound(getattr(source, "identifier", "<none>"))

        self.erase()

        value = SecretValue.from_content(content)
        del content
        if close_source:
            source.close()

        try:
            self.clipboard.write(value.reveal())
        except ClipboardUnavailable:
            value.wipe()
            raise
        except Exception as e:
            value.wipe()
            raise ClipboardUnavailable(f"Could not write to the clipboard: {e}") from e

        self.history.push(value.reveal())
        self._tracked = value
        self._pending = self.scheduler.call_later(self.timeout, self._on_timeout)
        logger.info(f"Secret placed on clipboard, erase armed in {self.timeout}s")
        self.notify(config.STATUS_COPIED.format(seconds=self.timeout))
        return self.timeout

    def erase(self) -> EraseResult:
        """
        Remove the tracked secret from the clipboard and the copy history.

        Safe to call at any time, repeatedly. The clipboard is only cleared if it
        still holds the tracked secret.
        """
        result = EraseResult()
        value, self._tracked = self._tracked, None

        if value is not None:
            try:
                if value.matches(self.clipboard.read()):
                    self.clipboard.clear()
                    result.clipboard_cleared = True
            except Exception as e:
                # Best effort: the history is still scrubbed below.
                logger.warning(f"Clipboard not scrubbed: {e}")
                result.errors.append(f"Clipboard unavailable: {e}")

            try:
                entries = self.history.entries()
                kept = [entry for entry in entries if not value.matches(entry)]
                result.history_removed = len(entries) - len(kept)
                if result.history_removed:
                    self.history.set_entries(kept)
            except Exception as e:
                logger.warning(f"Copy history not scrubbed: {e}")
                result.errors.append(f"Copy history unavailable: {e}")

            value.wipe()
            logger.info(
                f"Erased tracked secret (clipboard cleared: {result.clipboard_cleared}, "
                f"history entries removed: {result.history_removed})"
            )

        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
        return result

    def _on_timeout(self):
        """Timer callback: erase and tell the user what happened."""
        self._pending = None
        result = self.erase()
        self.notify(config.STATUS_CLEARED if result.clipboard_cleared else config.STATUS_NOT_CLEARED)
