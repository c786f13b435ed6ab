"""
Cancellable one-shot deferred callbacks.

Everything runs on the Qt event loop thread; a scheduled callback fires after at
least the requested delay, on that same thread.
"""

import logging
from typing import Callable, Optional

from PyQt5.QtCore import QObject, QTimer

logger = logging.getLogger(__name__)


class ScheduledTask:
    """Handle to a pending callback."""

    def cancel(self) -> None:
        raise NotImplementedError

    @property
    def active(self) -> bool:
        raise NotImplementedError


class Scheduler:
    """Arms one-shot callbacks."""

    def call_later(self, seconds: float, callback: Callable[[], None]) -> ScheduledTask:
        raise NotImplementedError


class QtScheduledTask(ScheduledTask):
    """A single-shot QTimer that can be stopped before it fires.

    The timer is released once it fires or is cancelled, so a long-lived parent
    does not collect a child per copy.
    """

    def __init__(self, seconds: float, callback: Callable[[], None], parent: Optional[QObject] = None):
        self._callback = callback
        self._released = False
        self._timer = QTimer(parent)
        self._timer.setSingleShot(True)
        self._timer.timeout.connect(self._fire)
        self._timer.start(int(seconds * 1000))

    def _fire(self):
        callback, self._callback = self._callback, None
        self._release()
        if callback is not None:
            callback()

    def cancel(self) -> None:
        self._callback = None
        self._release()

    def _release(self):
        if self._released:
            return
        self._released = True
        self._timer.stop()
        self._timer.setParent(None)
        self._timer.deleteLater()

    @property
    def active(self) -> bool:
        return not self._released and self._timer.isActive()


class QtScheduler(Scheduler):
    """Scheduler backed by the running QApplication's event loop."""

    def __init__(self, parent: Optional[QObject] = None):
        self.parent = parent

    def call_later(self, seconds: float, callback: Callable[[], None]) -> ScheduledTask:
        logger.debug(f"Arming one-shot timer for {seconds}s")
        return QtScheduledTask(seconds, callback, self.parent)
