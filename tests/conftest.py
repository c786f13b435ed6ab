"""
Pytest configuration and fixtures for PassView tests.
"""

import os
from typing import Callable, List, Optional

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from passview.clipboard import ClipboardBackend, ClipboardHistory, ClipboardSession  # noqa: E402
from passview.errors import ClipboardUnavailable, HistorySnapshotFailure  # noqa: E402
from passview.masking import EditorHost, MaskRanges  # noqa: E402
from passview.scheduler import ScheduledTask, Scheduler  # noqa: E402


class FakeClipboard(ClipboardBackend):
    """In-memory system clipboard."""

    def __init__(self, text: str = ""):
        self.text = text
        self.fail_read = False
        self.fail_write = False
        self.clears = 0

    def read(self) -> str:
        if self.fail_read:
            raise ClipboardUnavailable("clipboard read failed")
        return self.text

    def write(self, text: str) -> None:
        if self.fail_write:
            raise ClipboardUnavailable("clipboard write failed")
        self.text = text

    def clear(self) -> None:
        self.clears += 1
        self.write("")


class BrokenHistory(ClipboardHistory):
    """History store whose reads fail."""

    def entries(self) -> List[str]:
        raise OSError("history unavailable")


class FakeTask(ScheduledTask):
    def __init__(self, seconds: float, callback: Callable[[], None]):
        self.seconds = seconds
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.fired)

    def fire(self):
        self.fired = True
        self.callback()


class FakeScheduler(Scheduler):
    """Collects tasks; tests fire them explicitly."""

    def __init__(self):
        self.tasks: List[FakeTask] = []

    def call_later(self, seconds: float, callback: Callable[[], None]) -> FakeTask:
        task = FakeTask(seconds, callback)
        self.tasks.append(task)
        return task

    @property
    def active(self) -> List[FakeTask]:
        return [task for task in self.tasks if task.active]

    def fire_all(self):
        for task in self.active:
            task.fire()


class FakeEditorHost(EditorHost):
    """
    Text buffer whose mask primitive behaves like an edit: it records an undo
    step and sets the modified flag, so sessions have to undo those effects.
    """

    def __init__(self, text: str):
        self.text = text
        self.masked = MaskRanges()
        self.undo: List[tuple] = []
        self.redo: List[tuple] = []
        self.modified = False
        self.callback = None
        self.status: Optional[str] = None
        self.warnings: List[str] = []
        self.cursor = 0
        self.fail_snapshot = False
        self.fail_restore = False

    def first_line_range(self):
        newline = self.text.find("\n")
        return 0, len(self.text) if newline < 0 else newline

    def _record(self, step: tuple):
        self.undo.append(step)
        self.redo.clear()
        self.modified = True

    def apply_mask(self, start, end):
        self.masked.add(start, end)
        self._record(("mask", start, end))

    def clear_mask(self, start, end):
        self.masked.remove(start, end)
        self._record(("unmask", start, end))

    def snapshot_history(self):
        if self.fail_snapshot:
            raise HistorySnapshotFailure("snapshot not supported")
        return list(self.undo), list(self.redo), self.modified

    def restore_history(self, snapshot):
        if self.fail_restore:
            raise HistorySnapshotFailure("restore not supported")
        undo, redo, modified = snapshot
        self.undo, self.redo, self.modified = list(undo), list(redo), modified

    def set_change_callback(self, callback):
        self.callback = callback

    def set_status(self, text):
        self.status = text

    def warn(self, message):
        self.warnings.append(message)

    def move_cursor_off_first_line(self):
        end = self.first_line_range()[1]
        self.cursor = end + 1 if end < len(self.text) else end

    def edit(self, start: int, end: int, replacement: str):
        """Replace text[start:end] the way a user edit would."""
        self.text = self.text[:start] + replacement + self.text[end:]
        self.masked.shift(start, end - start, len(replacement))
        self.masked.remove(self.first_line_range()[1], len(self.text))
        self._record(("edit", start, end, replacement))
        if self.callback is not None:
            self.callback(start, start + len(replacement))

    def render(self, glyph: str = "*") -> str:
        chars = list(self.text)
        for start, end in self.masked:
            for position in range(start, min(end, len(chars))):
                chars[position] = glyph
        return "".join(chars)

    def cursor_line(self) -> int:
        return self.text[:self.cursor].count("\n")


class FakeSource:
    """SecretSource over a string."""

    def __init__(self, content: Optional[str], identifier: str = "web/example"):
        self.content = content
        self.identifier = identifier
        self.closed = False

    def read(self):
        return None if self.closed else self.content

    def close(self):
        self.closed = True


@pytest.fixture
def clipboard() -> FakeClipboard:
    return FakeClipboard()


@pytest.fixture
def history() -> ClipboardHistory:
    return ClipboardHistory()


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def messages() -> List[str]:
    return []


@pytest.fixture
def session(clipboard, history, scheduler, messages) -> ClipboardSession:
    return ClipboardSession(clipboard, history, scheduler, timeout=10, notify=messages.append)


@pytest.fixture(scope="session")
def qapp():
    """A QApplication on the offscreen platform."""
    from PyQt5.QtWidgets import QApplication

    app = QApplication.instance() or QApplication([])
    yield app
