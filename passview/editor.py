"""
Editor window for a decrypted secret, with the password line masked.

LEGAL NOTICE:
This window shows decrypted secret files. The password line is masked by
default and the decrypted text is cleared from the widget when the window
closes.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from PyQt5.QtCore import Qt, QRect
from PyQt5.QtGui import QColor, QKeySequence, QPainter, QPalette, QSyntaxHighlighter, QTextCharFormat, QTextCursor
from PyQt5.QtWidgets import QAction, QLabel, QMainWindow, QMessageBox, QPlainTextEdit

from . import config
from .clipboard import ClipboardHistory
from .errors import HistorySnapshotFailure, PassViewError
from .masking import ChangeCallback, EditorHost, MaskedEditSession, MaskRanges
from .store import SecretSource

logger = logging.getLogger(__name__)


def text_change(old: str, new: str) -> Tuple[int, int, int]:
    """Return (position, removed, added) describing how old became new."""
    limit = min(len(old), len(new))
    prefix = 0
    while prefix < limit and old[prefix] == new[prefix]:
        prefix += 1
    suffix = 0
    while suffix < limit - prefix and old[-1 - suffix] == new[-1 - suffix]:
        suffix += 1
    return prefix, len(old) - prefix - suffix, len(new) - prefix - suffix


class MaskHighlighter(QSyntaxHighlighter):
    """Makes masked characters of the first block invisible; SecretTextEdit paints the glyphs."""

    def __init__(self, document, ranges: MaskRanges):
        super().__init__(document)
        self.ranges = ranges
        self.mask_format = QTextCharFormat()
        self.mask_format.setForeground(QColor(Qt.transparent))

    def highlightBlock(self, text):
        if self.currentBlock().blockNumber() != 0:
            return
        for start, end in self.ranges.clipped(0, len(text)):
            self.setFormat(start, end - start, self.mask_format)


class SecretTextEdit(QPlainTextEdit):
    """Plain text editor that draws the mask glyph over masked characters."""

    def __init__(self, history: Optional[ClipboardHistory] = None, parent=None):
        super().__init__(parent)
        self.history = history
        self.mask_ranges = MaskRanges()
        self.mask_glyph = config.MASK_GLYPH
        self.highlighter = MaskHighlighter(self.document(), self.mask_ranges)

    def createMimeDataFromSelection(self):
        # Copy, cut and drag all take their data from here.
        self._record_selection()
        return super().createMimeDataFromSelection()

    def _record_selection(self):
        if self.history is not None:
            # Qt reports line breaks inside a selection as U+2029.
            self.history.push(self.textCursor().selectedText().replace('\u2029', '\n'))

    def paintEvent(self, event):
        super().paintEvent(event)
        block = self.document().firstBlock()
        spans = self.mask_ranges.clipped(0, len(block.text()))
        if not spans:
            return

        palette = self.palette()
        selection = self.textCursor()
        selected = range(selection.selectionStart(), selection.selectionEnd())
        painter = QPainter(self.viewport())
        cursor = QTextCursor(self.document())
        for start, end in spans:
            for position in range(start, end):
                cursor.setPosition(position)
                left = self.cursorRect(cursor)
                cursor.setPosition(position + 1)
                right = self.cursorRect(cursor)
                if right.top() != left.top():
                    # Wrapped onto the next visual line.
                    width = self.fontMetrics().horizontalAdvance(self.mask_glyph)
                else:
                    width = right.left() - left.left()
                rect = QRect(left.left(), left.top(), max(width, 1), left.height())
                # Cover whatever Qt drew for the cell, including selected text.
                if position in selected:
                    painter.fillRect(rect, palette.color(QPalette.Highlight))
                    painter.setPen(palette.color(QPalette.HighlightedText))
                else:
                    painter.fillRect(rect, palette.color(QPalette.Base))
                    painter.setPen(palette.color(QPalette.Text))
                painter.drawText(rect, Qt.AlignCenter, self.mask_glyph)
        if self.hasFocus() and selection.blockNumber() == 0:
            painter.fillRect(self.cursorRect(), palette.color(QPalette.Text))
        painter.end()


@dataclass(frozen=True)
class HistorySnapshot:
    """What a Qt document exposes of its undo history."""
    undo_steps: int
    redo_steps: int
    modified: bool


class QtEditorHost(EditorHost):
    """EditorHost over a SecretTextEdit."""

    def __init__(
        self,
        editor: SecretTextEdit,
        status: Optional[Callable[[str], None]] = None,
        warn: Optional[Callable[[str], None]] = None,
    ):
        self.editor = editor
        self.document = editor.document()
        self.ranges = editor.mask_ranges
        self._status = status
        self._warn = warn
        self._callback: Optional[ChangeCallback] = None
        self._last_text = self.document.toPlainText()
        self.document.contentsChanged.connect(self._on_contents_changed)

    def first_line_range(self) -> Tuple[int, int]:
        return 0, len(self.document.firstBlock().text())

    def apply_mask(self, start: int, end: int) -> None:
        self.ranges.add(start, end)
        self._refresh()

    def clear_mask(self, start: int, end: int) -> None:
        self.ranges.remove(start, end)
        self._refresh()

    def snapshot_history(self) -> HistorySnapshot:
        return HistorySnapshot(
            undo_steps=self.document.availableUndoSteps(),
            redo_steps=self.document.availableRedoSteps(),
            modified=self.document.isModified(),
        )

    def restore_history(self, snapshot: HistorySnapshot) -> None:
        self.document.setModified(snapshot.modified)
        if (self.document.availableUndoSteps() != snapshot.undo_steps
                or self.document.availableRedoSteps() != snapshot.redo_steps):
            # QTextDocument cannot rewind its undo stack to an earlier state.
            raise HistorySnapshotFailure("Undo history changed while masking and cannot be rewound")

    def set_change_callback(self, callback: Optional[ChangeCallback]) -> None:
        self._callback = callback

    def set_status(self, text: str) -> None:
        if self._status is not None:
            self._status(text)

    def warn(self, message: str) -> None:
        logger.warning(message)
        if self._warn is not None:
            self._warn(message)

    def move_cursor_off_first_line(self) -> None:
        second = self.document.findBlockByNumber(1)
        if not second.isValid():
            return
        cursor = self.editor.textCursor()
        cursor.setPosition(second.position())
        self.editor.setTextCursor(cursor)

    def rendered_first_line(self) -> str:
        """The first line as it is drawn, with masked characters replaced by the glyph."""
        text = self.document.firstBlock().text()
        chars = list(text)
        for start, end in self.ranges.clipped(0, len(text)):
            for position in range(start, end):
                chars[position] = self.editor.mask_glyph
        return ''.join(chars)

    def _on_contents_changed(self):
        text = self.document.toPlainText()
        old, self._last_text = self._last_text, text
        if text == old:
            return
        position, removed, added = text_change(old, text)
        self.ranges.shift(position, removed, added)
        # Masking only ever covers the password line; drop spans pushed below it.
        self.ranges.remove(self.first_line_range()[1], len(text))
        if self._callback is not None:
            end = position + added
            if old.count('\n') != text.count('\n'):
                # Lines were joined or split: cover whatever now sits on the first line.
                end = max(end, self.first_line_range()[1])
            self._callback(position, end)
        self._refresh()

    def _refresh(self):
        self.editor.highlighter.rehighlightBlock(self.document.firstBlock())
        self.editor.viewport().update()


class SecretEditorWindow(QMainWindow, SecretSource):
    """Editable view of one decrypted secret."""

    def __init__(self, identifier: str, content: str, controller, history: Optional[ClipboardHistory] = None,
                 hidden: bool = config.MASK_HIDDEN_DEFAULT, parent=None):
        super().__init__(parent)
        self.identifier = identifier
        self.controller = controller
        self._closed = False
        self.setAttribute(Qt.WA_DeleteOnClose)
        self.init_ui(content, history)

        self.host = QtEditorHost(self.editor, status=self.mask_label.setText, warn=self._show_warning)
        self.session = MaskedEditSession(self.host, hidden=hidden)

    def init_ui(self, content: str, history: Optional[ClipboardHistory]):
        """Initialize the user interface."""
        self.setWindowTitle(f"{config.APP_TITLE_PREFIX} - {self.identifier}[*]")
        self.resize(600, 400)

        self.editor = SecretTextEdit(history)
        if '\n' not in content:
            content += '\n'
        self.editor.setPlainText(content)
        self.editor.document().setModified(False)
        self.editor.document().modificationChanged.connect(self.setWindowModified)
        self.setCentralWidget(self.editor)

        toolbar = self.addToolBar("Secret")
        toolbar.setMovable(False)

        self.save_action = QAction("Save", self)
        self.save_action.setShortcut(QKeySequence.Save)
        self.save_action.triggered.connect(self.save)
        toolbar.addAction(self.save_action)

        self.toggle_action = QAction("Show/Hide Password", self)
        self.toggle_action.setShortcut(QKeySequence("Ctrl+T"))
        self.toggle_action.triggered.connect(self.toggle_mask)
        toolbar.addAction(self.toggle_action)

        self.copy_action = QAction("Copy Password", self)
        self.copy_action.setShortcut(QKeySequence("Ctrl+Shift+C"))
        self.copy_action.triggered.connect(lambda: self.copy_password(close=False))
        toolbar.addAction(self.copy_action)

        self.copy_close_action = QAction("Copy && Close", self)
        self.copy_close_action.setShortcut(QKeySequence("Ctrl+Shift+Q"))
        self.copy_close_action.triggered.connect(lambda: self.copy_password(close=True))
        toolbar.addAction(self.copy_close_action)

        self.mask_label = QLabel()
        self.mask_label.setStyleSheet("padding-right: 10px;")
        self.statusBar().addPermanentWidget(self.mask_label)

    def read(self) -> Optional[str]:
        if self._closed:
            return None
        return self.editor.toPlainText()

    def toggle_mask(self):
        """Show or hide the password line."""
        self.session.toggle()

    def copy_password(self, close: bool = False):
        """Copy the password line to the clipboard, optionally closing this window."""
        try:
            self.controller.copy_source(self, close_source=close)
        except PassViewError as e:
            QMessageBox.warning(self, "Copy Failed", str(e))

    def save(self) -> bool:
        """Encrypt the current content back into the store."""
        try:
            self.controller.save(self.identifier, self.editor.toPlainText())
        except PassViewError as e:
            QMessageBox.warning(self, "Save Failed", str(e))
            return False
        self.editor.document().setModified(False)
        self.statusBar().showMessage(f"Saved {self.identifier}", config.STATUS_MESSAGE_TIMEOUT_MS)
        return True

    def _show_warning(self, message: str):
        self.statusBar().showMessage(message, config.STATUS_MESSAGE_TIMEOUT_MS)

    def closeEvent(self, event):
        """Ask about unsaved changes, then drop the decrypted text."""
        if not self._closed and self.editor.document().isModified():
            answer = QMessageBox.question(
                self, "Unsaved Changes",
                f"Save changes to {self.identifier}?",
                QMessageBox.Save | QMessageBox.Discard | QMessageBox.Cancel,
            )
            if answer == QMessageBox.Cancel:
                event.ignore()
                return
            if answer == QMessageBox.Save and not self.save():
                event.ignore()
                return

        self.session.close()
        self._closed = True
        self.editor.clear()
        event.accept()
