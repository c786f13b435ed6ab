"""
Main window and secret picker for PassView.

LEGAL NOTICE:
PassView reads only the password store of the user running it. Decrypted
secrets are shown only on explicit request.
"""

import os
import logging
from typing import Dict, List, Optional

from PyQt5.QtWidgets import (
    QAction, QDialog, QDialogButtonBox, QHBoxLayout, QLabel, QLineEdit, QListWidget,
    QMainWindow, QMessageBox, QPushButton, QVBoxLayout, QWidget
)

from . import config
from .clipboard import ClipboardHistory, ClipboardSession, QtClipboardBackend
from .controller import PassController
from .editor import SecretEditorWindow
from .errors import PassViewError
from .scheduler import QtScheduler
from .store import PasswordStore

logger = logging.getLogger(__name__)


def matches_filter(identifier: str, query: str) -> bool:
    """True if every whitespace-separated term of query occurs in identifier, ignoring case."""
    lowered = identifier.lower()
    return all(term in lowered for term in query.lower().split())


class SecretPickerDialog(QDialog):
    """Lets the user choose one secret identifier."""

    def __init__(self, identifiers: List[str], parent=None):
        super().__init__(parent)
        self.identifiers = identifiers
        self.selected_identifier: Optional[str] = None
        self.init_ui()

    def init_ui(self):
        """Initialize the user interface."""
        self.setWindowTitle("Select Secret")
        self.setModal(True)
        self.setMinimumWidth(400)

        layout = QVBoxLayout()

        self.search_input = QLineEdit()
        self.search_input.setPlaceholderText("Filter secrets...")
        self.search_input.textChanged.connect(self.filter_entries)
        layout.addWidget(self.search_input)

        self.list_widget = QListWidget()
        self.list_widget.addItems(self.identifiers)
        self.list_widget.itemDoubleClicked.connect(lambda item: self.accept_selection())
        layout.addWidget(self.list_widget)

        buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        buttons.accepted.connect(self.accept_selection)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

        self.setLayout(layout)
        self.filter_entries()

    def filter_entries(self):
        """Hide identifiers that do not match the filter and select the first visible one."""
        query = self.search_input.text()
        first_visible = None
        for row in range(self.list_widget.count()):
            item = self.list_widget.item(row)
            visible = matches_filter(item.text(), query)
            item.setHidden(not visible)
            if visible and first_visible is None:
                first_visible = item
        if first_visible is not None:
            self.list_widget.setCurrentItem(first_visible)

    def accept_selection(self):
        item = self.list_widget.currentItem()
        if item is None or item.isHidden():
            return
        self.selected_identifier = item.text()
        self.accept()


class MainWindow(QMainWindow):
    """Main application window: the list of secrets and the clipboard controls."""

    def __init__(self, store: PasswordStore):
        super().__init__()
        self.store = store
        self.history = ClipboardHistory()
        self.clipboard_session = ClipboardSession(
            QtClipboardBackend(),
            self.history,
            QtScheduler(self),
            timeout=config.CLIPBOARD_CLEAR_TIMEOUT_SECONDS,
            notify=self.show_status,
        )
        self.controller = PassController(
            store,
            self.clipboard_session,
            prompt=self.prompt_for_identifier,
            open_editor=self.open_editor,
            notify=self.show_status,
        )
        self.editors: Dict[str, SecretEditorWindow] = {}
        self.init_ui()
        self.load_entries()

    def init_ui(self):
        """Initialize the user interface."""
        self.setWindowTitle(f"{config.APP_TITLE_PREFIX} - {self.store.root}")
        self.setGeometry(100, 100, 600, 500)

        self.create_menu_bar()

        central_widget = QWidget()
        self.setCentralWidget(central_widget)
        layout = QVBoxLayout()
        central_widget.setLayout(layout)

        toolbar_layout = QHBoxLayout()

        self.search_input = QLineEdit()
        self.search_input.setPlaceholderText("Search secrets...")
        self.search_input.textChanged.connect(self.filter_entries)
        toolbar_layout.addWidget(self.search_input)

        self.copy_button = QPushButton("Copy Password")
        self.copy_button.clicked.connect(self.copy_current)
        toolbar_layout.addWidget(self.copy_button)

        self.edit_button = QPushButton("Edit")
        self.edit_button.clicked.connect(self.edit_current)
        toolbar_layout.addWidget(self.edit_button)

        self.clear_button = QPushButton("Clear Clipboard")
        self.clear_button.clicked.connect(self.clear_clipboard)
        toolbar_layout.addWidget(self.clear_button)

        layout.addLayout(toolbar_layout)

        self.list_widget = QListWidget()
        self.list_widget.itemActivated.connect(lambda item: self.copy_current())
        layout.addWidget(self.list_widget)

        self.statusBar().showMessage("Ready")
        self.count_label = QLabel("Secrets: 0")
        self.count_label.setStyleSheet("padding-right: 10px;")
        self.statusBar().addPermanentWidget(self.count_label)

    def create_menu_bar(self):
        """Create the menu bar."""
        menubar = self.menuBar()
        file_menu = menubar.addMenu("File")

        copy_action = QAction("Copy Password...", self)
        copy_action.setShortcut("Ctrl+Shift+C")
        copy_action.triggered.connect(self.copy_selected)
        file_menu.addAction(copy_action)

        edit_action = QAction("Edit Secret...", self)
        edit_action.setShortcut("Ctrl+E")
        edit_action.triggered.connect(self.edit_selected)
        file_menu.addAction(edit_action)

        clear_action = QAction("Clear Clipboard", self)
        clear_action.setShortcut("Ctrl+K")
        clear_action.triggered.connect(self.clear_clipboard)
        file_menu.addAction(clear_action)

        refresh_action = QAction("Refresh", self)
        refresh_action.setShortcut("F5")
        refresh_action.triggered.connect(self.load_entries)
        file_menu.addAction(refresh_action)

        file_menu.addSeparator()

        exit_action = QAction("Exit", self)
        exit_action.setShortcut("Ctrl+Q")
        exit_action.triggered.connect(self.close)
        file_menu.addAction(exit_action)

    def load_entries(self):
        """Load secret identifiers into the list."""
        self.list_widget.clear()
        try:
            identifiers = self.store.list_secrets()
        except PassViewError as e:
            QMessageBox.warning(self, "Password Store", str(e))
            identifiers = []
        self.list_widget.addItems(identifiers)
        self.count_label.setText(f"Secrets: {len(identifiers)}")
        self.filter_entries()

    def filter_entries(self):
        """Filter the list based on the search text."""
        query = self.search_input.text()
        for row in range(self.list_widget.count()):
            item = self.list_widget.item(row)
            item.setHidden(not matches_filter(item.text(), query))

    def current_identifier(self) -> Optional[str]:
        item = self.list_widget.currentItem()
        if item is None or item.isHidden():
            return None
        return item.text()

    def show_status(self, message: str):
        self.statusBar().showMessage(message, config.STATUS_MESSAGE_TIMEOUT_MS)

    def prompt_for_identifier(self, identifiers: List[str]) -> Optional[str]:
        dialog = SecretPickerDialog(identifiers, self)
        if dialog.exec_():
            return dialog.selected_identifier
        return None

    def open_editor(self, identifier: str, content: str) -> SecretEditorWindow:
        """Show a secret in a masked editor window, reusing an open one."""
        window = self.editors.get(identifier)
        if window is not None and window.read() is not None:
            window.raise_()
            window.activateWindow()
            return window

        window = SecretEditorWindow(identifier, content, self.controller, self.history)
        window.destroyed.connect(lambda _=None, key=identifier: self.editors.pop(key, None))
        self.editors[identifier] = window
        window.show()
        return window

    def _run(self, title: str, operation, *args):
        """Run one operation and report its failure without aborting the session."""
        try:
            return operation(*args)
        except PassViewError as e:
            logger.warning(f"{title} failed: {e}")
            QMessageBox.warning(self, title, str(e))
            return None

    def copy_current(self):
        """Copy the password of the highlighted secret, or ask for one."""
        identifier = self.current_identifier()
        if identifier is None:
            self.copy_selected()
        else:
            self._run("Copy Password", self.controller.copy_identifier, identifier)

    def copy_selected(self):
        self._run("Copy Password", self.controller.copy_selected)

    def edit_current(self):
        """Open the highlighted secret for editing, or ask for one."""
        identifier = self.current_identifier()
        if identifier is None:
            self.edit_selected()
        else:
            self._run("Edit Secret", self.controller.edit_identifier, identifier)

    def edit_selected(self):
        self._run("Edit Secret", self.controller.edit_selected)

    def clear_clipboard(self):
        """Erase the copied password now."""
        result = self.controller.clear_clipboard()
        if result.errors:
            QMessageBox.warning(self, "Clear Clipboard", "\n".join(result.errors))

    def closeEvent(self, event):
        """Handle window close event."""
        for window in list(self.editors.values()):
            if not window.close():
                event.ignore()
                return

        self.clipboard_session.erase()
        event.accept()


def default_store() -> PasswordStore:
    """The store named by PASSWORD_STORE_DIR, or ~/.password-store."""
    return PasswordStore(os.path.expanduser(config.PASSWORD_STORE_DIR))
