"""
Main entry point for PassView.

LEGAL NOTICE:
PassView operates only on the local password store of the user running it.
"""

import sys
import signal
import logging
from typing import Optional
from PyQt5.QtWidgets import QApplication
from PyQt5.QtCore import Qt

from passview.ui import MainWindow, default_store
from passview.store import PasswordStore
from passview import config


class PassViewApp:
    """Main application class."""

    def __init__(self, store: Optional[PasswordStore] = None):
        """Initialize the application."""
        self.app = QApplication.instance() or QApplication(sys.argv)
        self.app.setApplicationName(config.APP_NAME)
        self.app.setOrganizationName(config.APP_NAME)
        self.app.setStyle(config.APP_STYLE)

        self.store = store or default_store()
        self.main_window: Optional[MainWindow] = None

        # Handle Ctrl+C gracefully
        signal.signal(signal.SIGINT, signal.SIG_DFL)

    def run(self) -> int:
        """Run the application."""
        self.main_window = MainWindow(self.store)
        self.main_window.show()
        return self.app.exec_()

    def cleanup(self):
        """Erase any copied password that is still tracked."""
        if self.main_window is not None:
            self.main_window.clipboard_session.erase()


def main():
    """Main entry point."""
    logging.basicConfig(level=getattr(logging, config.LOG_LEVEL, logging.INFO), format=config.LOG_FORMAT)
    # Enable high DPI scaling
    if hasattr(Qt, 'AA_EnableHighDpiScaling'):
        QApplication.setAttribute(Qt.AA_EnableHighDpiScaling, True)
    if hasattr(Qt, 'AA_UseHighDpiPixmaps'):
        QApplication.setAttribute(Qt.AA_UseHighDpiPixmaps, True)

    app = PassViewApp()

    try:
        return app.run()
    finally:
        app.cleanup()


if __name__ == "__main__":
    sys.exit(main())
