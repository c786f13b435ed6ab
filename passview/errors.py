"""
Exceptions raised by PassView.

Every error is scoped to a single requested operation; the UI reports it and
carries on.
"""


class PassViewError(Exception):
    """Base exception for PassView errors."""

    pass


class SourceNotFound(PassViewError):
    """The requested secret identifier or file does not exist."""

    def __init__(self, identifier: str):
        super().__init__(f"Secret not found: {identifier}")
        self.identifier = identifier


class StoreAccessFailure(PassViewError):
    """The password store could not be enumerated, read or written."""

    pass


class ClipboardUnavailable(PassViewError):
    """The system clipboard could not be read or written."""

    pass


class HistorySnapshotFailure(PassViewError):
    """The editor's undo history or modified flag could not be captured or restored."""

    pass
