"""
Masking of the secret line in an editable view.

The first line of an opened secret is drawn with a substitute glyph while the
session is hidden. Masking is a rendering overlay: toggling it must leave the
editor's undo history and modified flag exactly as they were.
"""

import logging
from enum import Enum
from typing import Any, Callable, Iterator, List, Optional, Tuple

from . import config
from .errors import HistorySnapshotFailure

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[int, int], None]


class MaskState(Enum):
    SHOWN = "shown"
    HIDDEN = "hidden"


class MaskRanges:
    """
    Sorted, non-overlapping half-open character ranges carrying the mask.

    Ranges follow the text they cover when the document is edited, the way
    text attributes do: deleted characters drop out and inserted characters are
    not masked until someone masks them.
    """

    def __init__(self):
        self._ranges: List[Tuple[int, int]] = []

    def add(self, start: int, end: int) -> None:
        if end <= start:
            return
        merged = []
        for s, e in self._ranges:
            if e < start or s > end:
                merged.append((s, e))
            else:
                start, end = min(s, start), max(e, end)
        merged.append((start, end))
        self._ranges = sorted(merged)

    def remove(self, start: int, end: int) -> None:
        if end <= start:
            return
        kept = []
        for s, e in self._ranges:
            if e <= start or s >= end:
                kept.append((s, e))
                continue
            if s < start:
                kept.append((s, start))
            if e > end:
                kept.append((end, e))
        self._ranges = kept

    def shift(self, position: int, removed: int, added: int) -> None:
        """Move ranges after `removed` characters at `position` were replaced by `added`."""
        def map_start(p):
            if p < position:
                return p
            if p < position + removed:
                return position + added
            return p - removed + added

        def map_end(p):
            if p <= position:
                return p
            if p <= position + removed:
                return position
            return p - removed + added

        shifted = []
        for s, e in self._ranges:
            s, e = map_start(s), map_end(e)
            if e > s:
                shifted.append((s, e))
        self._ranges = []
        for s, e in shifted:
            self.add(s, e)

    def clear(self) -> None:
        self._ranges = []

    def contains(self, position: int) -> bool:
        return any(s <= position < e for s, e in self._ranges)

    def clipped(self, start: int, end: int) -> List[Tuple[int, int]]:
        """Ranges intersected with [start, end)."""
        result = []
        for s, e in self._ranges:
            s, e = max(s, start), min(e, end)
            if e > s:
                result.append((s, e))
        return result

    def __iter__(self) -> Iterator[Tuple[int, int]]:
        return iter(list(self._ranges))

    def __bool__(self) -> bool:
        return bool(self._ranges)


class EditorHost:
    """
    The editor capabilities a MaskedEditSession needs.

    Positions are character offsets into the document; ranges are half-open.
    """

    def first_line_range(self) -> Tuple[int, int]:
        raise NotImplementedError

    def apply_mask(self, start: int, end: int) -> None:
        raise NotImplementedError

    def clear_mask(self, start: int, end: int) -> None:
        raise NotImplementedError

    def snapshot_history(self) -> Any:
        """Capture undo history and modified flag. May raise HistorySnapshotFailure."""
        raise NotImplementedError

    def restore_history(self, snapshot: Any) -> None:
        """Put back a snapshot taken by snapshot_history(). May raise HistorySnapshotFailure."""
        raise NotImplementedError

    def set_change_callback(self, callback: Optional[ChangeCallback]) -> None:
        """Register (or with None, drop) the callback fired after every text change."""
        raise NotImplementedError

    def set_status(self, text: str) -> None:
        pass

    def warn(self, message: str) -> None:
        logger.warning(message)

    def move_cursor_off_first_line(self) -> None:
        pass


class MaskedEditSession:
    """Hidden/shown state of the secret line of one open editor."""

    def __init__(self, host: EditorHost, hidden: bool = config.MASK_HIDDEN_DEFAULT):
        self.host = host
        self.state = MaskState.SHOWN
        self.warnings: List[str] = []
        if hidden:
            self.toggle()
        host.move_cursor_off_first_line()

    @property
    def hidden(self) -> bool:
        return self.state is MaskState.HIDDEN

    def toggle(self) -> MaskState:
        """Switch between hidden and shown without touching undo history or the modified flag."""
        snapshot = None
        try:
            snapshot = self.host.snapshot_history()
        except HistorySnapshotFailure as e:
            self._warn(f"Could not save undo history before masking: {e}")

        start, end = self.host.first_line_range()
        if self.state is MaskState.HIDDEN:
            self.host.clear_mask(start, end)
            self.host.set_change_callback(None)
            self.state = MaskState.SHOWN
            self.host.set_status(config.STATUS_PASSWORD_SHOWN)
        else:
            self.host.set_change_callback(self.on_first_line_changed)
            self.host.apply_mask(start, end)
            self.state = MaskState.HIDDEN
            self.host.set_status(config.STATUS_PASSWORD_HIDDEN)

        if snapshot is not None:
            try:
                self.host.restore_history(snapshot)
            except HistorySnapshotFailure as e:
                self._warn(f"Could not restore undo history after masking: {e}")

        logger.debug(f"Mask state is now {self.state.value}")
        return self.state

    def on_first_line_changed(self, start: int, end: int) -> None:
        """Mask the characters just changed, as far as they lie on the first line."""
        if self.state is not MaskState.HIDDEN:
            return
        line_start, line_end = self.host.first_line_range()
        start, end = max(start, line_start), min(end, line_end)
        if end > start:
            self.host.apply_mask(start, end)

    def close(self) -> None:
        """Detach from the host when its view goes away."""
        self.host.set_change_callback(None)

    def _warn(self, message: str):
        self.warnings.append(message)
        self.host.warn(message)
