"""Tests for the masked edit session."""

from conftest import FakeEditorHost
from passview.masking import MaskedEditSession, MaskRanges, MaskState


class TestMaskedEditSession:
    """Test MaskedEditSession state transitions."""

    def test_opens_hidden_with_cursor_on_second_line(self) -> None:
        """A freshly opened secret is masked and the cursor is off the password."""
        host = FakeEditorHost("hunter2\nuser: alice")
        session = MaskedEditSession(host)

        assert session.state is MaskState.HIDDEN
        assert host.render().split("\n") == ["*******", "user: alice"]
        assert host.cursor_line() == 1
        assert host.status == "Password hidden"

    def test_opening_does_not_touch_history(self) -> None:
        host = FakeEditorHost("hunter2\nuser: alice")
        MaskedEditSession(host)
        assert host.undo == []
        assert host.modified is False

    def test_opens_shown_when_configured(self) -> None:
        host = FakeEditorHost("hunter2\n")
        session = MaskedEditSession(host, hidden=False)
        assert session.state is MaskState.SHOWN
        assert host.render() == "hunter2\n"

    def test_toggle_shows_and_hides(self) -> None:
        host = FakeEditorHost("hunter2\nuser: alice")
        session = MaskedEditSession(host)

        assert session.toggle() is MaskState.SHOWN
        assert host.render() == "hunter2\nuser: alice"
        assert host.status == "Password shown"
        assert host.callback is None

        assert session.toggle() is MaskState.HIDDEN
        assert host.render() == "*******\nuser: alice"
        assert host.callback is not None

    def test_toggle_pair_preserves_history_and_modified_flag(self) -> None:
        """Undo history and the modified flag are identical around a toggle pair."""
        host = FakeEditorHost("hunter2\nuser: alice")
        session = MaskedEditSession(host)
        host.edit(8, 12, "login")
        host.undo.append(("marker",))
        host.redo.append(("redo-marker",))
        before = (list(host.undo), list(host.redo), host.modified)

        session.toggle()
        session.toggle()

        assert (host.undo, host.redo, host.modified) == before

    def test_toggle_keeps_unmodified_document_unmodified(self) -> None:
        host = FakeEditorHost("hunter2\n")
        session = MaskedEditSession(host)
        session.toggle()
        assert host.modified is False
        assert host.undo == []

    def test_insert_on_first_line_is_masked(self) -> None:
        """Typed characters on the hidden line render masked immediately."""
        host = FakeEditorHost("hunter2\nuser: alice")
        MaskedEditSession(host)

        host.edit(3, 3, "XYZ")

        assert host.text.startswith("hunXYZter2")
        assert host.render().split("\n") == ["**********", "user: alice"]

    def test_replace_on_first_line_is_masked(self) -> None:
        host = FakeEditorHost("hunter2\nuser: alice")
        MaskedEditSession(host)

        host.edit(0, 7, "new-password")

        assert host.render().split("\n") == ["************", "user: alice"]

    def test_delete_on_first_line_keeps_rest_masked(self) -> None:
        host = FakeEditorHost("hunter2\nuser: alice")
        MaskedEditSession(host)

        host.edit(2, 4, "")

        assert host.render().split("\n") == ["*****", "user: alice"]

    def test_edit_outside_first_line_is_not_masked(self) -> None:
        host = FakeEditorHost("hunter2\nuser: alice")
        MaskedEditSession(host)

        host.edit(len(host.text), len(host.text), "\nurl: example.org")

        assert host.render() == "*******\nuser: alice\nurl: example.org"

    def test_shown_edits_are_not_masked(self) -> None:
        host = FakeEditorHost("hunter2\n")
        session = MaskedEditSession(host)
        session.toggle()

        host.edit(0, 0, "abc")
        session.on_first_line_changed(0, 3)

        assert host.render() == "abchunter2\n"

    def test_split_password_is_not_remasked_after_showing(self) -> None:
        host = FakeEditorHost("hunter2\nuser: alice")
        session = MaskedEditSession(host)

        host.edit(3, 3, "ab\ncd")
        assert host.render().split("\n") == ["*****", "cdter2", "user: alice"]
        session.toggle()
        host.edit(5, 6, "")

        assert host.render() == "hunabcdter2\nuser: alice"

    def test_callback_clips_to_first_line(self) -> None:
        host = FakeEditorHost("pw\nnotes")
        session = MaskedEditSession(host)
        session.on_first_line_changed(1, 6)
        assert host.render() == "**\nnotes"

    def test_snapshot_failure_still_masks_and_warns(self) -> None:
        """Masking wins over history fidelity."""
        host = FakeEditorHost("hunter2\n")
        host.fail_snapshot = True
        session = MaskedEditSession(host)

        assert session.state is MaskState.HIDDEN
        assert host.render() == "*******\n"
        assert len(host.warnings) == 1
        assert session.warnings == host.warnings

    def test_restore_failure_still_masks_and_warns(self) -> None:
        host = FakeEditorHost("hunter2\n")
        host.fail_restore = True
        session = MaskedEditSession(host)

        assert session.hidden is True
        assert "restore" in host.warnings[0]

    def test_close_unregisters_callback(self) -> None:
        host = FakeEditorHost("hunter2\n")
        session = MaskedEditSession(host)
        session.close()
        assert host.callback is None


class TestMaskRanges:
    """Test MaskRanges bookkeeping."""

    def test_add_merges_overlapping_and_adjacent(self) -> None:
        ranges = MaskRanges()
        ranges.add(0, 3)
        ranges.add(3, 5)
        ranges.add(8, 10)
        ranges.add(9, 12)
        assert list(ranges) == [(0, 5), (8, 12)]

    def test_remove_splits(self) -> None:
        ranges = MaskRanges()
        ranges.add(0, 10)
        ranges.remove(3, 6)
        assert list(ranges) == [(0, 3), (6, 10)]

    def test_shift_after_insert_before(self) -> None:
        ranges = MaskRanges()
        ranges.add(5, 8)
        ranges.shift(0, 0, 2)
        assert list(ranges) == [(7, 10)]

    def test_shift_after_delete_inside(self) -> None:
        ranges = MaskRanges()
        ranges.add(0, 7)
        ranges.shift(2, 2, 0)
        assert list(ranges) == [(0, 5)]

    def test_shift_drops_fully_deleted_range(self) -> None:
        ranges = MaskRanges()
        ranges.add(2, 4)
        ranges.shift(1, 5, 0)
        assert list(ranges) == []

    def test_insert_at_start_is_not_covered(self) -> None:
        ranges = MaskRanges()
        ranges.add(0, 3)
        ranges.shift(0, 0, 2)
        assert list(ranges) == [(2, 5)]
        assert ranges.contains(0) is False

    def test_clipped(self) -> None:
        ranges = MaskRanges()
        ranges.add(0, 4)
        ranges.add(6, 10)
        assert ranges.clipped(2, 8) == [(2, 4), (6, 8)]
