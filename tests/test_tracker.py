"""
Tests for the Cursor Tracker
============================

Tests for:
- Opening, moving and closing a menu
- announce_on_open
- Blank descriptions and read failures
"""

from a11y_announcer.categories import Category
from a11y_announcer.modes import CursorTracker


class Menu:
    def __init__(self, options):
        self.options = options
        self.active = False
        self.cursor = 0

    def read(self):
        return self.active, self.cursor

    def describe(self, cursor):
        return self.options[cursor]


def make_tracker(menu, calls, **kwargs):
    return CursorTracker(
        "options",
        menu.read,
        menu.describe,
        lambda text, category: calls.append((text, category)),
        **kwargs,
    )


class TestCursorTracker:
    def test_opening_does_not_announce_by_default(self):
        menu, calls = Menu(["Save", "Load"]), []
        tracker = make_tracker(menu, calls)
        menu.active = True
        assert tracker.poll() is None
        assert tracker.active
        assert calls == []

    def test_announce_on_open(self):
        menu, calls = Menu(["Save", "Load"]), []
        tracker = make_tracker(menu, calls, announce_on_open=True)
        menu.active = True
        assert tracker.poll() == "Save"
        assert calls == [("Save", Category.MENU_CHOICE)]

    def test_cursor_move_announced_once(self):
        menu, calls = Menu(["Save", "Load", "Quit"]), []
        tracker = make_tracker(menu, calls)
        menu.active = True
        tracker.poll()
        menu.cursor = 2
        assert tracker.poll() == "Quit"
        assert tracker.poll() is None
        assert [text for text, _ in calls] == ["Quit"]

    def test_closing_resets(self):
        menu, calls = Menu(["Save", "Load"]), []
        tracker = make_tracker(menu, calls)
        menu.active = True
        tracker.poll()
        menu.active = False
        tracker.poll()
        assert not tracker.active
        assert tracker.cursor == -1

    def test_reopen_at_same_cursor_is_silent(self):
        menu, calls = Menu(["Save", "Load"]), []
        tracker = make_tracker(menu, calls)
        menu.active = True
        menu.cursor = 1
        tracker.poll()
        menu.active = False
        tracker.poll()
        menu.active = True
        tracker.poll()
        assert calls == []

    def test_blank_description_skipped(self):
        menu, calls = Menu(["Save", ""]), []
        tracker = make_tracker(menu, calls)
        menu.active = True
        tracker.poll()
        menu.cursor = 1
        assert tracker.poll() is None
        assert calls == []

    def test_read_failure_contained(self):
        calls = []

        def broken():
            raise IndexError("menu gone")

        tracker = CursorTracker("broken", broken, str, lambda t, c: calls.append(t))
        assert tracker.poll() is None

    def test_missing_menu(self):
        tracker = CursorTracker("none", lambda: None, str, lambda t, c: None)
        assert tracker.poll() is None
        assert not tracker.active

    def test_custom_category(self):
        menu, calls = Menu(["Badge", "Autopsy report"]), []
        tracker = make_tracker(menu, calls, category=Category.EVIDENCE)
        menu.active = True
        tracker.poll()
        menu.cursor = 1
        tracker.poll()
        assert calls == [("Autopsy report", Category.EVIDENCE)]

    def test_vanished_menu_resets(self):
        readings = iter([(True, 2), None, (True, 0)])
        calls = []
        tracker = CursorTracker(
            "options",
            lambda: next(readings),
            lambda cursor: f"opt{cursor}",
            lambda text, category: calls.append(text),
        )
        tracker.poll()
        tracker.poll()
        assert not tracker.active
        assert tracker.cursor == -1
        tracker.poll()
        assert calls == []
