"""
Cursor Tracker
==============

Polls a menu's ``(active, cursor)`` pair once per tick and announces the
highlighted option when the cursor moves.

Transitions:
    - inactive -> active: remember the cursor (announce it if configured)
    - active, cursor moved: announce ``describe(cursor)``
    - active -> inactive or menu gone: forget the cursor
"""

from typing import Any, Callable, Optional

from a11y_announcer.categories import Category
from a11y_announcer.utils.logger import get_logger

logger = get_logger(__name__)

CursorReading = Optional[tuple[bool, int]]


class CursorTracker:
    """Edge detector for one menu's cursor."""

    def __init__(
        self,
        name: str,
        read: Callable[[], CursorReading],
        describe: Callable[[int], Optional[str]],
        announce: Callable[[str, Category], Any],
        *,
        category: Category = Category.MENU_CHOICE,
        announce_on_open: bool = False,
    ) -> None:
        """
        Initialize the tracker.

        Args:
            name: Tracker name used in logs.
            read: Returns ``(active, cursor)``, or None when the menu does
                  not exist right now.
            describe: Text for a cursor position; None or blank skips it.
            announce: Called with ``(text, category)``.
            category: Category of the announcements.
            announce_on_open: Also announce the option highlighted when
                              the menu opens.
        """
        self.name = name
        self._read = read
        self._describe = describe
        self._announce = announce
        self.category = category
        self.announce_on_open = announce_on_open

        self._active = False
        self._cursor = -1

    @property
    def active(self) -> bool:
        return self._active

    @property
    def cursor(self) -> int:
        return self._cursor

    def reset(self) -> None:
        self._active = False
        self._cursor = -1

    def poll(self) -> Optional[str]:
        """
        Check the menu once.

        Returns:
            The announced text, if anything was announced.
        """
        try:
            reading = self._read()
            active, cursor = reading if reading is not None else (False, -1)

            if active and not self._active:
                self._active = True
                self._cursor = cursor
                if self.announce_on_open:
                    return self._announce_cursor(cursor)
            elif active and cursor != self._cursor:
                self._cursor = cursor
                return self._announce_cursor(cursor)
            elif not active and self._active:
                self.reset()
        except Exception as e:
            logger.debug("Cursor tracker poll failed", tracker=self.name, error=str(e))
        return None

    def _announce_cursor(self, cursor: int) -> Optional[str]:
        text = self._describe(cursor)
        if not text or not text.strip():
            return None
        self._announce(text, self.category)
        return text
