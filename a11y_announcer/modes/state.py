"""
Mode State
==========

Coarse, host-maintained notion of where the user is (main menu, trial,
...), used when no specific mode detector claims the current tick.

Also provides ``FlagDetector``, a settable boolean that can stand in as a
mode predicate for hosts that push their state instead of being polled,
and ``PushedStateHandler`` to go with it.
"""

import threading
from enum import Enum
from typing import Any, Callable, Optional

from a11y_announcer.utils.logger import get_logger

logger = get_logger(__name__)


class CoarseMode(Enum):
    """Broad application state set by external collaborators."""

    UNKNOWN = "unknown"
    MAIN_MENU = "main_menu"
    INVESTIGATION = "investigation"
    TRIAL = "trial"
    DIALOGUE = "dialogue"
    MENU = "menu"
    GALLERY = "gallery"
    OPTIONS = "options"

    @property
    def label(self) -> str:
        """Human-readable name, e.g. ``"Main menu"``."""
        return self.value.replace("_", " ").capitalize()


class ModeState:
    """Last-known coarse mode."""

    def __init__(self, mode: CoarseMode = CoarseMode.UNKNOWN) -> None:
        self._mode = mode
        self._lock = threading.Lock()

    @property
    def current(self) -> CoarseMode:
        return self._mode

    def set(self, mode: CoarseMode) -> bool:
        """
        Record the coarse mode.

        Returns:
            True if the mode changed.
        """
        with self._lock:
            if mode == self._mode:
                return False
            previous, self._mode = self._mode, mode
        logger.info("Coarse mode changed", mode=mode.value, previous=previous.value)
        return True


class FlagDetector:
    """Named boolean usable as a mode predicate's ``check``."""

    def __init__(self, name: str, active: bool = False) -> None:
        self.name = name
        self._active = active

    def __call__(self) -> bool:
        return self._active

    @property
    def active(self) -> bool:
        return self._active

    def set(self, active: bool) -> None:
        if active != self._active:
            logger.debug("Mode flag changed", flag=self.name, active=active)
        self._active = active


class PushedStateHandler:
    """
    Handler for a mode whose state description is pushed by the host.

    Announces the last pushed description, or ``"{Name} mode"`` when the
    host has not pushed one. It does not consume keys.
    """

    reserved_keys: frozenset[str] = frozenset()

    def __init__(
        self,
        name: str,
        announce: Callable[[str], Any],
        mode_template: str = "{mode} mode",
    ) -> None:
        self.name = name
        self._announce = announce
        self.mode_template = mode_template
        self.state_text: Optional[str] = None

    def on_input(self, key: str) -> bool:
        return False

    def announce_state(self) -> None:
        label = self.name.replace("_", " ").capitalize()
        self._announce(self.state_text or self.mode_template.format(mode=label))
