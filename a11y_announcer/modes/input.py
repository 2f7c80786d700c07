"""
Input Router
============

Dispatches key presses: global bindings first (repeat, announce state,
reload configuration), then the active mode's handler.

A mode can reserve a global key (e.g. a puzzle that uses R to rotate)
by listing it in its handler's ``reserved_keys``; while that mode is
active the key goes to the handler instead.
"""

from typing import Any, Callable, Optional

from a11y_announcer.modes.arbiter import ModeArbiter, reserved_keys
from a11y_announcer.utils.logger import get_logger

logger = get_logger(__name__)


class InputRouter:
    """
    Routes one key press per call.

    Keys are compared lower-case (``"F5"`` and ``"f5"`` are the same key).
    """

    def __init__(
        self,
        arbiter: ModeArbiter,
        repeat: Callable[[], Any],
        announce: Callable[[str], Any],
        *,
        reload: Optional[Callable[[], Any]] = None,
        repeat_key: str = "r",
        state_key: str = "i",
        reload_key: str = "f5",
        reloaded_message: str = "Configuration reloaded",
        reload_error_message: str = "Error reloading configuration",
    ) -> None:
        """
        Initialize the router.

        Args:
            arbiter: Supplies the active mode handler.
            repeat: Called for the repeat key.
            announce: Used for reload notices.
            reload: Hot-reload hook for the reload key (key unbound if None).
            repeat_key: Key that repeats the last announcement.
            state_key: Key that announces the current state.
            reload_key: Key that reloads configuration.
            reloaded_message: Notice after a successful reload.
            reload_error_message: Notice after a failed reload.
        """
        self.arbiter = arbiter
        self._repeat = repeat
        self._announce = announce
        self._reload = reload
        self.repeat_key = repeat_key.lower()
        self.state_key = state_key.lower()
        self.reload_key = reload_key.lower()
        self.reloaded_message = reloaded_message
        self.reload_error_message = reload_error_message

    def handle_key(self, key: str) -> bool:
        """
        Process one key press.

        Returns:
            True if a global binding or the active handler used the key.
        """
        key = (key or "").strip().lower()
        if not key:
            return False

        reserved = reserved_keys(self.arbiter.active_handler)

        if key not in reserved:
            if key == self.reload_key and self._reload is not None:
                self.reload()
                return True
            if key == self.repeat_key:
                try:
                    self._repeat()
                except Exception as e:
                    logger.error("Error repeating last announcement", error=str(e))
                return True
            if key == self.state_key:
                self.arbiter.announce_state()
                return True

        return self.arbiter.handle_input(key)

    def reload(self) -> bool:
        """
        Run the reload hook and announce the outcome.

        Returns:
            True if the reload succeeded.
        """
        if self._reload is None:
            return False
        try:
            self._reload()
        except Exception as e:
            logger.error("Error reloading configuration", error=str(e))
            self._notify(self.reload_error_message)
            return False

        logger.info("Configuration reloaded")
        self._notify(self.reloaded_message)
        return True

    def _notify(self, message: str) -> None:
        try:
            self._announce(message)
        except Exception as e:
            logger.error("Error announcing reload result", error=str(e))
