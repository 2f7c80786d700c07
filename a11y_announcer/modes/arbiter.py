"""
Mode Arbiter
============

Decides which of several mutually exclusive feature modes owns input and
"announce current state" requests.

Predicates are checked in a fixed priority order once per tick and the
first one that reports active wins, even when later ones would also be
true. The order is the tie-break; it is assembled once at startup and
never changes.

A predicate or handler that raises is logged and treated as inactive, so
one misbehaving detector cannot break classification for the others.
"""

import threading
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional, Protocol

from a11y_announcer.modes.state import CoarseMode, ModeState
from a11y_announcer.utils.logger import get_logger

logger = get_logger(__name__)

FALLBACK_MODE = "unknown"


class ModeHandler(Protocol):
    """
    Per-mode navigator.

    Handlers may also expose ``reserved_keys`` (a set of lower-case key
    names) to take over global bindings while their mode is active.
    """

    def on_input(self, key: str) -> bool:
        """Handle a key press. Returns True if the key was used."""
        ...

    def announce_state(self) -> None:
        """Announce a description of the mode's current state."""
        ...


@dataclass(frozen=True)
class ModePredicate:
    """
    One entry in the priority list.

    Attributes:
        name: Mode name used in logs and ``classify``.
        check: Returns True while the mode is active.
        handler: Receives input and state requests while active.
    """

    name: str
    check: Callable[[], bool]
    handler: ModeHandler


def reserved_keys(handler: Any) -> frozenset[str]:
    """Keys a handler claims for itself while its mode is active."""
    keys = getattr(handler, "reserved_keys", None) or ()
    return frozenset(str(k).lower() for k in keys)


class FallbackHandler:
    """
    Used when no predicate matches.

    Announces the last-known coarse mode, or a generic "state unknown"
    message when none has been set.
    """

    reserved_keys: frozenset[str] = frozenset()

    def __init__(
        self,
        mode_state: ModeState,
        announce: Callable[[str], Any],
        *,
        unknown_message: str = "Current state unknown",
        mode_template: str = "{mode} mode",
    ) -> None:
        self.mode_state = mode_state
        self._announce = announce
        self.unknown_message = unknown_message
        self.mode_template = mode_template

    def on_input(self, key: str) -> bool:
        return False

    def announce_state(self) -> None:
        mode = self.mode_state.current
        if mode == CoarseMode.UNKNOWN:
            self._announce(self.unknown_message)
        else:
            self._announce(self.mode_template.format(mode=mode.label))


class ModeArbiter:
    """
    First-match-wins mode classifier.

    Usage:
        arbiter = ModeArbiter(
            [
                ModePredicate("luminol", luminol.is_active, luminol),
                ModePredicate("investigation", hotspots.is_active, hotspots),
            ],
            fallback=FallbackHandler(mode_state, speech.announce),
        )
        handler = arbiter.evaluate()   # once per tick
        arbiter.handle_input("]")      # routed to the active handler
    """

    def __init__(
        self,
        predicates: Iterable[ModePredicate],
        fallback: ModeHandler,
        *,
        on_unavailable: Optional[Callable[[], Any]] = None,
    ) -> None:
        """
        Initialize the arbiter.

        Args:
            predicates: Priority-ordered predicates; copied and frozen.
            fallback: Handler used when nothing matches.
            on_unavailable: Called when even the fallback fails to
                            announce state.

        Raises:
            ValueError: If two predicates share a name.
        """
        self._predicates: tuple[ModePredicate, ...] = tuple(predicates)
        names = [p.name for p in self._predicates]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate mode names: {', '.join(duplicates)}")

        self.fallback = fallback
        self._on_unavailable = on_unavailable
        self._active_index: Optional[int] = None
        self._failing: set[str] = set()
        self._lock = threading.RLock()

        logger.info("Mode arbiter initialized", modes=names)

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    @property
    def predicates(self) -> tuple[ModePredicate, ...]:
        return self._predicates

    @property
    def active_name(self) -> str:
        """Mode chosen by the last ``evaluate`` call."""
        index = self._active_index
        return self._predicates[index].name if index is not None else FALLBACK_MODE

    @property
    def active_handler(self) -> ModeHandler:
        index = self._active_index
        return self._predicates[index].handler if index is not None else self.fallback

    def evaluate(self) -> ModeHandler:
        """
        Re-check predicates and select the active handler for this tick.

        Returns:
            The first matching predicate's handler, or the fallback.
        """
        with self._lock:
            index = self._scan(0)
            previous = self.active_name
            self._active_index = index
            current = self.active_name

        if current != previous:
            logger.info("Mode changed", mode=current, previous=previous)
        return self.active_handler

    def classify(self) -> str:
        """Return the name of the mode that would win right now."""
        with self._lock:
            index = self._scan(0)
        return self._predicates[index].name if index is not None else FALLBACK_MODE

    # ------------------------------------------------------------------
    # Routing
    # ------------------------------------------------------------------

    def handle_input(self, key: str) -> bool:
        """
        Route a key press to the active handler.

        Returns:
            True if the handler used the key.
        """
        handler = self.active_handler
        try:
            return bool(handler.on_input(key))
        except Exception as e:
            logger.error(
                "Mode handler failed to handle input",
                mode=self.active_name,
                key=key,
                error=str(e),
            )
            return False

    def announce_state(self) -> None:
        """
        Ask the active handler to describe the current state.

        If it raises, the remaining predicates after it are re-checked in
        order and the next active one is asked instead, ending with the
        fallback.
        """
        with self._lock:
            index = self._active_index

        while index is not None:
            predicate = self._predicates[index]
            try:
                predicate.handler.announce_state()
                return
            except Exception as e:
                logger.error(
                    "Mode handler failed to announce state",
                    mode=predicate.name,
                    error=str(e),
                )
            with self._lock:
                index = self._scan(index + 1)

        try:
            self.fallback.announce_state()
        except Exception as e:
            logger.error("Error announcing state", error=str(e))
            if self._on_unavailable is not None:
                try:
                    self._on_unavailable()
                except Exception as inner:
                    logger.error("Error announcing state unavailable", error=str(inner))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _scan(self, start: int) -> Optional[int]:
        for index in range(start, len(self._predicates)):
            if self._check(self._predicates[index]):
                return index
        return None

    def _check(self, predicate: ModePredicate) -> bool:
        try:
            active = bool(predicate.check())
        except Exception as e:
            if predicate.name not in self._failing:
                self._failing.add(predicate.name)
                logger.warning("Mode predicate failed", mode=predicate.name, error=str(e))
            else:
                logger.debug("Mode predicate still failing", mode=predicate.name, error=str(e))
            return False

        if predicate.name in self._failing:
            self._failing.discard(predicate.name)
            logger.info("Mode predicate recovered", mode=predicate.name)
        return active
