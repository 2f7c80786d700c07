"""
Modes Module
============

Which feature currently owns the user's attention:
    - arbiter: first-match-wins mode classification and routing
    - state: coarse mode and settable mode flags
    - input: global key bindings in front of the active mode
    - tracker: menu cursor change announcements
"""

from a11y_announcer.modes.arbiter import (
    FALLBACK_MODE,
    FallbackHandler,
    ModeArbiter,
    ModeHandler,
    ModePredicate,
)
from a11y_announcer.modes.input import InputRouter
from a11y_announcer.modes.state import (
    CoarseMode,
    FlagDetector,
    ModeState,
    PushedStateHandler,
)
from a11y_announcer.modes.tracker import CursorTracker

__all__ = [
    "FALLBACK_MODE",
    "FallbackHandler",
    "ModeArbiter",
    "ModeHandler",
    "ModePredicate",
    "InputRouter",
    "CoarseMode",
    "FlagDetector",
    "ModeState",
    "PushedStateHandler",
    "CursorTracker",
]
