"""
Announcement Categories
=======================

Categories drive formatting (speaker prefix) and repeat-buffer eligibility.
The set is closed; hosts may only attach display names, which are used
when rendering log lines and never by delivery logic.
"""

import threading
from enum import Enum
from typing import Optional, Union


class Category(Enum):
    """Kind of text being announced."""

    DIALOGUE = "dialogue"
    NARRATOR = "narrator"
    MENU = "menu"
    MENU_CHOICE = "menu_choice"
    INVESTIGATION = "investigation"
    EVIDENCE = "evidence"
    SYSTEM_MESSAGE = "system_message"
    TRIAL = "trial"
    PSYCHE_LOCK = "psyche_lock"
    CREDITS = "credits"


# Categories stored in the repeat buffer unless a channel is configured otherwise
DEFAULT_REPEATABLE: frozenset[Category] = frozenset(
    {Category.DIALOGUE, Category.NARRATOR, Category.CREDITS}
)

_DEFAULT_NAMES: dict[Category, str] = {
    Category.DIALOGUE: "Dialogue",
    Category.NARRATOR: "Narrator",
    Category.MENU: "Menu",
    Category.MENU_CHOICE: "MenuChoice",
    Category.INVESTIGATION: "Investigation",
    Category.EVIDENCE: "Evidence",
    Category.SYSTEM_MESSAGE: "SystemMessage",
    Category.TRIAL: "Trial",
    Category.PSYCHE_LOCK: "PsycheLock",
    Category.CREDITS: "Credits",
}


def parse_category(value: Union[str, Category]) -> Category:
    """
    Resolve a category from its value or member name, case-insensitively.

    Raises:
        ValueError: If no category matches.
    """
    if isinstance(value, Category):
        return value
    key = value.strip().lower().replace("-", "_")
    for category in Category:
        if key in (category.value, category.name.lower()):
            return category
        if key == _DEFAULT_NAMES[category].lower():
            return category
    raise ValueError(f"Unknown category: {value!r}")


class CategoryRegistry:
    """Display names for categories, used for logging only."""

    def __init__(self, names: Optional[dict[Category, str]] = None) -> None:
        self._names: dict[Category, str] = dict(_DEFAULT_NAMES)
        if names:
            self._names.update(names)
        self._lock = threading.Lock()

    def register(self, category: Category, display_name: str) -> None:
        """Attach a display name to a category."""
        with self._lock:
            self._names[category] = display_name

    def display_name(self, category: Category) -> str:
        with self._lock:
            return self._names.get(category, category.name)
