"""
Text Cleaner
============

Normalizes raw UI text into something a screen reader can speak.

Steps, applied in order:
    1. Strip inline rich-text markup (color, size, b, i, material, quad)
       and then any remaining ``<...>`` tag.
    2. Decode literal backslash escapes (``\\n``, ``\\r``, ``\\t``,
       ``\\"``, ``\\'``, ``\\\\``).
    3. Apply the registered substring replacement table.
    4. Collapse whitespace runs to a single space and trim.

``clean`` is idempotent and never raises: malformed markup is stripped
on a best-effort basis and unknown escapes are left as they are.
"""

import re
import threading
from typing import Mapping, Optional

from a11y_announcer.utils.logger import get_logger

logger = get_logger(__name__)

# Named rich-text tags, removed before the generic pass
_MARKUP_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"<color[^>]*>|</color>", re.IGNORECASE),
    re.compile(r"<size[^>]*>|</size>", re.IGNORECASE),
    re.compile(r"<b>|</b>", re.IGNORECASE),
    re.compile(r"<i>|</i>", re.IGNORECASE),
    re.compile(r"<material[^>]*>|</material>", re.IGNORECASE),
    re.compile(r"<quad[^>]*>", re.IGNORECASE),
)

# Anything else that still looks like a tag
_GENERIC_TAG = re.compile(r"<[^>]+>")

_WHITESPACE = re.compile(r"\s+")

# Applied in order; the doubled backslash is decoded last
_ESCAPES: tuple[tuple[str, str], ...] = (
    ("\\n", "\n"),
    ("\\r", "\r"),
    ("\\t", "\t"),
    ('\\"', '"'),
    ("\\'", "'"),
    ("\\\\", "\\"),
)

# Upper bound on full passes when looking for a stable result
_MAX_PASSES = 32


def strip_markup(text: str) -> str:
    """Remove rich-text tags."""
    for pattern in _MARKUP_PATTERNS:
        text = pattern.sub("", text)
    return _GENERIC_TAG.sub("", text)


def decode_escapes(text: str) -> str:
    """Turn literal escape sequences into the characters they name."""
    for escaped, literal in _ESCAPES:
        text = text.replace(escaped, literal)
    return text


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


class TextCleaner:
    """
    Text normalizer with a registrable replacement table.

    The replacement table is applied in registration order and may be
    swapped at runtime (hot reload); callers that re-clean stored raw
    text pick up the new table automatically.

    Example:
        cleaner = TextCleaner({"×": " by "})
        cleaner.clean("<b>1920×1080</b>")  # "1920 by 1080"
    """

    def __init__(self, replacements: Optional[Mapping[str, str]] = None) -> None:
        self._replacements: dict[str, str] = {}
        self._lock = threading.Lock()
        if replacements:
            self.set_replacements(replacements)

    # ------------------------------------------------------------------
    # Replacement table
    # ------------------------------------------------------------------

    @property
    def replacements(self) -> dict[str, str]:
        with self._lock:
            return dict(self._replacements)

    def add_replacement(self, pattern: str, replacement: str) -> None:
        """
        Register a literal substring replacement.

        Args:
            pattern: Substring to look for. Empty patterns are ignored.
            replacement: Text to put in its place.
        """
        if not pattern:
            logger.warning("Ignoring empty text replacement pattern")
            return
        with self._lock:
            self._replacements[pattern] = replacement
        logger.debug("Text replacement registered", pattern=pattern, replacement=replacement)

    def remove_replacement(self, pattern: str) -> bool:
        with self._lock:
            return self._replacements.pop(pattern, None) is not None

    def set_replacements(self, replacements: Mapping[str, str]) -> None:
        """Replace the whole table at once."""
        table = {k: v for k, v in replacements.items() if k}
        with self._lock:
            self._replacements = table
        logger.debug("Text replacements loaded", count=len(table))

    # ------------------------------------------------------------------
    # Cleaning
    # ------------------------------------------------------------------

    def clean(self, raw: Optional[str]) -> str:
        """
        Normalize raw text for speech.

        Args:
            raw: Text as read from the UI. ``None`` is treated as empty.

        Returns:
            Cleaned text, or ``""`` for empty/whitespace-only input.
        """
        if raw is None:
            return ""
        if not isinstance(raw, str):
            raw = str(raw)
        if not raw.strip():
            return ""

        with self._lock:
            table = tuple(self._replacements.items())

        text = raw
        for _ in range(_MAX_PASSES):
            cleaned = self._clean_once(text, table)
            if cleaned == text:
                return cleaned
            text = cleaned

        logger.debug("Text did not stabilize while cleaning", text=text[:50])
        return text

    @staticmethod
    def _clean_once(text: str, table: tuple[tuple[str, str], ...]) -> str:
        text = strip_markup(text)
        text = decode_escapes(text)
        for pattern, replacement in table:
            text = text.replace(pattern, replacement)
        return collapse_whitespace(text)

    def combine_lines(self, *lines: Optional[str]) -> str:
        """Clean each non-blank line and join them with single spaces."""
        parts = [self.clean(line) for line in lines if line and line.strip()]
        return " ".join(part for part in parts if part)
