"""
Text Module
===========

Normalization of raw UI text before it is announced:
    - cleaner: markup stripping, escape decoding, substitutions, whitespace
"""

from a11y_announcer.text.cleaner import (
    TextCleaner,
    collapse_whitespace,
    decode_escapes,
    strip_markup,
)

__all__ = [
    "TextCleaner",
    "strip_markup",
    "decode_escapes",
    "collapse_whitespace",
]
