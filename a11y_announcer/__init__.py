"""
A11y Announcer
==============

Screen-reader announcement pipeline for applications that expose no
accessibility information of their own.

Text reported by the host is cleaned of markup, de-duplicated, and spoken
immediately or queued for paced clipboard delivery. A priority-ordered
mode arbiter decides which screen handler owns key presses and state
requests.

Modules:
    - text: Markup stripping and text normalization
    - output: Announcement channels, output queue, delayed scheduler, sinks
    - modes: Mode arbitration, key routing, cursor tracking
    - service: The AccessibilityService facade
    - api: FastAPI bridge for out-of-process hosts
    - utils: Logging helpers
"""

__version__ = "1.0.0"
__author__ = "A11y Announcer Team"
