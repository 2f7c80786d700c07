"""
API Module
==========

FastAPI routes that let an out-of-process host drive the announcer.

This package contains:
    - routes/: REST API endpoints
    - dependencies: access to the running AccessibilityService
"""

from a11y_announcer.api.routes import announcements, health, modes

__all__ = [
    "health",
    "announcements",
    "modes",
]
