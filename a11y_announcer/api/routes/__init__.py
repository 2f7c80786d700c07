"""
API Routes Package
==================

REST API route definitions.
"""

from a11y_announcer.api.routes.announcements import router as announcements_router
from a11y_announcer.api.routes.health import router as health_router
from a11y_announcer.api.routes.modes import router as modes_router

__all__ = [
    "health_router",
    "announcements_router",
    "modes_router",
]
