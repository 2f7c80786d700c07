"""
Utility modules for the accessibility announcer.

This package contains:
    - logger: Structured logging with structlog
"""

from a11y_announcer.utils.logger import LogContext, get_logger, setup_logging

__all__ = [
    "get_logger",
    "setup_logging",
    "LogContext",
]
