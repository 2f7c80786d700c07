"""
Announcer Errors
================

Exceptions raised for programming and setup errors. Runtime delivery
failures are never raised to callers; they are logged where they occur.
"""


class AnnouncerError(Exception):
    """Base class for announcer errors."""


class SinkUnavailableError(AnnouncerError):
    """An output backend (screen reader, clipboard) could not be initialized."""

    def __init__(self, backend: str, reason: str = "") -> None:
        self.backend = backend
        self.reason = reason
        message = f"Output backend '{backend}' is unavailable"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class UnknownChannelError(AnnouncerError, ValueError):
    """A channel name other than ``speech`` or ``queue`` was requested."""

    def __init__(self, channel: str) -> None:
        self.channel = channel
        super().__init__(f"Unknown channel: {channel!r}")
