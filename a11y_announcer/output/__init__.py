"""
Output Module
=============

Everything between a producer's text and the user's ears:
    - channel: dedup, formatting and the repeat buffer
    - queue: rate-limited FIFO feeding the clipboard
    - scheduler: single-slot delayed announcements
    - sinks: screen reader, clipboard and test backends
"""

from a11y_announcer.output.channel import (
    AnnouncementChannel,
    ChannelState,
    RepeatEntry,
)
from a11y_announcer.output.queue import OutputQueue
from a11y_announcer.output.scheduler import DelayedAnnouncementScheduler
from a11y_announcer.output.sinks import (
    ClipboardSink,
    LogSink,
    RecordingSink,
    Sink,
    SpeechSink,
)

__all__ = [
    "AnnouncementChannel",
    "ChannelState",
    "RepeatEntry",
    "OutputQueue",
    "DelayedAnnouncementScheduler",
    "Sink",
    "SpeechSink",
    "ClipboardSink",
    "LogSink",
    "RecordingSink",
]
