"""
Shared Test Fixtures
====================

Pytest fixtures used across all test modules.
Provides recording sinks, a controllable clock and a fully wired service
that never touches a real screen reader or clipboard.
"""

import os

# Keep developer .env overrides from leaking into tests
os.environ.setdefault("SPEECH_BACKEND", "log")
os.environ.setdefault("CLIPBOARD_BACKEND", "log")

import pytest

from a11y_announcer.categories import Category
from a11y_announcer.config import (
    ChannelSettings,
    ModeSettings,
    OutputSettings,
    QueueSettings,
    SchedulerSettings,
    ServerSettings,
    Settings,
    TextSettings,
)
from a11y_announcer.output.channel import AnnouncementChannel
from a11y_announcer.output.sinks import RecordingSink
from a11y_announcer.service import AccessibilityService
from a11y_announcer.text.cleaner import TextCleaner


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ---------------------------------------------------------------------------
# Building blocks
# ---------------------------------------------------------------------------

@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def speech_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def clipboard_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def cleaner() -> TextCleaner:
    return TextCleaner({"☓": " by ", "×": " by "})


@pytest.fixture
def channel(speech_sink: RecordingSink, cleaner: TextCleaner, clock: FakeClock) -> AnnouncementChannel:
    """Speech-style channel with the default repeatable categories."""
    return AnnouncementChannel(
        "speech",
        speech_sink,
        cleaner,
        dedup_window=0.5,
        repeatable={Category.DIALOGUE, Category.NARRATOR, Category.CREDITS},
        clock=clock,
    )


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

@pytest.fixture
def settings() -> Settings:
    """Settings with fast queue timing and two host-pushed modes."""
    return Settings(
        channel=ChannelSettings(dedup_window=0.5),
        queue=QueueSettings(queue_drain_interval=0.001, queue_idle_interval=0.001),
        scheduler=SchedulerSettings(delayed_announcement_delay=0.01),
        text=TextSettings(text_replacements={"☓": " by ", "×": " by "}),
        modes=ModeSettings(mode_flags="puzzle,cross_examination"),
        output=OutputSettings(speech_backend="log", clipboard_backend="log"),
        server=ServerSettings(run_tick_loop=False, debug=True, tick_interval=0.001),
    )


@pytest.fixture
def service(
    settings: Settings,
    speech_sink: RecordingSink,
    clipboard_sink: RecordingSink,
    clock: FakeClock,
) -> AccessibilityService:
    return AccessibilityService(
        settings,
        speak=speech_sink,
        clipboard=clipboard_sink,
        clock=clock,
    )
