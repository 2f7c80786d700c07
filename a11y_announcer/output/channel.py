"""
Announcement Channel
====================

Turns raw UI text into delivered announcements.

Each channel pairs the same logic with one delivery sink:
- Text cleaning and speaker formatting
- Duplicate suppression within a short window
- A repeat buffer holding the last repeatable utterance
- Failure isolation around the sink

Two channels normally exist side by side: one speaking immediately and one
feeding the clipboard output queue. They deduplicate independently.
"""

import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from a11y_announcer.categories import DEFAULT_REPEATABLE, Category, CategoryRegistry
from a11y_announcer.output.sinks import Sink
from a11y_announcer.text.cleaner import TextCleaner
from a11y_announcer.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_DEDUP_WINDOW = 0.5


@dataclass(frozen=True)
class RepeatEntry:
    """
    Last repeatable utterance.

    Attributes:
        speaker: Speaker name, empty when there is none.
        text: Raw text as received, cleaned again when repeated.
        category: Category it was announced with.
    """

    speaker: str
    text: str
    category: Category


@dataclass(frozen=True)
class ChannelState:
    """
    Snapshot of a channel's dedup and repeat state.

    Attributes:
        last_delivered_text: Formatted text of the last delivery.
        last_delivered_at: Clock reading of the last delivery (None before any).
        repeat_buffer: Last repeatable utterance (None before any).
    """

    last_delivered_text: str = ""
    last_delivered_at: Optional[float] = None
    repeat_buffer: Optional[RepeatEntry] = field(default=None)


class AnnouncementChannel:
    """
    Dedup, format and repeat logic in front of one delivery sink.

    Example:
        channel = AnnouncementChannel("speech", sink, TextCleaner())
        channel.output("Alice", "Hello", Category.DIALOGUE)  # "Alice: Hello"
        channel.repeat_last()                                 # "Alice: Hello" again
    """

    def __init__(
        self,
        name: str,
        sink: Sink,
        cleaner: TextCleaner,
        *,
        dedup_window: float = DEFAULT_DEDUP_WINDOW,
        repeatable: Iterable[Category] = DEFAULT_REPEATABLE,
        nothing_to_repeat: str = "Nothing to repeat",
        categories: Optional[CategoryRegistry] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize the channel.

        Args:
            name: Channel name used in logs.
            sink: Delivery endpoint for formatted text.
            cleaner: Text normalizer shared with the rest of the service.
            dedup_window: Seconds during which identical text is suppressed.
            repeatable: Categories stored in the repeat buffer.
            nothing_to_repeat: Notice delivered when the buffer is empty.
            categories: Display names for log lines.
            clock: Monotonic time source in seconds.
        """
        self.name = name
        self.sink = sink
        self.cleaner = cleaner
        self.dedup_window = dedup_window
        self.repeatable = frozenset(repeatable)
        self.nothing_to_repeat = nothing_to_repeat
        self.categories = categories or CategoryRegistry()
        self._clock = clock

        self._last_text = ""
        self._last_at: Optional[float] = None
        self._repeat: Optional[RepeatEntry] = None
        self._lock = threading.RLock()

        logger.info(
            "Announcement channel initialized",
            channel=name,
            dedup_window=dedup_window,
            repeatable=sorted(c.value for c in self.repeatable),
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def state(self) -> ChannelState:
        with self._lock:
            return ChannelState(
                last_delivered_text=self._last_text,
                last_delivered_at=self._last_at,
                repeat_buffer=self._repeat,
            )

    def output(
        self,
        speaker: Optional[str],
        text: Optional[str],
        category: Category = Category.DIALOGUE,
    ) -> bool:
        """
        Announce text, optionally attributed to a speaker.

        Args:
            speaker: Speaker name; only used for dialogue.
            text: Raw text from the UI.
            category: What kind of text this is.

        Returns:
            True if the text was handed to the sink, False if it was
            blank or suppressed as a duplicate.
        """
        if text is None or not text.strip():
            return False

        formatted = self.format(speaker, text, category)
        if not formatted:
            return False

        with self._lock:
            now = self._clock()
            if (
                formatted == self._last_text
                and self._last_at is not None
                and now - self._last_at < self.dedup_window
            ):
                logger.debug(
                    "Skipping duplicate announcement",
                    channel=self.name,
                    text=formatted[:50],
                )
                return False

            self._last_text = formatted
            self._last_at = now if self._last_at is None else max(self._last_at, now)

            if category in self.repeatable:
                self._repeat = RepeatEntry(speaker=speaker or "", text=text, category=category)

            self._deliver(formatted, category)
        return True

    def announce(self, text: Optional[str], category: Category = Category.SYSTEM_MESSAGE) -> bool:
        """Announce text without a speaker name."""
        return self.output(None, text, category)

    def repeat_last(self) -> bool:
        """
        Deliver the repeat buffer again.

        The stored raw text is cleaned again so replacement-table changes
        apply. Explicit repeats bypass the dedup window and leave dedup
        state untouched.

        Returns:
            True if something was repeated, False if the "nothing to
            repeat" notice was delivered instead.
        """
        with self._lock:
            entry = self._repeat
            formatted = self.format(entry.speaker, entry.text, entry.category) if entry else ""

            if not formatted:
                logger.info("Nothing to repeat", channel=self.name)
                self._deliver(self.nothing_to_repeat, Category.SYSTEM_MESSAGE)
                return False

            logger.info("Repeating", channel=self.name, text=formatted[:50])
            self._deliver(formatted, entry.category)
        return True

    def reset(self) -> None:
        """Forget dedup state and the repeat buffer."""
        with self._lock:
            self._last_text = ""
            self._last_at = None
            self._repeat = None

    def format(self, speaker: Optional[str], text: str, category: Category) -> str:
        """Clean text and prefix the speaker for dialogue."""
        cleaned = self.cleaner.clean(text)
        if not cleaned:
            return ""
        if category == Category.DIALOGUE and speaker and speaker.strip():
            return f"{speaker.strip()}: {cleaned}"
        return cleaned

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _deliver(self, text: str, category: Category) -> bool:
        try:
            self.sink(text)
        except Exception as e:
            logger.error(
                "Error delivering announcement",
                channel=self.name,
                category=self.categories.display_name(category),
                text=text[:50],
                error=str(e),
            )
            return False

        logger.debug(
            "Announcement delivered",
            channel=self.name,
            category=self.categories.display_name(category),
            text=text[:50],
        )
        return True
