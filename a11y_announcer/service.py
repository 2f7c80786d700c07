"""
Accessibility Service
=====================

Single owner of the announcement pipeline.

Wires together, once per process:
- The text cleaner and category display names
- The speech channel (immediate) and the queue channel (clipboard)
- The output queue and its drain task
- The delayed announcement scheduler
- The mode arbiter, input router and cursor trackers

Hosts hold one ``AccessibilityService`` and call into it instead of
reaching for module-level singletons.

Usage:
    from a11y_announcer.service import AccessibilityService

    service = AccessibilityService(speak=screen_reader, clipboard=clipboard)
    await service.start()

    service.output("Phoenix", "Hold it!", Category.DIALOGUE)
    service.handle_key("r")   # repeats "Phoenix: Hold it!"

    await service.stop()
"""

import asyncio
import time
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence, Union

from a11y_announcer.categories import Category, CategoryRegistry
from a11y_announcer.config import Settings, TextSettings, get_settings
from a11y_announcer.errors import UnknownChannelError
from a11y_announcer.modes.arbiter import FallbackHandler, ModeArbiter, ModePredicate
from a11y_announcer.modes.input import InputRouter
from a11y_announcer.modes.state import (
    CoarseMode,
    FlagDetector,
    ModeState,
    PushedStateHandler,
)
from a11y_announcer.modes.tracker import CursorReading, CursorTracker
from a11y_announcer.output.channel import AnnouncementChannel
from a11y_announcer.output.queue import OutputQueue
from a11y_announcer.output.scheduler import (
    DelayedAnnouncementScheduler,
    SequenceStep,
    TextProducer,
)
from a11y_announcer.output.sinks import Sink, create_clipboard_sink, create_speech_sink
from a11y_announcer.text.cleaner import TextCleaner
from a11y_announcer.utils.logger import LogContext, get_logger

logger = get_logger(__name__)

SPEECH = "speech"
QUEUE = "queue"


class AccessibilityService:
    """
    Announcement pipeline and mode arbitration for one host application.

    All public methods are safe to call from the host's tick: failures are
    logged where they happen and never raised, except for programming
    errors such as an unknown channel name.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        speak: Optional[Sink] = None,
        clipboard: Optional[Sink] = None,
        modes: Iterable[ModePredicate] = (),
        reload: Optional[Callable[[], Any]] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Build the pipeline.

        Args:
            settings: Configuration; defaults to ``get_settings()``.
            speak: Sink for the speech channel; built from settings if None.
            clipboard: Sink the output queue drains into; built from
                       settings if None.
            modes: Mode predicates in priority order. Modes named in
                   ``MODE_FLAGS`` are appended after them.
            reload: Extra hot-reload hook run by ``reload_configuration``.
            clock: Monotonic time source for duplicate suppression.
        """
        self.settings = settings or get_settings()
        messages = self.settings.messages

        self.categories = CategoryRegistry()
        self.cleaner = TextCleaner(self.settings.text.text_replacements)
        self.mode_state = ModeState()

        if speak is None:
            speak = create_speech_sink(
                self.settings.output.speech_backend,
                interrupt=self.settings.output.speech_interrupt,
            )
        if clipboard is None:
            clipboard = create_clipboard_sink(self.settings.output.clipboard_backend)

        self.queue = OutputQueue(
            clipboard,
            drain_interval=self.settings.queue.queue_drain_interval,
            idle_interval=self.settings.queue.queue_idle_interval,
            max_size=self.settings.queue.queue_max_size,
        )

        channel_settings = self.settings.channel
        self.speech = AnnouncementChannel(
            SPEECH,
            speak,
            self.cleaner,
            dedup_window=channel_settings.dedup_window,
            repeatable=channel_settings.get_repeatable(SPEECH),
            nothing_to_repeat=messages.message_nothing_to_repeat,
            categories=self.categories,
            clock=clock,
        )
        self.queued = AnnouncementChannel(
            QUEUE,
            self.queue.enqueue,
            self.cleaner,
            dedup_window=channel_settings.dedup_window,
            repeatable=channel_settings.get_repeatable(QUEUE),
            nothing_to_repeat=messages.message_nothing_to_repeat,
            categories=self.categories,
            clock=clock,
        )

        self.scheduler = DelayedAnnouncementScheduler(
            self.speech.announce,
            default_delay=self.settings.scheduler.delayed_announcement_delay,
        )

        predicates = list(modes)
        self.flags: dict[str, FlagDetector] = {}
        self.pushed: dict[str, PushedStateHandler] = {}
        for name in self.settings.modes.get_mode_flags():
            flag = FlagDetector(name)
            handler = PushedStateHandler(name, self._announce_notice, messages.message_mode)
            self.flags[name] = flag
            self.pushed[name] = handler
            predicates.append(ModePredicate(name, flag, handler))

        self.arbiter = ModeArbiter(
            predicates,
            FallbackHandler(
                self.mode_state,
                self._announce_notice,
                unknown_message=messages.message_state_unknown,
                mode_template=messages.message_mode,
            ),
            on_unavailable=lambda: self._announce_notice(messages.message_state_unavailable),
        )

        self._reload_hook = reload
        self.router = InputRouter(
            self.arbiter,
            self.speech.repeat_last,
            self._announce_notice,
            reload=self.reload_configuration,
            repeat_key=self.settings.input.key_repeat,
            state_key=self.settings.input.key_state,
            reload_key=self.settings.input.key_reload,
            reloaded_message=messages.message_config_reloaded,
            reload_error_message=messages.message_config_reload_error,
        )

        self._trackers: list[CursorTracker] = []
        self._tick_task: Optional[asyncio.Task[None]] = None
        self._ticks = 0

        logger.info(
            "Accessibility service initialized",
            modes=[p.name for p in self.arbiter.predicates],
            dedup_window=channel_settings.dedup_window,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self.queue.is_running

    async def start(self, run_tick_loop: Optional[bool] = None) -> None:
        """
        Start the queue drain task and, optionally, the internal tick loop.

        Args:
            run_tick_loop: Override ``settings.server.run_tick_loop``.
        """
        await self.queue.start()
        if run_tick_loop is None:
            run_tick_loop = self.settings.server.run_tick_loop
        if run_tick_loop and self._tick_task is None:
            self._tick_task = asyncio.get_running_loop().create_task(
                self._tick_loop(), name="accessibility-tick"
            )
        logger.info("Accessibility service started", tick_loop=run_tick_loop)

    async def stop(self) -> None:
        """Stop background tasks and drop any pending delayed announcement."""
        task, self._tick_task = self._tick_task, None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self.scheduler.cancel()
        await self.queue.stop()
        logger.info("Accessibility service stopped", ticks=self._ticks)

    async def _tick_loop(self) -> None:
        interval = self.settings.server.tick_interval
        while True:
            self.tick()
            await asyncio.sleep(interval)

    def tick(self) -> str:
        """
        Run one update cycle: classify the mode, then poll cursor trackers.

        Returns:
            The active mode name.
        """
        self._ticks += 1
        try:
            self.arbiter.evaluate()
            for tracker in self._trackers:
                tracker.poll()
        except Exception as e:
            logger.error("Error in tick", error=str(e))
        return self.arbiter.active_name

    # ------------------------------------------------------------------
    # Announcements
    # ------------------------------------------------------------------

    def channel(self, name: str) -> AnnouncementChannel:
        """
        Look up a channel by name.

        Raises:
            UnknownChannelError: If ``name`` is not ``speech`` or ``queue``.
        """
        if name == SPEECH:
            return self.speech
        if name == QUEUE:
            return self.queued
        raise UnknownChannelError(name)

    def output(
        self,
        speaker: Optional[str],
        text: Optional[str],
        category: Category = Category.DIALOGUE,
        channel: str = SPEECH,
    ) -> bool:
        """Announce text attributed to a speaker on the given channel."""
        return self.channel(channel).output(speaker, text, category)

    def announce(
        self,
        text: Optional[str],
        category: Category = Category.SYSTEM_MESSAGE,
        channel: str = SPEECH,
    ) -> bool:
        """Announce text without a speaker on the given channel."""
        return self.channel(channel).announce(text, category)

    def repeat_last(self, channel: str = SPEECH) -> bool:
        return self.channel(channel).repeat_last()

    def clear_queue(self) -> int:
        """Discard clipboard output that has not been delivered yet."""
        return self.queue.clear()

    def schedule_delayed_announcement(
        self,
        delay: Optional[float],
        produce: TextProducer,
        category: Category = Category.SYSTEM_MESSAGE,
    ) -> int:
        """Speak ``produce()`` after ``delay`` seconds, replacing any pending one."""
        return self.scheduler.schedule(delay, produce, category)

    def schedule_announcement_sequence(
        self,
        steps: Sequence[SequenceStep],
        category: Category = Category.SYSTEM_MESSAGE,
    ) -> int:
        """Speak several texts with delays in between, replacing any pending one."""
        return self.scheduler.schedule_sequence(steps, category)

    def cancel_delayed_announcement(self) -> None:
        self.scheduler.cancel()

    def on_scene_loaded(self, scene: str) -> None:
        """
        React to the host switching screens.

        Pending clipboard output belongs to the previous screen and is
        discarded; the new scene name is queued.
        """
        with LogContext(scene=scene):
            discarded = self.queue.clear()
            logger.info("Scene loaded", discarded=discarded)
            if scene and scene.strip():
                self.queued.announce(
                    self.settings.messages.message_scene.format(scene=scene),
                    Category.SYSTEM_MESSAGE,
                )

    def _announce_notice(self, text: str) -> None:
        self.speech.announce(text, Category.SYSTEM_MESSAGE)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def add_text_replacement(self, pattern: str, replacement: str) -> None:
        self.cleaner.add_replacement(pattern, replacement)

    def register_category_name(self, category: Category, display_name: str) -> None:
        """Set the name used for ``category`` in log lines."""
        self.categories.register(category, display_name)

    def track_cursor(
        self,
        name: str,
        read: Callable[[], CursorReading],
        describe: Callable[[int], Optional[str]],
        *,
        category: Category = Category.MENU_CHOICE,
        announce_on_open: bool = False,
    ) -> CursorTracker:
        """Announce a menu's highlighted option whenever its cursor moves."""
        tracker = CursorTracker(
            name,
            read,
            describe,
            self.speech.announce,
            category=category,
            announce_on_open=announce_on_open,
        )
        self._trackers.append(tracker)
        logger.debug("Cursor tracker registered", tracker=name)
        return tracker

    def reload_configuration(self, replacements: Optional[Mapping[str, str]] = None) -> None:
        """
        Reload the text replacement table and run the host's reload hook.

        Args:
            replacements: New table; re-read from the environment when None.
        """
        if replacements is None:
            replacements = TextSettings().text_replacements
        self.cleaner.set_replacements(replacements)
        if self._reload_hook is not None:
            self._reload_hook()

    # ------------------------------------------------------------------
    # Modes and input
    # ------------------------------------------------------------------

    def set_mode(self, mode: Union[CoarseMode, str]) -> bool:
        """Record the host's coarse mode. Returns True if it changed."""
        if not isinstance(mode, CoarseMode):
            mode = CoarseMode(mode.strip().lower())
        return self.mode_state.set(mode)

    def set_mode_flag(self, name: str, active: bool, state: Optional[str] = None) -> None:
        """
        Toggle a pushed mode.

        Args:
            name: A name from ``MODE_FLAGS``.
            active: Whether the mode is active.
            state: Description announced for this mode's state requests.

        Raises:
            KeyError: If the mode is not configured.
        """
        key = name.strip().lower()
        flag = self.flags[key]
        flag.set(active)
        if state is not None:
            self.pushed[key].state_text = state

    def handle_key(self, key: str) -> bool:
        """Route one key press. Returns True if something used it."""
        try:
            return self.router.handle_key(key)
        except Exception as e:
            logger.error("Error handling key", key=key, error=str(e))
            return False

    def announce_state(self) -> None:
        self.arbiter.announce_state()

    def classify(self) -> str:
        return self.arbiter.classify()

    def get_status(self) -> dict[str, Any]:
        """Return a snapshot for diagnostics."""
        return {
            "mode": self.arbiter.active_name,
            "coarse_mode": self.mode_state.current.value,
            "queue": self.queue.get_stats(),
            "delayed_pending": self.scheduler.pending,
            "ticks": self._ticks,
            "running": self.is_running,
        }
