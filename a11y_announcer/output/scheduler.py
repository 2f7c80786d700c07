"""
Delayed Announcement Scheduler
==============================

Single-slot, cancelable, time-delayed announcements.

Every ``schedule``/``cancel`` bumps a generation counter. A pending task
captures the generation it was started with and, when its delay elapses,
only announces if that generation is still current. The asyncio task of
the superseded announcement is also cancelled, but the generation check
alone is enough to make a stale fire harmless.

The text is produced when the task fires, not when it is scheduled, so
callers can wait for a UI field that is not populated yet.

``schedule`` and ``schedule_sequence`` must run on the event loop thread.
``cancel`` may be called from any thread; the task cancellation is handed
to the owning loop.
"""

import asyncio
import threading
from typing import Any, Callable, Optional, Sequence, Union

from a11y_announcer.categories import Category
from a11y_announcer.utils.logger import get_logger

logger = get_logger(__name__)

TextProducer = Callable[[], Optional[str]]
SequenceStep = tuple[float, Union[str, TextProducer]]


class DelayedAnnouncementScheduler:
    """
    Holds at most one pending delayed announcement.

    Usage:
        scheduler = DelayedAnnouncementScheduler(channel.announce)
        scheduler.schedule(0.5, lambda: read_evidence_name(), Category.EVIDENCE)
        scheduler.schedule(0.2, lambda: "newer")  # the first one never fires
        scheduler.cancel()                         # nothing fires
    """

    def __init__(
        self,
        deliver: Callable[[str, Category], Any],
        default_delay: float = 0.5,
    ) -> None:
        """
        Initialize the scheduler.

        Args:
            deliver: Called with ``(text, category)`` when a task fires.
            default_delay: Delay used when ``schedule`` gets ``None``.
        """
        self._deliver = deliver
        self.default_delay = default_delay
        self._generation = 0
        self._task: Optional[asyncio.Task[None]] = None
        self._lock = threading.Lock()

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def pending(self) -> bool:
        """Whether a scheduled announcement is still waiting to fire."""
        task = self._task
        return task is not None and not task.done()

    def schedule(
        self,
        delay: Optional[float],
        produce: TextProducer,
        category: Category = Category.SYSTEM_MESSAGE,
    ) -> int:
        """
        Announce the result of ``produce()`` after ``delay`` seconds.

        Any previously scheduled announcement is discarded, whatever its
        remaining delay.

        Args:
            delay: Seconds to wait (``None`` uses the default delay).
            produce: Called at fire time; ``None`` or blank text announces nothing.
            category: Category for the announcement.

        Returns:
            The generation tagging this announcement.

        Raises:
            RuntimeError: If called without a running event loop.
        """
        wait = self._normalize_delay(delay)
        return self._start(lambda gen: self._fire(gen, wait, produce, category))

    def schedule_sequence(
        self,
        steps: Sequence[SequenceStep],
        category: Category = Category.SYSTEM_MESSAGE,
    ) -> int:
        """
        Announce several texts in order, each after its own delay.

        The sequence occupies the single slot: a later ``schedule``,
        ``schedule_sequence`` or ``cancel`` stops the remaining steps.

        Args:
            steps: ``(delay, text_or_producer)`` pairs; delays are relative
                   to the previous step.
            category: Category for every step.

        Returns:
            The generation tagging this sequence.
        """
        normalized = [(self._normalize_delay(d), item) for d, item in steps]
        return self._start(lambda gen: self._play(gen, normalized, category))

    def cancel(self) -> None:
        """Drop the pending announcement, if any, without firing it."""
        with self._lock:
            self._generation += 1
            self._cancel_task()
        logger.debug("Delayed announcement cancelled", generation=self._generation)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _normalize_delay(self, delay: Optional[float]) -> float:
        if delay is None:
            return self.default_delay
        return max(0.0, float(delay))

    def _start(self, make_coro: Callable[[int], Any]) -> int:
        loop = asyncio.get_running_loop()
        with self._lock:
            self._generation += 1
            generation = self._generation
            self._cancel_task()
            self._task = loop.create_task(
                make_coro(generation), name=f"delayed-announcement-{generation}"
            )
        logger.debug("Delayed announcement scheduled", generation=generation)
        return generation

    def _cancel_task(self) -> None:
        task, self._task = self._task, None
        if task is None or task.done():
            return
        loop = task.get_loop()
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is loop:
            task.cancel()
        elif not loop.is_closed():
            # Task methods are only safe on the owning loop's thread.
            loop.call_soon_threadsafe(task.cancel)

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    async def _fire(
        self,
        generation: int,
        delay: float,
        produce: TextProducer,
        category: Category,
    ) -> None:
        await asyncio.sleep(delay)
        if not self._is_current(generation):
            logger.debug("Stale delayed announcement ignored", generation=generation)
            return
        self._emit(produce, category)
        self._release(generation)

    async def _play(
        self,
        generation: int,
        steps: Sequence[tuple[float, Union[str, TextProducer]]],
        category: Category,
    ) -> None:
        for delay, item in steps:
            await asyncio.sleep(delay)
            if not self._is_current(generation):
                logger.debug("Stale announcement sequence stopped", generation=generation)
                return
            self._emit(item, category)
        self._release(generation)

    def _emit(self, item: Union[str, TextProducer], category: Category) -> None:
        try:
            text = item() if callable(item) else item
            if text and text.strip():
                self._deliver(text, category)
        except Exception as e:
            logger.error("Error in delayed announcement", error=str(e))

    def _release(self, generation: int) -> None:
        with self._lock:
            if self._is_current(generation):
                self._task = None
