"""
Output Queue
============

FIFO buffer between producers and a slow sink (typically the clipboard,
which an external reader needs time to pick up).

A long-lived asyncio task drains one item per cycle and then waits a
fixed interval, so bursts of announcements queue up instead of
overwriting each other.

The queue is unbounded by default; losing assistive output is worse than
memory growth under a stuck sink. A ``max_size`` can be configured, in
which case the oldest pending item is dropped to make room.
"""

import asyncio
import threading
from collections import deque
from typing import Optional

from a11y_announcer.output.sinks import Sink
from a11y_announcer.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_DRAIN_INTERVAL = 0.025
DEFAULT_IDLE_INTERVAL = 1 / 60


class OutputQueue:
    """
    Rate-limited FIFO drained into a sink.

    Usage:
        queue = OutputQueue(clipboard_sink)
        await queue.start()
        queue.enqueue("Scene: Courtroom")
        ...
        await queue.stop()
    """

    def __init__(
        self,
        sink: Sink,
        *,
        drain_interval: float = DEFAULT_DRAIN_INTERVAL,
        idle_interval: float = DEFAULT_IDLE_INTERVAL,
        max_size: Optional[int] = None,
    ) -> None:
        """
        Initialize the queue.

        Args:
            sink: Where drained items are delivered.
            drain_interval: Seconds to wait after delivering one item.
            idle_interval: Seconds to wait before re-checking an empty queue.
            max_size: Optional cap; the oldest item is dropped when full.
        """
        if max_size is not None and max_size < 1:
            raise ValueError("max_size must be at least 1")

        self.sink = sink
        self.drain_interval = drain_interval
        self.idle_interval = idle_interval
        self.max_size = max_size

        self._items: deque[str] = deque()
        self._lock = threading.Lock()
        self._task: Optional[asyncio.Task[None]] = None
        self._delivered = 0
        self._dropped = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    @property
    def pending(self) -> list[str]:
        """Snapshot of items waiting to be delivered, oldest first."""
        with self._lock:
            return list(self._items)

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def get_stats(self) -> dict[str, int]:
        """Return queue counters (for logging / debugging)."""
        with self._lock:
            return {
                "pending": len(self._items),
                "delivered": self._delivered,
                "dropped": self._dropped,
            }

    # ------------------------------------------------------------------
    # Producer side
    # ------------------------------------------------------------------

    def enqueue(self, text: str) -> None:
        """Append text for delivery. Blank text is ignored."""
        if not text or not text.strip():
            return

        with self._lock:
            if self.max_size is not None and len(self._items) >= self.max_size:
                dropped = self._items.popleft()
                self._dropped += 1
                logger.warning(
                    "Output queue full, dropping oldest item",
                    max_size=self.max_size,
                    dropped=dropped[:50],
                )
            self._items.append(text)

    def dequeue(self) -> Optional[str]:
        """Pop the oldest pending item, or None when empty."""
        with self._lock:
            if self._items:
                return self._items.popleft()
            return None

    def clear(self) -> int:
        """
        Discard all pending items.

        Items already handed to the sink are not affected.

        Returns:
            Number of items discarded.
        """
        with self._lock:
            count = len(self._items)
            self._items.clear()
        if count:
            logger.debug("Output queue cleared", discarded=count)
        return count

    # ------------------------------------------------------------------
    # Drain side
    # ------------------------------------------------------------------

    def drain_once(self) -> bool:
        """
        Deliver at most one item.

        Returns:
            True if an item was taken off the queue.
        """
        text = self.dequeue()
        if text is None:
            return False

        try:
            self.sink(text)
        except Exception as e:
            logger.error("Error delivering queued output", text=text[:50], error=str(e))
        else:
            with self._lock:
                self._delivered += 1
            logger.debug("Queued output delivered", text=text[:50])
        return True

    async def start(self) -> None:
        """Start the drain loop on the running event loop."""
        if self.is_running:
            return
        self._task = asyncio.get_running_loop().create_task(
            self._drain_loop(), name="output-queue-drain"
        )
        logger.info(
            "Output queue started",
            drain_interval=self.drain_interval,
            max_size=self.max_size,
        )

    async def stop(self) -> None:
        """Stop the drain loop. Pending items stay queued."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Output queue stopped", pending=len(self))

    async def _drain_loop(self) -> None:
        while True:
            if self.drain_once():
                await asyncio.sleep(self.drain_interval)
            else:
                await asyncio.sleep(self.idle_interval)
