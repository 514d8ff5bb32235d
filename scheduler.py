# scheduler.py
"""Timer ownership for the simulated feeds.

One asyncio task per recurring feed plus a set of one-shot timer handles.
The scheduler owns the timers but none of the feed state: a feed is just a
``tick`` callable. ``stop_all()`` cancels everything and is safe to call any
number of times.
"""

import asyncio
import logging
from typing import Callable, Dict, Optional, Set, Tuple

logger = logging.getLogger(__name__)

# Returning False from a tick ends that feed's loop
Tick = Callable[[], Optional[bool]]


class FeedScheduler:
    def __init__(self):
        self._feeds: Dict[str, Tuple[float, Tick]] = {}
        self._tasks: Dict[str, asyncio.Task] = {}
        self._timers: Set[asyncio.TimerHandle] = set()

    def register(self, feed_id: str, interval_s: float, tick: Tick) -> None:
        if interval_s <= 0:
            raise ValueError(f"interval for {feed_id!r} must be > 0")
        self._feeds[feed_id] = (interval_s, tick)

    def _lookup(self, feed_id: str) -> Tuple[float, Tick]:
        try:
            return self._feeds[feed_id]
        except KeyError:
            raise KeyError(f"unknown feed {feed_id!r}") from None

    def running(self, feed_id: str) -> bool:
        self._lookup(feed_id)
        task = self._tasks.get(feed_id)
        return task is not None and not task.done()

    def start(self, feed_id: str) -> bool:
        """Start the feed's recurring loop. Returns False if it is already running."""
        interval_s, tick = self._lookup(feed_id)
        if self.running(feed_id):
            return False
        loop = asyncio.get_running_loop()
        self._tasks[feed_id] = loop.create_task(self._run(feed_id, interval_s, tick), name=f"feed:{feed_id}")
        logger.debug("feed %s started (every %.3fs)", feed_id, interval_s)
        return True

    async def _run(self, feed_id: str, interval_s: float, tick: Tick) -> None:
        try:
            while True:
                await asyncio.sleep(interval_s)
                try:
                    keep_going = tick()
                except Exception:
                    logger.exception("feed %s tick failed; stopping feed", feed_id)
                    raise
                if keep_going is False:
                    break
        finally:
            if self._tasks.get(feed_id) is asyncio.current_task():
                del self._tasks[feed_id]

    def stop(self, feed_id: str) -> bool:
        """Cancel the feed's loop. Returns False if it was not running."""
        self._lookup(feed_id)
        task = self._tasks.pop(feed_id, None)
        if task is None or task.done():
            return False
        task.cancel()
        logger.debug("feed %s stopped", feed_id)
        return True

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        """Schedule a tracked one-shot callback."""
        loop = asyncio.get_running_loop()
        handle: Optional[asyncio.TimerHandle] = None

        def fire():
            self._timers.discard(handle)
            callback()

        handle = loop.call_later(delay_s, fire)
        self._timers.add(handle)
        return handle

    def cancel(self, handle: Optional[asyncio.TimerHandle]) -> None:
        if handle is None:
            return
        handle.cancel()
        self._timers.discard(handle)

    @property
    def pending(self) -> int:
        return len(self._timers)

    def cancel_pending(self) -> None:
        for handle in list(self._timers):
            handle.cancel()
        self._timers.clear()

    def stop_all(self) -> None:
        for feed_id in list(self._tasks):
            self.stop(feed_id)
        self.cancel_pending()

    async def aclose(self) -> None:
        """``stop_all()`` and wait for the cancelled loops to unwind."""
        tasks = list(self._tasks.values())
        self.stop_all()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
