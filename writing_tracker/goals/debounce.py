"""Per-path debouncing of change events."""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)

ChangeHandler = Callable[[str, Optional[str]], Awaitable[object]]


class ChangeDebouncer:
    """
    Collapses bursts of change events into one handler call per path.

    Every event restarts that path's timer; the handler runs once the path
    has been quiet for the full wait, with the content of the last event.
    Calls for the same path never overlap. Once a call has started it is
    not cancelled.
    """

    def __init__(self, handler: ChangeHandler, wait: float = 1.0):
        """
        Initialize debouncer.

        Args:
            handler: Coroutine function called as handler(path, content)
            wait: Quiet period in seconds
        """
        self.handler = handler
        self.wait = wait
        self._timers: dict[str, asyncio.Task] = {}
        self._latest: dict[str, Optional[str]] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}
        self._running: set[asyncio.Task] = set()

    @property
    def pending(self) -> list[str]:
        """Paths waiting for their quiet period to end."""
        return list(self._timers)

    def submit(self, path: str, content: Optional[str] = None) -> None:
        """Record a change event for path and restart its timer."""
        timer = self._timers.pop(path, None)
        if timer:
            timer.cancel()

        self._latest[path] = content
        self._timers[path] = asyncio.create_task(self._fire_later(path))

    async def _fire_later(self, path: str):
        await asyncio.sleep(self.wait)

        # From here on the call belongs to _running, not to the cancellable timers
        self._timers.pop(path, None)
        task = asyncio.current_task()
        self._running.add(task)
        try:
            await self._invoke(path)
        finally:
            self._running.discard(task)

    async def _invoke(self, path: str):
        content = self._latest.pop(path, None)
        lock = self._locks.setdefault(path, asyncio.Lock())
        self._lock_users[path] = self._lock_users.get(path, 0) + 1

        try:
            async with lock:
                try:
                    await self.handler(path, content)
                except Exception as e:
                    # The next change event for this path retries naturally
                    logger.error(f"Change handler failed for {path}: {e}", exc_info=True)
        finally:
            # Forget the lock once no call for this path is running or waiting
            self._lock_users[path] -= 1
            if not self._lock_users[path]:
                del self._lock_users[path]
                del self._locks[path]

    async def flush(self):
        """Run every pending call now instead of waiting."""
        paths = list(self._timers)
        for path in paths:
            self._timers.pop(path).cancel()

        await asyncio.gather(*(self._invoke(path) for path in paths))
        await self.drain()

    async def drain(self):
        """Wait for calls that have already started."""
        if self._running:
            await asyncio.gather(*self._running, return_exceptions=True)

    def cancel_all(self):
        """Drop every pending call."""
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()
        self._latest.clear()
