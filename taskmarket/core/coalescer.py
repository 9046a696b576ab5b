"""Latest-wins event coalescing on the running event loop."""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Set

logger = logging.getLogger(__name__)


class AuthEventCoalescer:
    """Buffers incoming events and flushes only the most recent one.

    Every push cancels the pending flush and re-arms a timer of ``delay``
    seconds, so a burst of events inside one window yields a single call to
    ``handler`` with the last event. Must be used from the loop thread; use
    ``push_threadsafe`` from anywhere else.
    """

    def __init__(
        self,
        handler: Callable[..., Awaitable[Any]],
        delay: float,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        self.handler = handler
        self.delay = delay
        self._loop = loop
        self._timer: Optional[asyncio.TimerHandle] = None
        self._pending: Optional[tuple] = None
        self._tasks: Set[asyncio.Task] = set()
        self._closed = False

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    @property
    def has_pending(self) -> bool:
        return self._timer is not None

    def push(self, *event: Any) -> None:
        if self._closed:
            return
        self._pending = event
        if self._timer is not None:
            self._timer.cancel()
        self._timer = self.loop.call_later(self.delay, self._flush)

    def push_threadsafe(self, *event: Any) -> None:
        if self._closed:
            return
        self.loop.call_soon_threadsafe(self.push, *event)

    def _flush(self) -> None:
        self._timer = None
        event, self._pending = self._pending, None
        if event is None or self._closed:
            return
        task = self.loop.create_task(self._run(event))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self, event: tuple) -> None:
        try:
            await self.handler(*event)
        except Exception as e:
            logger.error(f"Error handling coalesced event: {e}")

    def cancel(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._pending = None

    async def drain(self) -> None:
        """Wait for flushes that already started."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def close(self) -> None:
        self.cancel()
        self._closed = True
