"""Fixed-period asyncio ticker."""
from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)

TickCallback = Callable[[], Awaitable[None]]


class PeriodicTask:
    """Run ``callback`` every ``interval`` seconds on the running loop.

    Ticks are scheduled against the loop clock, so a slow callback does not
    drift the schedule; ticks missed while a callback overran are skipped
    rather than replayed. Callback errors are logged and the schedule goes on.
    """

    def __init__(
        self,
        interval: float,
        callback: TickCallback,
        *,
        name: Optional[str] = None,
        immediate: bool = False,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.interval = interval
        self.name = name or getattr(callback, "__name__", "periodic")
        self.immediate = immediate
        self.ticks = 0
        self._callback = callback
        self._stop_event = asyncio.Event()
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done() and not self._stop_event.is_set()

    def start(self) -> None:
        if self._task is not None:
            raise RuntimeError(f"periodic task {self.name!r} already started")
        self._task = asyncio.get_running_loop().create_task(self._run(), name=self.name)

    def cancel(self) -> None:
        """Stop future ticks immediately, including one currently in flight."""
        self._stop_event.set()
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def aclose(self) -> None:
        self.cancel()
        if self._task is None:
            return
        with contextlib.suppress(asyncio.CancelledError):
            await self._task

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        next_tick = loop.time() if self.immediate else loop.time() + self.interval
        while not self._stop_event.is_set():
            delay = next_tick - loop.time()
            if delay > 0 and await self._wait_for_stop(delay):
                break
            self.ticks += 1
            try:
                await self._callback()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Periodic task %s tick failed", self.name)
            next_tick += self.interval
            now = loop.time()
            if next_tick < now:
                missed = int((now - next_tick) // self.interval) + 1
                next_tick += missed * self.interval

    async def _wait_for_stop(self, timeout: float) -> bool:
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            return False
        return True


__all__ = ["PeriodicTask", "TickCallback"]
