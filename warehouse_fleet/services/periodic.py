"""Cancellable, non-overlapping periodic execution on the running event loop."""

from __future__ import annotations

import asyncio
from contextlib import suppress
from typing import Awaitable, Callable, Optional

import structlog

logger = structlog.get_logger(__name__)

PeriodicCallback = Callable[[], Awaitable[object]]


class PeriodicTask:
    """Runs ``callback`` every ``interval`` seconds until cancelled.

    The next firing is only awaited once the previous call has returned, so
    a slow body never overlaps itself. Firings missed while the body was
    running are dropped rather than replayed. Exceptions raised by the body
    are logged and the schedule keeps going.
    """

    def __init__(
        self,
        name: str,
        interval: float,
        callback: PeriodicCallback,
        run_immediately: bool = False,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.name = name
        self.interval = interval
        self.callback = callback
        self.run_immediately = run_immediately
        self.runs = 0
        self._task: Optional[asyncio.Task] = None
        self._armed = False

    @property
    def running(self) -> bool:
        return self._armed and self._task is not None and not self._task.done()

    def start(self) -> None:
        """Arm the schedule; an already armed schedule is cancelled first."""

        self.cancel()
        self._task = asyncio.get_running_loop().create_task(self._run(), name=f"periodic:{self.name}")
        self._armed = True
        logger.debug("periodic_task_armed", task=self.name, interval=self.interval)

    def cancel(self) -> None:
        """Request cancellation without waiting; no new firing starts after this returns."""

        self._armed = False
        if self._task is not None and not self._task.done():
            self._task.cancel()
            logger.debug("periodic_task_cancelled", task=self.name)

    async def stop(self) -> None:
        """Cancel and wait for the task to unwind."""

        self.cancel()
        task, self._task = self._task, None
        if task is None:
            return
        with suppress(asyncio.CancelledError):
            await task

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        next_at = loop.time() + (0 if self.run_immediately else self.interval)
        while True:
            delay = next_at - loop.time()
            if delay > 0:
                await asyncio.sleep(delay)
            try:
                await self.callback()
            except asyncio.CancelledError:
                raise
            except Exception:  # pragma: no cover - runtime guard
                logger.exception("periodic_task_failed", task=self.name)
            self.runs += 1
            now = loop.time()
            next_at += self.interval
            if next_at <= now:
                skipped = int((now - next_at) // self.interval) + 1
                next_at += skipped * self.interval
