"""NotificationSchedulerWorker: fixed-interval loop that dispatches due notifications."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..service import NotificationService, ProcessDueReport

logger = logging.getLogger("notification_engine.scheduling")


class NotificationSchedulerWorker:
    """Background worker that calls :meth:`NotificationService.process_due`.

    Ticks fire every ``interval`` seconds; :meth:`trigger` wakes the loop
    early. Ticks are single-flight: a tick that comes due while the previous
    one is still running is skipped. ``start`` and ``stop`` are idempotent,
    and ``stop`` waits up to ``shutdown_grace`` seconds for an in-flight tick
    before cancelling it.
    """

    def __init__(
        self,
        service: NotificationService,
        interval: float = 60.0,
        shutdown_grace: float = 30.0,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._service = service
        self._interval = interval
        self._shutdown_grace = shutdown_grace
        self._running = False
        self._task: asyncio.Task[None] | None = None
        self._tick_task: asyncio.Task[None] | None = None
        self._lock = asyncio.Lock()
        self._wakeup = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._running

    def trigger(self) -> None:
        """Wake the worker immediately."""
        self._wakeup.set()

    async def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._wakeup.clear()
        self._task = asyncio.create_task(self._run_loop())
        logger.info("Scheduler started (interval=%.1fs)", self._interval)

    async def stop(self) -> None:
        if not self._running and self._task is None:
            return
        self._running = False
        self._wakeup.set()
        if self._task is not None:
            await self._task
            self._task = None

        tick = self._tick_task
        if tick is not None and not tick.done():
            try:
                await asyncio.wait_for(asyncio.shield(tick), timeout=self._shutdown_grace)
            except asyncio.TimeoutError:
                logger.warning(
                    "In-flight tick did not finish within %.1fs; cancelling",
                    self._shutdown_grace,
                )
                tick.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await tick
        self._tick_task = None
        logger.info("Scheduler stopped")

    async def run_once(self) -> ProcessDueReport:
        """Run one tick now and return its report (useful in tests)."""
        async with self._lock:
            return await self._service.process_due()

    async def _run_loop(self) -> None:
        while self._running:
            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(self._wakeup.wait(), timeout=self._interval)
            self._wakeup.clear()
            if not self._running:
                break
            if self._lock.locked() or self._tick_in_flight():
                logger.debug("Previous tick still running; skipping this one")
                continue
            self._tick_task = asyncio.create_task(self._tick())

    def _tick_in_flight(self) -> bool:
        return self._tick_task is not None and not self._tick_task.done()

    async def _tick(self) -> None:
        async with self._lock:
            try:
                report = await self._service.process_due()
            except Exception:
                logger.exception("Scheduler tick failed")
                return
        if report.processed:
            logger.info(
                "Scheduler tick: %d sent, %d failed", report.sent, report.failed
            )
