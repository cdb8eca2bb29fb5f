"""Overdue Sweep Job - periodic asyncio task that expires past-due loans.

Invariants:
    - Every run goes through LoanService.sweep_overdue(), the same transactional
      path as a manual sweep
    - First run fires at the next local midnight; a daily job re-aims at the next
      local midnight after every run, any other interval repeats as a fixed delay
    - A failed run is logged with its traceback and the schedule continues
    - start() is a no-op while running; stop() cancels and waits for the task

Design Decisions:
    - Clock and sleep are injectable so the schedule can be driven in tests
"""

import asyncio
import contextlib
import logging
from datetime import datetime, time, timedelta
from typing import Awaitable, Callable

from library.services.loan_service import LoanService

logger = logging.getLogger(__name__)

DAILY = timedelta(days=1)
DEFAULT_INTERVAL = DAILY


def seconds_until_next_midnight(now: datetime) -> float:
    """Seconds from `now` to the start of the following day (same tzinfo)."""
    midnight = datetime.combine(
        now.date() + timedelta(days=1), time.min, tzinfo=now.tzinfo,
    )
    return (midnight - now).total_seconds()


class OverdueSweepJob:
    """Background scheduler for LoanService.sweep_overdue()."""

    def __init__(
        self,
        loan_service: LoanService,
        interval: timedelta = DEFAULT_INTERVAL,
        now: Callable[[], datetime] = datetime.now,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if interval <= timedelta(0):
            raise ValueError("interval must be positive")
        self._loan_service = loan_service
        self._interval = interval
        self._now = now
        self._sleep = sleep
        self._task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> int:
        """Run one sweep immediately."""
        transitioned = await self._loan_service.sweep_overdue()
        logger.info(
            "Scheduled overdue sweep finished",
            extra={"transitioned": transitioned},
        )
        return transitioned

    def start(self) -> None:
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run(), name="overdue-sweep")
        logger.info(f"Overdue sweep scheduled every {self._interval}")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Overdue sweep stopped")

    async def _run(self) -> None:
        delay = seconds_until_next_midnight(self._now())
        while True:
            await self._sleep(delay)
            try:
                await self.run_once()
            except Exception:
                logger.error("Scheduled overdue sweep failed", exc_info=True)
            delay = self._next_delay()

    def _next_delay(self) -> float:
        if self._interval != DAILY:
            return self._interval.total_seconds()
        delay = seconds_until_next_midnight(self._now())
        # woke a little before midnight: aim at the one after
        if delay < DAILY.total_seconds() / 2:
            delay += DAILY.total_seconds()
        return delay
