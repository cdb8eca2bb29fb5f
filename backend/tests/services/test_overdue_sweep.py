"""Overdue Sweep Job - schedule, failure tolerance, start/stop.

Invariants:
    - First run waits until the next midnight; a daily job re-aims at midnight
      after each run, other intervals repeat as a fixed delay
    - A failing sweep is logged and the loop keeps going
    - start() is idempotent; stop() cancels the task
"""

import asyncio
from datetime import datetime, timedelta

import pytest

from library.core.errors import DatabaseError
from library.services.overdue_sweep import OverdueSweepJob, seconds_until_next_midnight

NOW = datetime(2024, 3, 10, 22, 30)


class _FakeLoanService:
    def __init__(self, failures: int = 0):
        self.calls = 0
        self._failures = failures

    async def sweep_overdue(self) -> int:
        self.calls += 1
        if self.calls <= self._failures:
            raise DatabaseError("Connection refused", "acquire")
        return 2


class _FakeSleep:
    """Records requested delays; parks forever after `limit` calls."""

    def __init__(self, limit: int):
        self.delays: list[float] = []
        self._limit = limit

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        if len(self.delays) > self._limit:
            await asyncio.Event().wait()


async def _until(predicate) -> None:
    for _ in range(100):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached")


def test_seconds_until_next_midnight():
    assert seconds_until_next_midnight(NOW) == 90 * 60
    assert seconds_until_next_midnight(datetime(2024, 3, 10)) == 24 * 3600


def test_interval_must_be_positive():
    with pytest.raises(ValueError):
        OverdueSweepJob(_FakeLoanService(), interval=timedelta(0))


async def test_run_once_returns_transitioned_count():
    job = OverdueSweepJob(_FakeLoanService())
    assert await job.run_once() == 2


async def test_schedule_first_midnight_then_interval():
    service = _FakeLoanService()
    sleep = _FakeSleep(limit=2)
    job = OverdueSweepJob(
        service, interval=timedelta(hours=6), now=lambda: NOW, sleep=sleep,
    )

    job.start()
    await _until(lambda: len(sleep.delays) == 3)

    assert sleep.delays == [90 * 60, 6 * 3600, 6 * 3600]
    assert service.calls == 2
    await job.stop()
    assert not job.is_running


async def test_failed_sweep_does_not_stop_schedule():
    service = _FakeLoanService(failures=1)
    sleep = _FakeSleep(limit=2)
    job = OverdueSweepJob(service, now=lambda: NOW, sleep=sleep)

    job.start()
    await _until(lambda: service.calls == 2)

    assert job.is_running
    await job.stop()


async def test_start_is_idempotent_and_stop_without_start_is_noop():
    job = OverdueSweepJob(_FakeLoanService(), now=lambda: NOW, sleep=_FakeSleep(limit=0))
    await job.stop()

    job.start()
    first_task = job._task
    job.start()

    assert job._task is first_task
    await job.stop()
    assert job._task is None


async def test_daily_job_reaims_at_local_midnight_after_each_run():
    service = _FakeLoanService()
    sleep = _FakeSleep(limit=2)
    clock_readings = iter([
        NOW,
        datetime(2024, 3, 11, 0, 2),
        datetime(2024, 3, 12, 0, 0, 30),
    ])
    job = OverdueSweepJob(service, now=lambda: next(clock_readings), sleep=sleep)

    job.start()
    await _until(lambda: len(sleep.delays) == 3)

    assert sleep.delays == [90 * 60, 24 * 3600 - 120, 24 * 3600 - 30]
    await job.stop()


async def test_daily_job_woken_early_skips_to_following_midnight():
    sleep = _FakeSleep(limit=1)
    clock_readings = iter([NOW, datetime(2024, 3, 10, 23, 59, 59)])
    job = OverdueSweepJob(
        _FakeLoanService(), now=lambda: next(clock_readings), sleep=sleep,
    )

    job.start()
    await _until(lambda: len(sleep.delays) == 2)

    assert sleep.delays == [90 * 60, 1 + 24 * 3600]
    await job.stop()
