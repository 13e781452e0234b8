"""Tests for the scheduling loop."""

import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from notification_engine.domain import NotificationType, ScheduleRequest
from notification_engine.scheduling import NotificationSchedulerWorker
from notification_engine.service import ProcessDueReport


def _service(side_effect=None):
    service = AsyncMock()
    service.process_due = AsyncMock(
        return_value=ProcessDueReport(), side_effect=side_effect
    )
    return service


@pytest.mark.asyncio
async def test_run_once_dispatches_due(service, slack_sender, clock):
    """Test a manual tick sends what is due."""
    await service.schedule(
        ScheduleRequest(
            type=NotificationType.SLACK,
            title="t",
            message="m",
            recipient="team",
            scheduled_at=clock.now() - timedelta(seconds=1),
        )
    )
    worker = NotificationSchedulerWorker(service, interval=60)

    report = await worker.run_once()

    assert report.sent == 1
    slack_sender.assert_sent("team")


@pytest.mark.asyncio
async def test_loop_ticks_on_interval():
    """Test the loop calls process_due repeatedly."""
    service = _service()
    worker = NotificationSchedulerWorker(service, interval=0.01)

    await worker.start()
    await asyncio.sleep(0.1)
    await worker.stop()

    assert service.process_due.await_count >= 2


@pytest.mark.asyncio
async def test_start_and_stop_are_idempotent():
    """Test repeated start/stop calls are harmless."""
    service = _service()
    worker = NotificationSchedulerWorker(service, interval=60)

    await worker.stop()
    await worker.start()
    await worker.start()
    assert worker.running
    await worker.stop()
    await worker.stop()
    assert not worker.running


@pytest.mark.asyncio
async def test_no_tick_after_stop():
    """Test stop() prevents any further tick."""
    service = _service()
    worker = NotificationSchedulerWorker(service, interval=0.01)

    await worker.start()
    await asyncio.sleep(0.05)
    await worker.stop()
    calls = service.process_due.await_count
    await asyncio.sleep(0.05)

    assert service.process_due.await_count == calls


@pytest.mark.asyncio
async def test_tick_errors_do_not_stop_the_loop():
    """Test an exception in one tick is logged and the loop keeps going."""
    service = _service(side_effect=[RuntimeError("db down"), ProcessDueReport()] * 20)
    worker = NotificationSchedulerWorker(service, interval=0.01)

    await worker.start()
    await asyncio.sleep(0.1)
    await worker.stop()

    assert service.process_due.await_count >= 2


@pytest.mark.asyncio
async def test_ticks_are_single_flight():
    """Test overlapping ticks are skipped while one is still running."""
    release = asyncio.Event()
    active = 0
    peak = 0

    async def slow_pass():
        nonlocal active, peak
        active += 1
        peak = max(peak, active)
        await release.wait()
        active -= 1
        return ProcessDueReport()

    service = _service(side_effect=slow_pass)
    worker = NotificationSchedulerWorker(service, interval=0.01)

    await worker.start()
    await asyncio.sleep(0.1)
    release.set()
    await worker.stop()

    assert peak == 1
    assert service.process_due.await_count == 1


@pytest.mark.asyncio
async def test_stop_drains_in_flight_tick():
    """Test stop waits for a running tick within the grace period."""
    finished = asyncio.Event()

    async def pass_():
        await asyncio.sleep(0.05)
        finished.set()
        return ProcessDueReport()

    service = _service(side_effect=pass_)
    worker = NotificationSchedulerWorker(service, interval=0.01, shutdown_grace=1)

    await worker.start()
    while service.process_due.await_count == 0:
        await asyncio.sleep(0.005)
    await worker.stop()

    assert finished.is_set()


@pytest.mark.asyncio
async def test_stop_cancels_tick_after_grace():
    """Test a tick that outlives the grace period is cancelled."""
    cancelled = asyncio.Event()

    async def hang():
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.set()
            raise
        return ProcessDueReport()

    service = _service(side_effect=hang)
    worker = NotificationSchedulerWorker(service, interval=0.01, shutdown_grace=0.05)

    await worker.start()
    while service.process_due.await_count == 0:
        await asyncio.sleep(0.005)
    await worker.stop()

    assert cancelled.is_set()


def test_interval_must_be_positive():
    """Test a zero interval is rejected."""
    with pytest.raises(ValueError):
        NotificationSchedulerWorker(_service(), interval=0)
