import asyncio
from unittest.mock import AsyncMock

import pytest

from app.queue.scheduler import PeriodicTask, QueueScheduler
from app.queue.state import TicketState


@pytest.mark.asyncio
async def test_failed_tick_is_logged_counted_and_not_raised(metrics, caplog):
    callback = AsyncMock(side_effect=RuntimeError("boom"))
    task = PeriodicTask("promotion", 1.0, callback, metrics=metrics)

    with caplog.at_level("ERROR", logger="app.queue.scheduler"):
        assert await task.run_once() is False

    assert "promotion tick failed" in caplog.text
    assert metrics.counter("queue_tick_failures_total").value(labels={"task": "promotion"}) == 1
    snapshot = metrics.distribution("queue_tick_duration_seconds").snapshot()
    assert snapshot[("promotion",)]["count"] == 1.0


@pytest.mark.asyncio
async def test_loop_keeps_running_after_failures(metrics):
    calls = 0

    async def flaky():
        nonlocal calls
        calls += 1
        if calls == 1:
            raise RuntimeError("first tick fails")

    task = PeriodicTask("sweep", 0.01, flaky, metrics=metrics)
    task.start()
    try:
        for _ in range(100):
            if calls >= 3:
                break
            await asyncio.sleep(0.01)
    finally:
        await task.stop()

    assert calls >= 3
    assert not task.running


@pytest.mark.asyncio
async def test_queue_scheduler_drives_promotion_and_sweep(make_service, metrics):
    service = make_service(capacity=1, promotion_tick_seconds=0.01, sweep_interval_seconds=0.01)
    holder = await service.join("student-a")
    waiting = await service.join("student-b")

    async with service._lock:
        service.store.transition(holder.token, TicketState.EXPIRED)

    scheduler = QueueScheduler(service, metrics=metrics)
    scheduler.start()
    try:
        for _ in range(100):
            if service.store.count_active() == 1:
                break
            await asyncio.sleep(0.01)
    finally:
        await scheduler.stop()

    assert (await service.status(waiting.token)).active is True
    assert not scheduler.promotion.running
    assert not scheduler.sweep.running
