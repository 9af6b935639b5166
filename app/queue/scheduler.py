from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from opentelemetry import trace

from app.metrics import MetricsRegistry, metrics_registry as default_metrics_registry

from .service import QueueService

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class PeriodicTask:
    """Run an async callback on a fixed interval until stopped.

    A failing tick is logged and retried on the next interval; the loop only
    ends through ``stop()``.
    """

    def __init__(
        self,
        name: str,
        interval: float,
        callback: Callable[[], Awaitable[object]],
        *,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        self.name = name
        self.interval = interval
        self._callback = callback
        self._metrics = metrics or default_metrics_registry
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name=f"queue-{self.name}")
        logger.info("Started %s task (every %.2fs)", self.name, self.interval)

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Stopped %s task", self.name)

    async def run_once(self) -> bool:
        """Execute one tick; return whether it succeeded."""

        labels = {"task": self.name}
        try:
            with tracer.start_as_current_span(f"queue.{self.name}"), self._metrics.time_distribution(
                "queue_tick_duration_seconds", label_names=("task",), labels=labels
            ):
                await self._callback()
            return True
        except Exception:
            logger.exception("Queue %s tick failed; retrying next interval", self.name)
            self._metrics.counter("queue_tick_failures_total", label_names=("task",)).inc(labels=labels)
            return False

    async def _run(self) -> None:
        while True:
            await self.run_once()
            await asyncio.sleep(self.interval)


class QueueScheduler:
    """Own the promotion and sweep loops of a queue service."""

    def __init__(self, service: QueueService, *, metrics: MetricsRegistry | None = None) -> None:
        config = service.config
        self.promotion = PeriodicTask(
            "promotion", config.promotion_tick_seconds, service.promote, metrics=metrics
        )
        self.sweep = PeriodicTask("sweep", config.sweep_interval_seconds, service.sweep, metrics=metrics)

    def start(self) -> None:
        self.promotion.start()
        self.sweep.start()

    async def stop(self) -> None:
        await self.promotion.stop()
        await self.sweep.stop()
