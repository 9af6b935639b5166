from datetime import datetime, timedelta, timezone

import pytest

from app.metrics import MetricsRegistry, register_default_metrics
from app.queue import QueueConfig, QueueService


class ManualClock:
    """Clock the tests move by hand."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 2, 2, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> datetime:
        self.now += timedelta(seconds=seconds)
        return self.now


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def metrics() -> MetricsRegistry:
    registry = MetricsRegistry()
    register_default_metrics(registry)
    return registry


@pytest.fixture
def make_service(clock, metrics):
    def factory(**overrides) -> QueueService:
        config = QueueConfig(**overrides)
        return QueueService(config, clock=clock, metrics=metrics)

    return factory
