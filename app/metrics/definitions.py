"""Metric definitions used across the application."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class MetricDefinition:
    """Describe a metric that should exist in the registry."""

    name: str
    metric_type: str
    description: str
    label_names: Tuple[str, ...] = ()


DEFAULT_METRIC_DEFINITIONS: Tuple[MetricDefinition, ...] = (
    MetricDefinition(
        name="queue_joins_total",
        metric_type="counter",
        description="Number of new queue tickets issued.",
    ),
    MetricDefinition(
        name="queue_promotions_total",
        metric_type="counter",
        description="Number of tickets promoted from waiting to active.",
    ),
    MetricDefinition(
        name="queue_releases_total",
        metric_type="counter",
        description="Number of active slots released explicitly.",
    ),
    MetricDefinition(
        name="queue_expirations_total",
        metric_type="counter",
        description="Number of tickets moved to expired, by reason.",
        label_names=("reason",),
    ),
    MetricDefinition(
        name="queue_tick_failures_total",
        metric_type="counter",
        description="Number of failed background ticks.",
        label_names=("task",),
    ),
    MetricDefinition(
        name="queue_tick_duration_seconds",
        metric_type="distribution",
        description="Duration of background ticks in seconds.",
        label_names=("task",),
    ),
    MetricDefinition(
        name="queue_active_tickets",
        metric_type="gauge",
        description="Tickets currently holding an active slot.",
    ),
    MetricDefinition(
        name="queue_waiting_tickets",
        metric_type="gauge",
        description="Tickets currently in the wait-line.",
    ),
)
