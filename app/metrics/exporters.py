"""Adapters for exporting metrics to external monitoring systems."""
from __future__ import annotations

import logging

from .base import CounterMetric, GaugeMetric
from .registry import MetricsRegistry

logger = logging.getLogger(__name__)


class PrometheusExporter:
    """Generate Prometheus compatible text format output."""

    content_type = "text/plain; version=0.0.4; charset=utf-8"

    def __init__(self, registry: MetricsRegistry) -> None:
        self.registry = registry

    def build_payload(self) -> str:
        lines: list[str] = []
        for metric in self.registry.metrics():
            if isinstance(metric, CounterMetric):
                metric_type = "counter"
            elif isinstance(metric, GaugeMetric):
                metric_type = "gauge"
            else:
                metric_type = "summary"
            lines.append(f"# HELP {metric.name} {metric.description}")
            lines.append(f"# TYPE {metric.name} {metric_type}")
            for labels, values in metric.snapshot().items():
                label_text = ""
                if labels:
                    label_pairs = [
                        f"{name}=\"{value}\"" for name, value in zip(metric.label_names, labels)
                    ]
                    label_text = "{" + ",".join(label_pairs) + "}"  # noqa: P103
                if "value" in values:
                    lines.append(f"{metric.name}{label_text} {values['value']}")
                else:
                    lines.append(f"{metric.name}_count{label_text} {values['count']}")
                    lines.append(f"{metric.name}_sum{label_text} {values['sum']}")
        return "\n".join(lines) + ("\n" if lines else "")

    def export(self) -> str:
        payload = self.build_payload()
        logger.debug("Generated metrics payload with %d line(s)", payload.count("\n"))
        return payload
