"""Metrics catalog and helpers for wasm-udf telemetry."""

from __future__ import annotations

import threading
from dataclasses import dataclass

from opentelemetry import metrics

from obs.otel.attributes import normalize_attributes
from obs.otel.constants import AttributeName, MetricName
from obs.otel.scopes import SCOPE_ROOT
from obs.otel.tracing import instrumentation_version


@dataclass
class MetricsRegistry:
    """Registry for wasm-udf metric instruments."""

    reload_count: metrics.Counter
    reload_duration: metrics.Histogram
    invoke_fault_count: metrics.Counter


_REGISTRY_CACHE: dict[str, MetricsRegistry | None] = {"value": None}
_REGISTRY_LOCK = threading.Lock()


def _registry() -> MetricsRegistry:
    cached = _REGISTRY_CACHE["value"]
    if cached is not None:
        return cached
    with _REGISTRY_LOCK:
        cached = _REGISTRY_CACHE["value"]
        if cached is not None:
            return cached
        meter = metrics.get_meter(SCOPE_ROOT, instrumentation_version())
        registry = MetricsRegistry(
            reload_count=meter.create_counter(
                MetricName.RELOAD_COUNT,
                unit="1",
                description="Catalog reload attempts by outcome.",
            ),
            reload_duration=meter.create_histogram(
                MetricName.RELOAD_DURATION,
                unit="s",
                description="Catalog reload duration (seconds).",
            ),
            invoke_fault_count=meter.create_counter(
                MetricName.INVOKE_FAULT_COUNT,
                unit="1",
                description="UDF invocations that ended in an execution fault.",
            ),
        )
        _REGISTRY_CACHE["value"] = registry
        return registry


def record_reload(status: str, duration_s: float) -> None:
    """Record a catalog reload outcome and its duration."""
    registry = _registry()
    attrs = normalize_attributes({AttributeName.STATUS: status})
    registry.reload_count.add(1, attrs)
    registry.reload_duration.record(duration_s, attrs)


def record_invoke_fault(reason: str, *, function_name: str | None = None) -> None:
    """Increment the invocation fault counter."""
    registry = _registry()
    registry.invoke_fault_count.add(
        1,
        normalize_attributes(
            {AttributeName.REASON: reason, AttributeName.FUNCTION_NAME: function_name}
        ),
    )


__all__ = [
    "MetricsRegistry",
    "record_invoke_fault",
    "record_reload",
]
