"""OpenTelemetry helpers for wasm-udf observability."""

from __future__ import annotations

from obs.otel.metrics import record_invoke_fault, record_reload
from obs.otel.scopes import SCOPE_CATALOG, SCOPE_ROOT, SCOPE_STORAGE
from obs.otel.tracing import get_tracer, record_exception, set_span_attributes, stage_span

__all__ = [
    "SCOPE_CATALOG",
    "SCOPE_ROOT",
    "SCOPE_STORAGE",
    "get_tracer",
    "record_exception",
    "record_invoke_fault",
    "record_reload",
    "set_span_attributes",
    "stage_span",
]
