"""Canonical OpenTelemetry constants for wasm-udf."""

from __future__ import annotations

from enum import StrEnum


class MetricName(StrEnum):
    """Canonical metric names."""

    RELOAD_COUNT = "wasm_udf.reload.count"
    RELOAD_DURATION = "wasm_udf.reload.duration"
    INVOKE_FAULT_COUNT = "wasm_udf.invoke.fault.count"


class AttributeName(StrEnum):
    """Canonical attribute names."""

    STATUS = "status"
    REASON = "reason"
    ROW_COUNT = "wasm_udf.row_count"
    GENERATION = "wasm_udf.generation"
    FAILURE_COUNT = "wasm_udf.failure_count"
    FUNCTION_ID = "wasm_udf.function_id"
    FUNCTION_NAME = "wasm_udf.function_name"


class ScopeName(StrEnum):
    """Canonical instrumentation scope names."""

    ROOT = "wasm_udf"
    CATALOG = "wasm_udf.catalog"
    STORAGE = "wasm_udf.storage"


__all__ = ["AttributeName", "MetricName", "ScopeName"]
