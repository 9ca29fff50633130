"""Canonical OpenTelemetry instrumentation scopes for wasm-udf."""

from __future__ import annotations

from obs.otel.constants import ScopeName

SCOPE_ROOT = ScopeName.ROOT
SCOPE_CATALOG = ScopeName.CATALOG
SCOPE_STORAGE = ScopeName.STORAGE

__all__ = [
    "SCOPE_CATALOG",
    "SCOPE_ROOT",
    "SCOPE_STORAGE",
]
