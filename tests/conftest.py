"""Shared fixtures for WASM UDF tests."""

from __future__ import annotations

import pytest

from wasm_udf.catalog import CatalogHandle
from wasm_udf.runtime import WasmRuntime

_TEST_FUEL_PER_CALL = 1_000_000


@pytest.fixture
def wasm_runtime() -> WasmRuntime:
    """Provide a runtime with a small per-call fuel budget.

    Returns
    -------
    WasmRuntime
        Runtime for tests.
    """
    return WasmRuntime(fuel_per_call=_TEST_FUEL_PER_CALL)


@pytest.fixture
def catalog_handle(wasm_runtime: WasmRuntime) -> CatalogHandle:
    """Provide an empty catalog handle bound to ``wasm_runtime``.

    Returns
    -------
    CatalogHandle
        Handle holding the empty snapshot.
    """
    return CatalogHandle(wasm_runtime)

