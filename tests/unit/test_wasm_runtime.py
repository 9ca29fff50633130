"""Tests for the wasmtime runtime binding."""

from __future__ import annotations

import pytest

from tests.test_helpers.wasm_modules import DOUBLE_I64, LOOP_I64, NO_ENTRY, wasm_bytes
from wasm_udf.errors import EntryNotFoundError, ExecutionFaultError, InvalidBytecodeError
from wasm_udf.runtime import WasmRuntime


def test_runtime_rejects_non_positive_fuel() -> None:
    """Require a positive fuel budget or None."""
    with pytest.raises(ValueError, match="fuel_per_call"):
        WasmRuntime(fuel_per_call=0)


def test_compile_rejects_non_bytes() -> None:
    """Reject bytecode that is not a bytes-like object."""
    with pytest.raises(InvalidBytecodeError):
        WasmRuntime().compile("(module)")  # type: ignore[arg-type]


def test_compiled_module_is_reusable(wasm_runtime: WasmRuntime) -> None:
    """Instantiate one compiled module many times."""
    compiled = wasm_runtime.compile(wasm_bytes(DOUBLE_I64))
    assert [compiled.instantiate().call([value]) for value in (1, 2, 3)] == [2, 4, 6]


def test_missing_export_type(wasm_runtime: WasmRuntime) -> None:
    """Raise EntryNotFoundError for an absent export."""
    compiled = wasm_runtime.compile(wasm_bytes(NO_ENTRY))
    with pytest.raises(EntryNotFoundError):
        compiled.export_function_type("udf_main")
    with pytest.raises(EntryNotFoundError):
        compiled.instantiate()


def test_each_call_gets_fresh_fuel() -> None:
    """Charge fuel per call, not per module."""
    runtime = WasmRuntime(fuel_per_call=10_000)
    compiled = runtime.compile(wasm_bytes(DOUBLE_I64))
    for value in range(50):
        assert compiled.instantiate().call([value]) == value * 2
    spin = runtime.compile(wasm_bytes(LOOP_I64))
    with pytest.raises(ExecutionFaultError) as excinfo:
        spin.instantiate().call([1])
    assert excinfo.value.reason == "timeout"
