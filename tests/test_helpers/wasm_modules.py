"""WAT fixtures for WASM UDF tests."""

from __future__ import annotations

from functools import cache

import wasmtime

from wasm_udf.metadata import WasmFunctionRow

DOUBLE_I64 = """
(module
  (func (export "udf_main") (param i64) (result i64)
    local.get 0
    i64.const 2
    i64.mul))
"""

ADD_F64 = """
(module
  (func (export "udf_main") (param f64 f64) (result f64)
    local.get 0
    local.get 1
    f64.add))
"""

SCALE_MIXED = """
(module
  (func (export "udf_main") (param i64 f64) (result f64)
    local.get 0
    f64.convert_i64_s
    local.get 1
    f64.mul))
"""

CONST_F64 = """
(module
  (func (export "udf_main") (result f64)
    f64.const 3.5))
"""

TRAP_I64 = """
(module
  (func (export "udf_main") (param i64) (result i64)
    unreachable))
"""

LOOP_I64 = """
(module
  (func (export "udf_main") (param i64) (result i64)
    (loop $spin
      br $spin)
    i64.const 0))
"""

VOID_RESULT = """
(module
  (func (export "udf_main") (param i64)))
"""

MULTI_RESULT = """
(module
  (func (export "udf_main") (param i64) (result i64 i64)
    local.get 0
    local.get 0))
"""

I32_PARAM = """
(module
  (func (export "udf_main") (param i32) (result i64)
    i64.const 1))
"""

I32_RESULT = """
(module
  (func (export "udf_main") (param i64) (result i32)
    i32.const 1))
"""

NO_ENTRY = """
(module
  (func (export "other_fn") (result i64)
    i64.const 1))
"""

WITH_IMPORT = """
(module
  (import "env" "host_fn" (func $host))
  (func (export "udf_main") (param i64) (result i64)
    call $host
    local.get 0))
"""

START_TRAP = """
(module
  (func $boot
    unreachable)
  (start $boot)
  (func (export "udf_main") (param i64) (result i64)
    local.get 0))
"""

CUSTOM_ENTRY = """
(module
  (func (export "compute") (param i64) (result i64)
    local.get 0
    i64.const 1
    i64.add))
"""

INVALID_BYTECODE = b"\x00asm\x01\x00\x00\x00\xff\xff"


@cache
def wasm_bytes(wat: str) -> bytes:
    """Compile WAT text to module bytecode.

    Returns
    -------
    bytes
        Binary module.
    """
    return bytes(wasmtime.wat2wasm(wat))


def function_row(
    name: str,
    wat: str,
    *,
    namespace: str = "main",
    function_id: int | None = None,
    return_code: str | None = None,
    params_code: str | None = None,
) -> WasmFunctionRow:
    """Build a metadata row for a WAT fixture.

    Returns
    -------
    WasmFunctionRow
        Row carrying compiled bytecode.
    """
    return WasmFunctionRow(
        id=function_id,
        namespace=namespace,
        name=name,
        bytecode=wasm_bytes(wat),
        return_code=return_code,
        params_code=params_code,
    )


def raw_row(name: str, bytecode: bytes, *, namespace: str = "main") -> WasmFunctionRow:
    """Build a metadata row from raw bytes.

    Returns
    -------
    WasmFunctionRow
        Row carrying ``bytecode`` unchanged.
    """
    return WasmFunctionRow(namespace=namespace, name=name, bytecode=bytecode)
