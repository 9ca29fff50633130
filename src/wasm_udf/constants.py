"""Shared constants for WASM UDF integration."""

from __future__ import annotations

ENTRY_POINT_NAME = "udf_main"

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1

# Fuel is consumed roughly once per executed WASM instruction.
DEFAULT_FUEL_PER_CALL = 50_000_000

UDF_VOLATILITY = "immutable"
BYTECODE_SUFFIX = ".wasm"

ENV_ENTRY_POINT = "WASM_UDF_ENTRY_POINT"
ENV_FUEL_PER_CALL = "WASM_UDF_FUEL_PER_CALL"
ENV_STORE_DIR = "WASM_UDF_STORE_DIR"
ENV_PERSIST_ON_REGISTER = "WASM_UDF_PERSIST_ON_REGISTER"

__all__ = [
    "BYTECODE_SUFFIX",
    "DEFAULT_FUEL_PER_CALL",
    "ENTRY_POINT_NAME",
    "ENV_ENTRY_POINT",
    "ENV_FUEL_PER_CALL",
    "ENV_PERSIST_ON_REGISTER",
    "ENV_STORE_DIR",
    "INT64_MAX",
    "INT64_MIN",
    "UDF_VOLATILITY",
]
