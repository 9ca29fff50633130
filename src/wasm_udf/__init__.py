"""WebAssembly scalar UDF catalog, signature codec, and invocation adapter."""

from __future__ import annotations

from wasm_udf.binding import (
    BoundFunction,
    ColumnRef,
    FloatFunction,
    IntegerFunction,
    Literal,
    resolve_function,
)
from wasm_udf.catalog import CatalogEntry, CatalogHandle, CatalogSnapshot, build_snapshot
from wasm_udf.errors import (
    CatalogReloadError,
    DuplicateFunctionError,
    EntryNotFoundError,
    ExecutionFaultError,
    FunctionNotFoundError,
    IncorrectParameterCountError,
    InvalidBytecodeError,
    InvalidSignatureEncodingError,
    RowLoadFailure,
    SignatureError,
    TypeMismatchError,
    UnsupportedReturnError,
    UnsupportedTypeError,
    WasmUdfError,
)
from wasm_udf.invoke import Expression, invoke, invoke_int, invoke_real, invoke_values
from wasm_udf.metadata import (
    ArrowMetadataSource,
    DataFusionMetadataSource,
    MetadataSource,
    StaticMetadataSource,
    WasmFunctionRow,
)
from wasm_udf.registration import prepare_registration
from wasm_udf.runtime import CompiledModule, WasmRuntime
from wasm_udf.settings import WasmUdfSettings, wasm_udf_settings_from_env
from wasm_udf.signature import (
    FunctionSignature,
    deserialize_signature,
    extract_signature,
    serialize_signature,
)
from wasm_udf.store import ContentAddressedStore, bytecode_checksum
from wasm_udf.values import (
    NULL,
    FloatValue,
    IntegerValue,
    NullValue,
    ScalarKind,
    ScalarValue,
)

__all__ = [
    "NULL",
    "ArrowMetadataSource",
    "BoundFunction",
    "CatalogEntry",
    "CatalogHandle",
    "CatalogReloadError",
    "CatalogSnapshot",
    "ColumnRef",
    "CompiledModule",
    "ContentAddressedStore",
    "DataFusionMetadataSource",
    "DuplicateFunctionError",
    "EntryNotFoundError",
    "ExecutionFaultError",
    "Expression",
    "FloatFunction",
    "FloatValue",
    "FunctionNotFoundError",
    "FunctionSignature",
    "IncorrectParameterCountError",
    "IntegerFunction",
    "IntegerValue",
    "InvalidBytecodeError",
    "InvalidSignatureEncodingError",
    "Literal",
    "MetadataSource",
    "NullValue",
    "RowLoadFailure",
    "ScalarKind",
    "ScalarValue",
    "SignatureError",
    "StaticMetadataSource",
    "TypeMismatchError",
    "UnsupportedReturnError",
    "UnsupportedTypeError",
    "WasmFunctionRow",
    "WasmRuntime",
    "WasmUdfError",
    "WasmUdfSettings",
    "build_snapshot",
    "bytecode_checksum",
    "deserialize_signature",
    "extract_signature",
    "invoke",
    "invoke_int",
    "invoke_real",
    "invoke_values",
    "prepare_registration",
    "resolve_function",
    "serialize_signature",
    "wasm_udf_settings_from_env",
]
