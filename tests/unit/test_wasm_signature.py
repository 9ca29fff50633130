"""Tests for WASM UDF signature extraction and the signature codec."""

from __future__ import annotations

import pytest

from tests.test_helpers.wasm_modules import (
    ADD_F64,
    CONST_F64,
    CUSTOM_ENTRY,
    DOUBLE_I64,
    I32_PARAM,
    I32_RESULT,
    INVALID_BYTECODE,
    MULTI_RESULT,
    NO_ENTRY,
    SCALE_MIXED,
    VOID_RESULT,
    WITH_IMPORT,
    wasm_bytes,
)
from wasm_udf.errors import (
    EntryNotFoundError,
    InvalidBytecodeError,
    InvalidSignatureEncodingError,
    SignatureError,
    UnsupportedReturnError,
    UnsupportedTypeError,
)
from wasm_udf.runtime import WasmRuntime
from wasm_udf.signature import (
    FunctionSignature,
    deserialize_signature,
    extract_signature,
    resolve_signature,
    serialize_signature,
)
from wasm_udf.values import ScalarKind

INT = ScalarKind.INT64
FLOAT = ScalarKind.FLOAT64


@pytest.mark.parametrize(
    "signature",
    [
        FunctionSignature(return_type=INT),
        FunctionSignature(return_type=FLOAT, parameter_types=(INT,)),
        FunctionSignature(return_type=INT, parameter_types=(FLOAT, INT, FLOAT)),
    ],
)
def test_signature_codec_round_trip(signature: FunctionSignature) -> None:
    """Decode what was encoded without loss."""
    return_code, params_code = serialize_signature(signature)
    assert deserialize_signature(return_code, params_code) == signature


def test_signature_codec_uses_stable_alphabet() -> None:
    """Encode integers as ``I`` and floats as ``F``."""
    signature = FunctionSignature(return_type=FLOAT, parameter_types=(INT, FLOAT))
    assert serialize_signature(signature) == ("F", "IF")
    assert serialize_signature(FunctionSignature(return_type=INT)) == ("I", "")


@pytest.mark.parametrize(
    ("return_code", "params_code"),
    [
        ("", "I"),
        ("II", ""),
        ("X", ""),
        ("I", "IX"),
        ("i", ""),
    ],
)
def test_deserialize_rejects_malformed_codes(return_code: str, params_code: str) -> None:
    """Reject empty, multi-character, and unknown codes."""
    with pytest.raises(InvalidSignatureEncodingError):
        deserialize_signature(return_code, params_code)


def test_extract_integer_signature(wasm_runtime: WasmRuntime) -> None:
    """Read an i64 -> i64 entry point."""
    extracted = extract_signature(wasm_runtime, wasm_bytes(DOUBLE_I64))
    assert extracted.signature == FunctionSignature(return_type=INT, parameter_types=(INT,))
    assert extracted.compiled.runtime is wasm_runtime


def test_extract_preserves_parameter_order(wasm_runtime: WasmRuntime) -> None:
    """Keep declared parameter order."""
    extracted = extract_signature(wasm_runtime, wasm_bytes(SCALE_MIXED))
    assert extracted.signature.parameter_types == (INT, FLOAT)
    assert extracted.signature.return_type is FLOAT


def test_extract_zero_parameter_signature(wasm_runtime: WasmRuntime) -> None:
    """Accept an entry point without parameters."""
    extracted = extract_signature(wasm_runtime, wasm_bytes(CONST_F64))
    assert extracted.signature.arity == 0
    assert extracted.signature.return_type is FLOAT


def test_extract_rejects_void_return(wasm_runtime: WasmRuntime) -> None:
    """Reject an entry point without results."""
    with pytest.raises(UnsupportedReturnError) as excinfo:
        extract_signature(wasm_runtime, wasm_bytes(VOID_RESULT))
    assert excinfo.value.shape == "void"


def test_extract_rejects_multi_return(wasm_runtime: WasmRuntime) -> None:
    """Reject an entry point with more than one result."""
    with pytest.raises(UnsupportedReturnError) as excinfo:
        extract_signature(wasm_runtime, wasm_bytes(MULTI_RESULT))
    assert excinfo.value.shape == "multi"


@pytest.mark.parametrize("wat", [I32_PARAM, I32_RESULT])
def test_extract_rejects_unsupported_value_kind(wasm_runtime: WasmRuntime, wat: str) -> None:
    """Reject value kinds outside i64 and f64."""
    with pytest.raises(UnsupportedTypeError) as excinfo:
        extract_signature(wasm_runtime, wasm_bytes(wat))
    assert excinfo.value.kind == "i32"


def test_extract_rejects_missing_entry(wasm_runtime: WasmRuntime) -> None:
    """Require the ``udf_main`` export."""
    with pytest.raises(EntryNotFoundError) as excinfo:
        extract_signature(wasm_runtime, wasm_bytes(NO_ENTRY))
    assert excinfo.value.entry_point == "udf_main"


def test_extract_rejects_invalid_bytecode(wasm_runtime: WasmRuntime) -> None:
    """Surface parse failures as InvalidBytecodeError."""
    with pytest.raises(InvalidBytecodeError):
        extract_signature(wasm_runtime, INVALID_BYTECODE)


def test_extract_rejects_modules_with_imports(wasm_runtime: WasmRuntime) -> None:
    """Reject modules that need host functions."""
    with pytest.raises(InvalidBytecodeError, match="env.host_fn"):
        extract_signature(wasm_runtime, wasm_bytes(WITH_IMPORT))


def test_extraction_errors_share_a_base() -> None:
    """Group extraction failures under SignatureError."""
    for error_type in (
        InvalidBytecodeError,
        EntryNotFoundError,
        UnsupportedReturnError,
        UnsupportedTypeError,
    ):
        assert issubclass(error_type, SignatureError)


def test_extract_honors_custom_entry_point() -> None:
    """Use the runtime's configured entry point name."""
    runtime = WasmRuntime(entry_point="compute")
    extracted = extract_signature(runtime, wasm_bytes(CUSTOM_ENTRY))
    assert extracted.signature == FunctionSignature(return_type=INT, parameter_types=(INT,))


def test_resolve_accepts_matching_persisted_signature(wasm_runtime: WasmRuntime) -> None:
    """Use persisted codes that agree with the module."""
    extracted = resolve_signature(
        wasm_runtime, wasm_bytes(ADD_F64), return_code="F", params_code="FF"
    )
    assert extracted.signature == FunctionSignature(
        return_type=FLOAT, parameter_types=(FLOAT, FLOAT)
    )


def test_resolve_rejects_disagreeing_persisted_signature(wasm_runtime: WasmRuntime) -> None:
    """Treat persisted codes that disagree with the module as corrupt."""
    with pytest.raises(InvalidSignatureEncodingError, match="does not match"):
        resolve_signature(wasm_runtime, wasm_bytes(ADD_F64), return_code="I", params_code="II")


def test_resolve_requires_both_codes(wasm_runtime: WasmRuntime) -> None:
    """Reject a persisted signature with only one half present."""
    with pytest.raises(InvalidSignatureEncodingError):
        resolve_signature(wasm_runtime, wasm_bytes(DOUBLE_I64), return_code="I")


def test_resolve_without_codes_extracts(wasm_runtime: WasmRuntime) -> None:
    """Fall back to extraction when no codes are persisted."""
    extracted = resolve_signature(wasm_runtime, wasm_bytes(DOUBLE_I64))
    assert serialize_signature(extracted.signature) == ("I", "I")
