"""WASM UDF signature extraction and the persisted signature codec.

A signature is derived from the entry-point export of a compiled module. Its
persisted form is one ASCII character per scalar kind: a one-character return
code and a parameter code holding one character per parameter in declared
order. The alphabet is a storage format and never changes meaning.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Final

import wasmtime

from serde_msgspec import StructBaseStrict
from wasm_udf.errors import (
    InvalidSignatureEncodingError,
    UnsupportedReturnError,
    UnsupportedTypeError,
)
from wasm_udf.runtime import CompiledModule, WasmRuntime
from wasm_udf.values import ScalarKind

CODE_INT64: Final = "I"
CODE_FLOAT64: Final = "F"

_KIND_TO_CODE: Final[dict[ScalarKind, str]] = {
    ScalarKind.INT64: CODE_INT64,
    ScalarKind.FLOAT64: CODE_FLOAT64,
}
_CODE_TO_KIND: Final[dict[str, ScalarKind]] = {code: kind for kind, code in _KIND_TO_CODE.items()}
_WASM_TO_KIND: Final[dict[str, ScalarKind]] = {
    "i64": ScalarKind.INT64,
    "f64": ScalarKind.FLOAT64,
}


class FunctionSignature(StructBaseStrict, frozen=True):
    """Declared parameter kinds and single return kind of a UDF."""

    return_type: ScalarKind
    parameter_types: tuple[ScalarKind, ...] = ()

    @property
    def arity(self) -> int:
        return len(self.parameter_types)


@dataclass(frozen=True)
class ExtractedSignature:
    """Signature derived from bytecode, with the module it was compiled into."""

    compiled: CompiledModule
    signature: FunctionSignature


def code_for_kind(kind: ScalarKind) -> str:
    """Return the persisted character code for a scalar kind.

    Returns
    -------
    str
        Single-character code.
    """
    return _KIND_TO_CODE[kind]


def kind_for_code(code: str) -> ScalarKind:
    """Return the scalar kind for a persisted character code.

    Returns
    -------
    ScalarKind
        Decoded scalar kind.

    Raises
    ------
    InvalidSignatureEncodingError
        Raised when the code is not part of the alphabet.
    """
    kind = _CODE_TO_KIND.get(code)
    if kind is None:
        msg = f"Unknown signature type code {code!r}."
        raise InvalidSignatureEncodingError(msg)
    return kind


def serialize_signature(signature: FunctionSignature) -> tuple[str, str]:
    """Encode a signature into its persisted ``(return_code, params_code)`` form.

    Returns
    -------
    tuple[str, str]
        Return code and parameter code string.
    """
    return (
        code_for_kind(signature.return_type),
        "".join(code_for_kind(kind) for kind in signature.parameter_types),
    )


def deserialize_signature(return_code: str, params_code: str) -> FunctionSignature:
    """Decode a persisted signature.

    Returns
    -------
    FunctionSignature
        Decoded signature.

    Raises
    ------
    InvalidSignatureEncodingError
        Raised when the return code is not exactly one known character or any
        parameter character is unknown.
    """
    if not isinstance(return_code, str) or not isinstance(params_code, str):
        msg = "Signature codes must be strings."
        raise InvalidSignatureEncodingError(msg)
    if len(return_code) != 1:
        msg = f"Return code must be exactly one character, got {return_code!r}."
        raise InvalidSignatureEncodingError(msg)
    return FunctionSignature(
        return_type=kind_for_code(return_code),
        parameter_types=tuple(kind_for_code(code) for code in params_code),
    )


def _kind_from_valtype(valtype: wasmtime.ValType) -> ScalarKind:
    name = str(valtype)
    kind = _WASM_TO_KIND.get(name)
    if kind is None:
        raise UnsupportedTypeError(name)
    return kind


def signature_from_func_type(
    params: Sequence[wasmtime.ValType],
    results: Sequence[wasmtime.ValType],
) -> FunctionSignature:
    """Map declared WASM parameter/result types onto a UDF signature.

    Returns
    -------
    FunctionSignature
        Signature with the same parameter order.

    Raises
    ------
    UnsupportedReturnError
        Raised for zero results or more than one result.
    """
    if not results:
        raise UnsupportedReturnError("void")
    if len(results) > 1:
        raise UnsupportedReturnError("multi")
    return FunctionSignature(
        return_type=_kind_from_valtype(results[0]),
        parameter_types=tuple(_kind_from_valtype(param) for param in params),
    )


def signature_of_module(compiled: CompiledModule) -> FunctionSignature:
    """Read the signature of a compiled module's entry-point export.

    Returns
    -------
    FunctionSignature
        Declared signature of the entry point.
    """
    func_type = compiled.export_function_type(compiled.runtime.entry_point)
    return signature_from_func_type(func_type.params, func_type.results)


def extract_signature(runtime: WasmRuntime, bytecode: bytes) -> ExtractedSignature:
    """Compile bytecode and derive the signature of its entry point.

    Returns
    -------
    ExtractedSignature
        Compiled module and its signature, so callers never recompile.
    """
    compiled = runtime.compile(bytecode)
    return ExtractedSignature(compiled=compiled, signature=signature_of_module(compiled))


def resolve_signature(
    runtime: WasmRuntime,
    bytecode: bytes,
    *,
    return_code: str | None = None,
    params_code: str | None = None,
) -> ExtractedSignature:
    """Compile bytecode and settle its signature, honoring persisted codes.

    When persisted codes are present they are decoded and must agree with the
    module's declared entry point.

    Returns
    -------
    ExtractedSignature
        Compiled module and its signature.

    Raises
    ------
    InvalidSignatureEncodingError
        Raised when only one code is present, when a code is malformed, or
        when the decoded signature disagrees with the module.
    """
    if return_code is None and params_code is None:
        return extract_signature(runtime, bytecode)
    if return_code is None or params_code is None:
        msg = "Persisted signature requires both a return code and a parameter code."
        raise InvalidSignatureEncodingError(msg)
    persisted = deserialize_signature(return_code, params_code)
    extracted = extract_signature(runtime, bytecode)
    if persisted != extracted.signature:
        declared = "".join(serialize_signature(extracted.signature))
        msg = (
            f"Persisted signature {return_code}{params_code} does not match "
            f"the module entry point ({declared})."
        )
        raise InvalidSignatureEncodingError(msg)
    return extracted


__all__ = [
    "CODE_FLOAT64",
    "CODE_INT64",
    "ExtractedSignature",
    "FunctionSignature",
    "code_for_kind",
    "deserialize_signature",
    "extract_signature",
    "kind_for_code",
    "resolve_signature",
    "serialize_signature",
    "signature_from_func_type",
    "signature_of_module",
]
