"""Error taxonomy for WASM UDF catalog construction and invocation.

Catalog construction errors (bytecode, signature, encoding, duplicates) abort a
reload as a whole. Call errors (parameter count, type mismatch, execution
faults) abort only the call that raised them.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

type UnsupportedReturnShape = Literal["void", "multi"]
type FaultReason = Literal["trap", "timeout", "instantiate"]


class WasmUdfError(RuntimeError):
    """Base error for WASM UDF failures."""

    code: str = "wasm_udf_error"


class SignatureError(WasmUdfError):
    """Base error for signature extraction failures."""

    code: str = "signature_error"


class InvalidBytecodeError(SignatureError):
    """Module bytecode failed to parse, compile, or validate."""

    code: str = "invalid_bytecode"


class EntryNotFoundError(SignatureError):
    """Module does not export the UDF entry-point function."""

    code: str = "entry_not_found"

    def __init__(self, entry_point: str) -> None:
        self.entry_point = entry_point
        msg = f"UDF entry function `{entry_point}` not found."
        super().__init__(msg)


class UnsupportedReturnError(SignatureError):
    """Entry point declares zero results or more than one result."""

    code: str = "unsupported_return"

    def __init__(self, shape: UnsupportedReturnShape) -> None:
        self.shape = shape
        if shape == "void":
            msg = "Void return value is not supported."
        else:
            msg = "Multiple return values are not supported."
        super().__init__(msg)


class UnsupportedTypeError(SignatureError):
    """Entry point uses a value kind outside the supported scalar kinds."""

    code: str = "unsupported_type"

    def __init__(self, kind: str) -> None:
        self.kind = kind
        msg = f"Unsupported WASM data type {kind!r}."
        super().__init__(msg)


class InvalidSignatureEncodingError(WasmUdfError):
    """Persisted signature codes are malformed or disagree with the module."""

    code: str = "invalid_signature_encoding"


class DuplicateFunctionError(WasmUdfError):
    """Two metadata rows share an id or a (namespace, name) pair."""

    code: str = "duplicate_function"


class FunctionNotFoundError(WasmUdfError):
    """No function is registered under the requested name."""

    code: str = "function_not_found"

    def __init__(self, namespace: str, name: str) -> None:
        self.namespace = namespace
        self.name = name
        msg = f"WASM function {namespace}.{name} does not exist."
        super().__init__(msg)


class IncorrectParameterCountError(WasmUdfError):
    """Call-site argument count differs from the declared parameter count."""

    code: str = "incorrect_parameter_count"

    def __init__(self, name: str, *, expected: int, actual: int) -> None:
        self.name = name
        self.expected = expected
        self.actual = actual
        msg = (
            f"Incorrect parameter count in the call to native function {name!r}: "
            f"expected {expected}, got {actual}."
        )
        super().__init__(msg)


class TypeMismatchError(WasmUdfError):
    """A runtime value disagrees with the declared signature."""

    code: str = "type_mismatch"


class ExecutionFaultError(WasmUdfError):
    """Module trapped, ran out of fuel, or failed to instantiate."""

    code: str = "execution_fault"

    def __init__(self, message: str, *, reason: FaultReason) -> None:
        self.reason = reason
        super().__init__(message)


@dataclass(frozen=True)
class RowLoadFailure:
    """One metadata row that could not be turned into a catalog entry."""

    index: int
    function_id: int | None
    namespace: str
    name: str
    error: WasmUdfError

    def summary(self) -> str:
        """Return a one-line description of the failure.

        Returns
        -------
        str
            Row position, qualified name, error code and message.
        """
        return f"row {self.index} ({self.namespace}.{self.name}): [{self.error.code}] {self.error}"


class CatalogReloadError(WasmUdfError):
    """A reload was aborted; the previously installed catalog stays current."""

    code: str = "catalog_reload_failed"

    def __init__(self, failures: Sequence[RowLoadFailure]) -> None:
        self.failures = tuple(failures)
        details = "; ".join(failure.summary() for failure in self.failures)
        msg = f"WASM UDF catalog reload failed for {len(self.failures)} row(s): {details}"
        super().__init__(msg)


__all__ = [
    "CatalogReloadError",
    "DuplicateFunctionError",
    "EntryNotFoundError",
    "ExecutionFaultError",
    "FaultReason",
    "FunctionNotFoundError",
    "IncorrectParameterCountError",
    "InvalidBytecodeError",
    "InvalidSignatureEncodingError",
    "RowLoadFailure",
    "SignatureError",
    "TypeMismatchError",
    "UnsupportedReturnError",
    "UnsupportedReturnShape",
    "UnsupportedTypeError",
    "WasmUdfError",
]
