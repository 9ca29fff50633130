"""Invocation adapter: marshal scalar values into a WASM call and back."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol

from obs.otel.metrics import record_invoke_fault
from wasm_udf.errors import ExecutionFaultError, IncorrectParameterCountError, TypeMismatchError
from wasm_udf.values import (
    NULL,
    FloatValue,
    IntegerValue,
    NullValue,
    ScalarKind,
    ScalarValue,
)

if TYPE_CHECKING:
    from wasm_udf.catalog import CatalogEntry

_LOGGER = logging.getLogger(__name__)


class Expression(Protocol):
    """Argument expression evaluated against one input row."""

    @property
    def kind(self) -> ScalarKind | None: ...

    def evaluate(self, row: Sequence[object]) -> ScalarValue: ...


def _marshal_argument(entry: CatalogEntry, position: int, value: ScalarValue) -> int | float:
    expected = entry.signature.parameter_types[position]
    match value:
        case IntegerValue(value=inner) if expected is ScalarKind.INT64:
            return inner
        case FloatValue(value=inner) if expected is ScalarKind.FLOAT64:
            return inner
        case _:
            msg = (
                f"Argument {position} of {entry.qualified_name} is {value.kind}, "
                f"declared {expected}."
            )
            raise TypeMismatchError(msg)


def _unmarshal_result(entry: CatalogEntry, raw: object) -> ScalarValue:
    expected = entry.signature.return_type
    if expected is ScalarKind.INT64 and isinstance(raw, int) and not isinstance(raw, bool):
        return IntegerValue(raw)
    if expected is ScalarKind.FLOAT64 and isinstance(raw, float):
        return FloatValue(raw)
    msg = (
        f"{entry.qualified_name} returned {type(raw).__name__}, "
        f"declared {expected}."
    )
    raise TypeMismatchError(msg)


def invoke_values(entry: CatalogEntry, values: Sequence[ScalarValue]) -> ScalarValue:
    """Call a catalog entry with already-evaluated argument values.

    Any ``NULL`` argument yields ``NULL`` without running the module.

    Returns
    -------
    ScalarValue
        Result tagged with the declared return kind, or ``NULL``.

    Raises
    ------
    IncorrectParameterCountError
        Raised when the argument count differs from the declared arity.
    TypeMismatchError
        Raised when an argument or the result disagrees with the signature.
    ExecutionFaultError
        Raised when the module traps, runs out of fuel, or fails to start.
    """
    signature = entry.signature
    if len(values) != signature.arity:
        raise IncorrectParameterCountError(
            entry.qualified_name, expected=signature.arity, actual=len(values)
        )
    if any(isinstance(value, NullValue) for value in values):
        return NULL
    args = [_marshal_argument(entry, position, value) for position, value in enumerate(values)]
    try:
        raw = entry.compiled.instantiate().call(args)
    except ExecutionFaultError as exc:
        record_invoke_fault(exc.reason, function_name=entry.qualified_name)
        _LOGGER.debug("WASM UDF %s faulted (%s): %s", entry.qualified_name, exc.reason, exc)
        raise
    return _unmarshal_result(entry, raw)


def invoke(
    entry: CatalogEntry,
    arguments: Sequence[Expression],
    row: Sequence[object],
) -> ScalarValue:
    """Evaluate argument expressions against ``row`` and call the entry.

    Arguments are evaluated in order and evaluation stops at the first
    ``NULL``; the module is not called in that case.

    Returns
    -------
    ScalarValue
        Call result, or ``NULL``.
    """
    if len(arguments) != entry.signature.arity:
        raise IncorrectParameterCountError(
            entry.qualified_name, expected=entry.signature.arity, actual=len(arguments)
        )
    values: list[ScalarValue] = []
    for argument in arguments:
        value = argument.evaluate(row)
        if isinstance(value, NullValue):
            return NULL
        values.append(value)
    return invoke_values(entry, values)


def _require_return_kind(entry: CatalogEntry, kind: ScalarKind) -> None:
    if entry.signature.return_type is not kind:
        msg = (
            f"{entry.qualified_name} returns {entry.signature.return_type}; "
            f"it cannot be called through the {kind} path."
        )
        raise TypeMismatchError(msg)


def invoke_int(
    entry: CatalogEntry,
    arguments: Sequence[Expression],
    row: Sequence[object],
) -> int | None:
    """Call an entry declared to return ``int64``.

    Returns
    -------
    int | None
        Integer result, or ``None`` for SQL NULL.

    Raises
    ------
    TypeMismatchError
        Raised before any evaluation when the entry does not return ``int64``.
    """
    _require_return_kind(entry, ScalarKind.INT64)
    match invoke(entry, arguments, row):
        case IntegerValue(value=inner):
            return inner
        case NullValue():
            return None
        case other:
            msg = f"{entry.qualified_name} produced {other.kind} on the int64 path."
            raise TypeMismatchError(msg)


def invoke_real(
    entry: CatalogEntry,
    arguments: Sequence[Expression],
    row: Sequence[object],
) -> float | None:
    """Call an entry declared to return ``float64``.

    Returns
    -------
    float | None
        Float result, or ``None`` for SQL NULL.

    Raises
    ------
    TypeMismatchError
        Raised before any evaluation when the entry does not return ``float64``.
    """
    _require_return_kind(entry, ScalarKind.FLOAT64)
    match invoke(entry, arguments, row):
        case FloatValue(value=inner):
            return inner
        case NullValue():
            return None
        case other:
            msg = f"{entry.qualified_name} produced {other.kind} on the float64 path."
            raise TypeMismatchError(msg)


__all__ = [
    "Expression",
    "invoke",
    "invoke_int",
    "invoke_real",
    "invoke_values",
]
