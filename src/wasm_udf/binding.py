"""Plan-time resolution of WASM UDF calls into monomorphic bound functions."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from wasm_udf.catalog import CatalogEntry, CatalogHandle
from wasm_udf.errors import FunctionNotFoundError, IncorrectParameterCountError, TypeMismatchError
from wasm_udf.invoke import Expression, invoke, invoke_int, invoke_real
from wasm_udf.values import ScalarKind, ScalarValue, scalar_from_python


@dataclass(frozen=True)
class ColumnRef:
    """Reads one positional column of a row; ``None`` is SQL NULL."""

    index: int
    kind: ScalarKind

    def evaluate(self, row: Sequence[object]) -> ScalarValue:
        return scalar_from_python(row[self.index], self.kind)


@dataclass(frozen=True)
class Literal:
    """Constant argument; a ``NULL`` literal is compatible with any kind."""

    value: ScalarValue

    @property
    def kind(self) -> ScalarKind | None:
        return self.value.kind

    def evaluate(self, row: Sequence[object]) -> ScalarValue:
        _ = row
        return self.value


@dataclass(frozen=True)
class _BoundCall:
    entry: CatalogEntry
    arguments: tuple[Expression, ...]

    @property
    def function_id(self) -> int:
        return self.entry.id

    def arity(self) -> int:
        return self.entry.signature.arity

    def return_kind(self) -> ScalarKind:
        return self.entry.signature.return_type

    def evaluate(self, row: Sequence[object]) -> ScalarValue:
        return invoke(self.entry, self.arguments, row)


@dataclass(frozen=True)
class IntegerFunction(_BoundCall):
    """Bound call site for a UDF returning ``int64``."""

    def eval_int(self, row: Sequence[object]) -> int | None:
        return invoke_int(self.entry, self.arguments, row)


@dataclass(frozen=True)
class FloatFunction(_BoundCall):
    """Bound call site for a UDF returning ``float64``."""

    def eval_real(self, row: Sequence[object]) -> float | None:
        return invoke_real(self.entry, self.arguments, row)


type BoundFunction = IntegerFunction | FloatFunction


def resolve_function(
    handle: CatalogHandle,
    namespace: str,
    name: str,
    args: Sequence[Expression],
) -> BoundFunction:
    """Resolve a UDF call once per plan.

    The entry is captured from the snapshot current at resolution time, so a
    later reload does not change what an already-built plan calls.

    Returns
    -------
    BoundFunction
        ``IntegerFunction`` or ``FloatFunction`` by declared return kind.

    Raises
    ------
    FunctionNotFoundError
        Raised when no function is registered under ``namespace.name``.
    IncorrectParameterCountError
        Raised when ``args`` does not match the declared arity.
    TypeMismatchError
        Raised when an argument kind differs from the declared parameter kind.
    """
    entry = handle.lookup_by_name(namespace, name)
    if entry is None:
        raise FunctionNotFoundError(namespace, name)
    parameter_types = entry.signature.parameter_types
    if len(args) != len(parameter_types):
        raise IncorrectParameterCountError(
            entry.qualified_name, expected=len(parameter_types), actual=len(args)
        )
    for position, (arg, declared) in enumerate(zip(args, parameter_types, strict=True)):
        if arg.kind is not None and arg.kind != declared:
            msg = (
                f"Argument {position} of {entry.qualified_name} is {arg.kind}, "
                f"declared {declared}."
            )
            raise TypeMismatchError(msg)
    arguments = tuple(args)
    if entry.signature.return_type is ScalarKind.INT64:
        return IntegerFunction(entry=entry, arguments=arguments)
    return FloatFunction(entry=entry, arguments=arguments)


__all__ = [
    "BoundFunction",
    "ColumnRef",
    "Expression",
    "FloatFunction",
    "IntegerFunction",
    "Literal",
    "resolve_function",
]
