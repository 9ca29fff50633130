"""Scalar kinds and the tagged scalar value union used for marshaling."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Final

import pyarrow as pa

from wasm_udf.constants import INT64_MAX, INT64_MIN
from wasm_udf.errors import TypeMismatchError


class ScalarKind(StrEnum):
    """Closed set of scalar kinds a WASM UDF may accept or return."""

    INT64 = "int64"
    FLOAT64 = "float64"


@dataclass(frozen=True, slots=True)
class IntegerValue:
    """Signed 64-bit integer scalar."""

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            msg = f"IntegerValue requires int, got {type(self.value).__name__}."
            raise TypeMismatchError(msg)
        if not INT64_MIN <= self.value <= INT64_MAX:
            msg = f"Integer {self.value} is outside the signed 64-bit range."
            raise TypeMismatchError(msg)

    @property
    def kind(self) -> ScalarKind:
        return ScalarKind.INT64


@dataclass(frozen=True, slots=True)
class FloatValue:
    """64-bit floating point scalar."""

    value: float

    def __post_init__(self) -> None:
        if not isinstance(self.value, float):
            msg = f"FloatValue requires float, got {type(self.value).__name__}."
            raise TypeMismatchError(msg)

    @property
    def kind(self) -> ScalarKind:
        return ScalarKind.FLOAT64


@dataclass(frozen=True, slots=True)
class NullValue:
    """SQL NULL."""

    @property
    def kind(self) -> None:
        return None


NULL: Final[NullValue] = NullValue()

type ScalarValue = IntegerValue | FloatValue | NullValue

_ARROW_TYPES: Final[dict[ScalarKind, pa.DataType]] = {
    ScalarKind.INT64: pa.int64(),
    ScalarKind.FLOAT64: pa.float64(),
}


def arrow_type(kind: ScalarKind) -> pa.DataType:
    """Return the Arrow (SQL field) type for a scalar kind.

    Returns
    -------
    pyarrow.DataType
        ``int64`` or ``float64``.
    """
    return _ARROW_TYPES[kind]


def scalar_from_python(value: object, kind: ScalarKind) -> ScalarValue:
    """Wrap a native Python value as a scalar of the requested kind.

    ``None`` becomes ``NULL``. Integers widen to floats for ``FLOAT64``;
    nothing narrows.

    Returns
    -------
    ScalarValue
        Tagged scalar value.

    Raises
    ------
    TypeMismatchError
        Raised when the value cannot represent the requested kind.
    """
    if value is None:
        return NULL
    if isinstance(value, pa.Scalar):
        return scalar_from_python(value.as_py(), kind)
    if isinstance(value, bool):
        msg = f"Boolean value {value!r} is not a {kind} scalar."
        raise TypeMismatchError(msg)
    if kind is ScalarKind.INT64:
        if isinstance(value, int):
            return IntegerValue(value)
    elif isinstance(value, (int, float)):
        return FloatValue(float(value))
    msg = f"Value of type {type(value).__name__} is not a {kind} scalar."
    raise TypeMismatchError(msg)


def scalar_to_python(value: ScalarValue) -> int | float | None:
    """Unwrap a scalar into its native Python value.

    Returns
    -------
    int | float | None
        Native value, or ``None`` for SQL NULL.
    """
    match value:
        case IntegerValue(value=inner) | FloatValue(value=inner):
            return inner
        case NullValue():
            return None


__all__ = [
    "NULL",
    "FloatValue",
    "IntegerValue",
    "NullValue",
    "ScalarKind",
    "ScalarValue",
    "arrow_type",
    "scalar_from_python",
    "scalar_to_python",
]
