"""Tests for plan-time WASM UDF resolution."""

from __future__ import annotations

import pytest

from tests.test_helpers.wasm_modules import ADD_F64, CONST_F64, DOUBLE_I64, function_row
from wasm_udf.binding import ColumnRef, FloatFunction, IntegerFunction, Literal, resolve_function
from wasm_udf.catalog import CatalogHandle
from wasm_udf.errors import FunctionNotFoundError, IncorrectParameterCountError, TypeMismatchError
from wasm_udf.metadata import StaticMetadataSource
from wasm_udf.values import NULL, FloatValue, IntegerValue, ScalarKind


@pytest.fixture
def loaded_handle(catalog_handle: CatalogHandle) -> CatalogHandle:
    """Provide a handle loaded with integer and float functions.

    Returns
    -------
    CatalogHandle
        Handle with ``double_it``, ``add_f`` and ``const_f`` installed.
    """
    catalog_handle.reload(
        StaticMetadataSource(
            [
                function_row("double_it", DOUBLE_I64, function_id=11),
                function_row("add_f", ADD_F64, function_id=12),
                function_row("const_f", CONST_F64, function_id=13),
            ]
        )
    )
    return catalog_handle


def test_zero_arity_function_rejects_arguments(loaded_handle: CatalogHandle) -> None:
    """Reject a call with one argument to a parameterless function."""
    assert loaded_handle.lookup_by_name("main", "const_f") is not None
    with pytest.raises(IncorrectParameterCountError) as excinfo:
        resolve_function(loaded_handle, "main", "const_f", [Literal(FloatValue(1.0))])
    assert excinfo.value.expected == 0
    assert excinfo.value.actual == 1


def test_unknown_function(loaded_handle: CatalogHandle) -> None:
    """Raise FunctionNotFoundError for unregistered names."""
    with pytest.raises(FunctionNotFoundError, match=r"main\.missing"):
        resolve_function(loaded_handle, "main", "missing", [])


def test_argument_kind_checked_at_resolution(loaded_handle: CatalogHandle) -> None:
    """Reject argument expressions of the wrong kind before execution."""
    with pytest.raises(TypeMismatchError):
        resolve_function(loaded_handle, "main", "double_it", [ColumnRef(0, ScalarKind.FLOAT64)])


def test_null_literal_matches_any_kind(loaded_handle: CatalogHandle) -> None:
    """Accept NULL literals for any parameter kind."""
    bound = resolve_function(loaded_handle, "main", "double_it", [Literal(NULL)])
    assert bound.evaluate(()) is NULL


def test_integer_function_binding(loaded_handle: CatalogHandle) -> None:
    """Bind integer-returning functions as IntegerFunction."""
    bound = resolve_function(loaded_handle, "MAIN", "Double_It", [ColumnRef(0, ScalarKind.INT64)])
    assert isinstance(bound, IntegerFunction)
    assert bound.arity() == 1
    assert bound.return_kind() is ScalarKind.INT64
    assert bound.function_id == 11
    assert bound.eval_int((21,)) == 42
    assert bound.eval_int((None,)) is None
    assert bound.evaluate((4,)) == IntegerValue(8)


def test_float_function_binding(loaded_handle: CatalogHandle) -> None:
    """Bind float-returning functions as FloatFunction."""
    args = [ColumnRef(1, ScalarKind.FLOAT64), Literal(FloatValue(0.5))]
    bound = resolve_function(loaded_handle, "main", "add_f", args)
    assert isinstance(bound, FloatFunction)
    assert bound.arity() == 2
    assert bound.return_kind() is ScalarKind.FLOAT64
    assert bound.eval_real(("ignored", 2.0)) == 2.5
    assert not hasattr(bound, "eval_int")


def test_bound_function_survives_reload(loaded_handle: CatalogHandle) -> None:
    """Keep calling the entry captured at plan time after a reload."""
    bound = resolve_function(loaded_handle, "main", "double_it", [Literal(IntegerValue(3))])
    loaded_handle.reload(StaticMetadataSource([]))
    assert loaded_handle.lookup_by_name("main", "double_it") is None
    assert bound.eval_int(()) == 6
