"""Expose catalog entries to DataFusion as Python scalar UDFs.

Each registered UDF captures the catalog entry that was current when it was
registered; re-register after a reload to pick up new bytecode.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, cast

import pyarrow as pa
from datafusion import SessionContext, udf

from wasm_udf.constants import UDF_VOLATILITY
from wasm_udf.invoke import invoke_values
from wasm_udf.values import arrow_type, scalar_from_python, scalar_to_python

if TYPE_CHECKING:
    from datafusion import ScalarUDF

    from wasm_udf.catalog import CatalogEntry, CatalogHandle

_LOGGER = logging.getLogger(__name__)


def _values(value: object) -> list[object]:
    if isinstance(value, pa.ChunkedArray):
        chunked = cast("pa.ChunkedArray", value)
        return [item for chunk in chunked.chunks for item in chunk.to_pylist()]
    if isinstance(value, pa.Array):
        return cast("pa.Array", value).to_pylist()
    if isinstance(value, pa.Scalar):
        return [cast("pa.Scalar", value).as_py()]
    if hasattr(value, "__iter__") and not isinstance(value, (str, bytes, bytearray)):
        return list(cast("Iterable[object]", value))
    return [value]


def _zip_values(*values: object) -> list[tuple[object, ...]]:
    lists = [_values(value) for value in values]
    if not lists:
        return [()]
    max_len = max(len(items) for items in lists)
    rows: list[tuple[object, ...]] = []
    for index in range(max_len):
        row: list[object] = []
        for items in lists:
            if len(items) == 1:
                row.append(items[0])
            elif index < len(items):
                row.append(items[index])
            else:
                row.append(None)
        rows.append(tuple(row))
    return rows


def wasm_udf_function(entry: CatalogEntry) -> Callable[..., pa.Array]:
    """Return the batch function DataFusion calls for ``entry``.

    A zero-parameter function receives no input arrays and returns a single
    value, which DataFusion broadcasts as a constant.

    Returns
    -------
    Callable[..., pyarrow.Array]
        Function mapping input arrays to an output array.
    """
    parameter_types = entry.signature.parameter_types
    return_type = arrow_type(entry.signature.return_type)

    def _call(*arrays: object) -> pa.Array:
        results: list[int | float | None] = []
        for row in _zip_values(*arrays):
            values = [
                scalar_from_python(item, kind)
                for item, kind in zip(row, parameter_types, strict=True)
            ]
            results.append(scalar_to_python(invoke_values(entry, values)))
        return pa.array(results, type=return_type)

    return _call


def wasm_scalar_udf(entry: CatalogEntry) -> ScalarUDF:
    """Build a DataFusion scalar UDF for one catalog entry.

    Returns
    -------
    ScalarUDF
        UDF named after the entry, with Arrow types from its signature.
    """
    return udf(
        wasm_udf_function(entry),
        [arrow_type(kind) for kind in entry.signature.parameter_types],
        arrow_type(entry.signature.return_type),
        UDF_VOLATILITY,
        entry.name,
    )


def register_wasm_udfs(
    ctx: SessionContext,
    handle: CatalogHandle,
    namespace: str,
) -> tuple[str, ...]:
    """Register every function of ``namespace`` on a DataFusion session.

    Returns
    -------
    tuple[str, ...]
        Registered function names, sorted.
    """
    entries = handle.current().namespace_entries(namespace)
    names: list[str] = []
    for entry in entries:
        ctx.register_udf(wasm_scalar_udf(entry))
        names.append(entry.name)
    _LOGGER.info(
        "Registered %d WASM UDF(s) from namespace %s", len(names), namespace
    )
    return tuple(sorted(names))


__all__ = [
    "register_wasm_udfs",
    "wasm_scalar_udf",
    "wasm_udf_function",
]
