"""Metadata collaborators that supply registered WASM function rows."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import pyarrow as pa

from serde_msgspec import StructBaseStrict

if TYPE_CHECKING:
    from datafusion import SessionContext

DEFAULT_FUNCTIONS_TABLE = "wasm_functions"

_COLUMN_ALIASES: dict[str, tuple[str, ...]] = {
    "id": ("id",),
    "namespace": ("namespace", "db", "schema"),
    "name": ("name",),
    "bytecode": ("bytecode", "byte_code"),
    "return_code": ("return_code", "ret_type"),
    "params_code": ("params_code", "params_type"),
}
_REQUIRED_COLUMNS = ("namespace", "name", "bytecode")


class WasmFunctionRow(StructBaseStrict, frozen=True):
    """One registered function as stored by the metadata collaborator.

    ``id`` may be omitted, in which case the catalog derives it from the
    bytecode checksum.
    """

    namespace: str
    name: str
    bytecode: bytes
    id: int | None = None
    return_code: str | None = None
    params_code: str | None = None

    @property
    def has_signature(self) -> bool:
        return self.return_code is not None or self.params_code is not None


@runtime_checkable
class MetadataSource(Protocol):
    """Bulk, one-shot provider of function rows for a catalog reload."""

    def fetch_rows(self) -> Sequence[WasmFunctionRow]:
        """Return every registered function row."""
        ...


class StaticMetadataSource:
    """In-memory metadata source."""

    def __init__(self, rows: Sequence[WasmFunctionRow] = ()) -> None:
        self._rows = tuple(rows)

    def fetch_rows(self) -> Sequence[WasmFunctionRow]:
        """Return the rows captured at construction.

        Returns
        -------
        Sequence[WasmFunctionRow]
            Captured rows.
        """
        return self._rows


def _resolve_columns(table: pa.Table) -> dict[str, str]:
    by_lower = {name.lower(): name for name in table.column_names}
    resolved: dict[str, str] = {}
    for field, aliases in _COLUMN_ALIASES.items():
        for alias in aliases:
            column = by_lower.get(alias)
            if column is not None:
                resolved[field] = column
                break
    missing = [field for field in _REQUIRED_COLUMNS if field not in resolved]
    if missing:
        msg = f"WASM function table is missing required columns: {missing}."
        raise ValueError(msg)
    return resolved


def _column_values(table: pa.Table, columns: Mapping[str, str], field: str) -> list[object]:
    column = columns.get(field)
    if column is None:
        return [None] * table.num_rows
    return table.column(column).to_pylist()


def _optional_text(value: object) -> str | None:
    if value is None:
        return None
    if isinstance(value, (bytes, bytearray)):
        # Single-byte decode keeps unknown codes for signature validation.
        return bytes(value).decode("latin-1")
    return str(value)


def rows_from_arrow(table: pa.Table) -> tuple[WasmFunctionRow, ...]:
    """Decode function rows from an Arrow table.

    Column names are matched case-insensitively. ``namespace``, ``name`` and
    ``bytecode`` are required; ``id``, ``return_code`` and ``params_code`` are
    optional.

    Returns
    -------
    tuple[WasmFunctionRow, ...]
        Decoded rows in table order.

    Raises
    ------
    ValueError
        Raised when a required column is missing or a required value is null.
    """
    columns = _resolve_columns(table)
    ids = _column_values(table, columns, "id")
    namespaces = _column_values(table, columns, "namespace")
    names = _column_values(table, columns, "name")
    bytecodes = _column_values(table, columns, "bytecode")
    return_codes = _column_values(table, columns, "return_code")
    params_codes = _column_values(table, columns, "params_code")
    rows: list[WasmFunctionRow] = []
    for index, (fid, namespace, name, bytecode, ret, params) in enumerate(
        zip(ids, namespaces, names, bytecodes, return_codes, params_codes, strict=True)
    ):
        if namespace is None or name is None or bytecode is None:
            msg = f"WASM function row {index} has a null namespace, name, or bytecode."
            raise ValueError(msg)
        rows.append(
            WasmFunctionRow(
                id=int(fid) if fid is not None else None,
                namespace=str(namespace),
                name=str(name),
                bytecode=bytes(bytecode),
                return_code=_optional_text(ret),
                params_code=_optional_text(params),
            )
        )
    return tuple(rows)


class ArrowMetadataSource:
    """Metadata source backed by an Arrow table snapshot."""

    def __init__(self, table: pa.Table) -> None:
        self._table = table

    def fetch_rows(self) -> Sequence[WasmFunctionRow]:
        """Decode the table into function rows.

        Returns
        -------
        Sequence[WasmFunctionRow]
            Decoded rows.
        """
        return rows_from_arrow(self._table)


class DataFusionMetadataSource:
    """Metadata source that reads the function table through a DataFusion session."""

    def __init__(self, ctx: SessionContext, table_name: str = DEFAULT_FUNCTIONS_TABLE) -> None:
        self._ctx = ctx
        self._table_name = table_name

    def fetch_rows(self) -> Sequence[WasmFunctionRow]:
        """Query the function table and decode its rows.

        Returns
        -------
        Sequence[WasmFunctionRow]
            Decoded rows.
        """
        table = self._ctx.sql(f"SELECT * FROM {self._table_name}").to_arrow_table()
        return rows_from_arrow(table)


__all__ = [
    "DEFAULT_FUNCTIONS_TABLE",
    "ArrowMetadataSource",
    "DataFusionMetadataSource",
    "MetadataSource",
    "StaticMetadataSource",
    "WasmFunctionRow",
    "rows_from_arrow",
]
