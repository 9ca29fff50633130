"""Contract tests for the WASM UDF catalog snapshot payload."""

from __future__ import annotations

import msgspec
import pytest

from serde_msgspec import dumps_msgpack
from tests.test_helpers.wasm_modules import ADD_F64, CONST_F64, DOUBLE_I64, function_row
from wasm_udf.catalog import CatalogHandle, CatalogSnapshot
from wasm_udf.contracts import (
    WASM_UDF_SNAPSHOT_VERSION,
    WasmUdfCatalogEntryRecord,
    WasmUdfCatalogSnapshot,
    catalog_snapshot_payload,
    decode_catalog_snapshot,
    encode_catalog_snapshot,
)
from wasm_udf.metadata import StaticMetadataSource


@pytest.fixture
def loaded_handle(catalog_handle: CatalogHandle) -> CatalogHandle:
    """Provide a handle with three functions across two namespaces.

    Returns
    -------
    CatalogHandle
        Loaded handle.
    """
    catalog_handle.reload(
        StaticMetadataSource(
            [
                function_row("z_double", DOUBLE_I64, function_id=3),
                function_row("add_f", ADD_F64, function_id=2, namespace="beta"),
                function_row("a_const", CONST_F64, function_id=1),
            ]
        )
    )
    return catalog_handle


def test_payload_lists_entries_in_name_order(loaded_handle: CatalogHandle) -> None:
    """Order entries by namespace and name with persisted codes."""
    payload = catalog_snapshot_payload(loaded_handle.current())
    assert payload.version == WASM_UDF_SNAPSHOT_VERSION
    assert payload.generation == loaded_handle.current().generation
    assert payload.entries == (
        WasmUdfCatalogEntryRecord(
            id=2, namespace="beta", name="add_f", return_code="F", params_code="FF"
        ),
        WasmUdfCatalogEntryRecord(id=1, namespace="main", name="a_const", return_code="F"),
        WasmUdfCatalogEntryRecord(
            id=3, namespace="main", name="z_double", return_code="I", params_code="I"
        ),
    )
    assert len(payload.fingerprint) == 64


def test_fingerprint_tracks_contents(loaded_handle: CatalogHandle) -> None:
    """Keep the fingerprint stable for equal contents and change it otherwise."""
    first = catalog_snapshot_payload(loaded_handle.current())
    again = catalog_snapshot_payload(loaded_handle.current())
    assert first.fingerprint == again.fingerprint

    smaller_rows = [function_row("z_double", DOUBLE_I64, function_id=3)]
    loaded_handle.reload(StaticMetadataSource(smaller_rows))
    smaller = catalog_snapshot_payload(loaded_handle.current())
    assert smaller.fingerprint != first.fingerprint


def test_encode_decode(loaded_handle: CatalogHandle) -> None:
    """Decode the MessagePack payload into an equal contract."""
    payload = catalog_snapshot_payload(loaded_handle.current())
    encoded = encode_catalog_snapshot(loaded_handle.current())
    assert encoded == encode_catalog_snapshot(payload)
    assert decode_catalog_snapshot(encoded) == payload


def test_decode_rejects_tampered_fingerprint(loaded_handle: CatalogHandle) -> None:
    """Reject payloads whose fingerprint disagrees with their entries."""
    payload = catalog_snapshot_payload(loaded_handle.current())
    tampered = msgspec.structs.replace(payload, entries=payload.entries[:1])
    with pytest.raises(ValueError, match="fingerprint"):
        decode_catalog_snapshot(dumps_msgpack(tampered))


def test_decode_rejects_malformed_payload() -> None:
    """Reject bytes that are not a snapshot payload."""
    with pytest.raises(ValueError, match="Invalid WASM UDF catalog snapshot"):
        decode_catalog_snapshot(b"\xc1")
    with pytest.raises(ValueError, match="Invalid WASM UDF catalog snapshot"):
        decode_catalog_snapshot(dumps_msgpack({"entries": [{"id": "x"}]}))


def test_decode_tolerates_unknown_top_level_fields() -> None:
    """Accept forward-compatible additions at the snapshot level."""
    fingerprint = catalog_snapshot_payload(CatalogSnapshot.empty()).fingerprint
    payload = dumps_msgpack({"generation": 0, "fingerprint": fingerprint, "future": True})
    decoded = decode_catalog_snapshot(payload)
    assert decoded == WasmUdfCatalogSnapshot(fingerprint=fingerprint)
