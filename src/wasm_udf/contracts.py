"""Serializable catalog snapshot contracts for diagnostics and persistence."""

from __future__ import annotations

from typing import TYPE_CHECKING

import msgspec

from serde_msgspec import StructBaseCompat, StructBaseStrict, dumps_msgpack, loads_msgpack
from utils.hashing import hash_msgpack_canonical
from wasm_udf.signature import serialize_signature

if TYPE_CHECKING:
    from wasm_udf.catalog import CatalogSnapshot

WASM_UDF_SNAPSHOT_VERSION = 1


class WasmUdfCatalogEntryRecord(StructBaseStrict, frozen=True):
    """One catalog entry with its persisted signature codes."""

    id: int
    namespace: str
    name: str
    return_code: str
    params_code: str = ""


class WasmUdfCatalogSnapshot(StructBaseCompat, frozen=True):
    """Typed summary of an installed catalog snapshot."""

    version: int = WASM_UDF_SNAPSHOT_VERSION
    generation: int = 0
    entries: tuple[WasmUdfCatalogEntryRecord, ...] = ()
    fingerprint: str = ""


def _fingerprint(generation: int, entries: tuple[WasmUdfCatalogEntryRecord, ...]) -> str:
    payload = {
        "generation": generation,
        "entries": [msgspec.structs.asdict(entry) for entry in entries],
    }
    return hash_msgpack_canonical(payload)


def catalog_snapshot_payload(snapshot: CatalogSnapshot) -> WasmUdfCatalogSnapshot:
    """Summarize a catalog snapshot as a contract struct.

    Entries are ordered by ``(namespace, name)`` so the fingerprint depends
    only on catalog contents and generation.

    Returns
    -------
    WasmUdfCatalogSnapshot
        Snapshot contract with a deterministic fingerprint.
    """
    records: list[WasmUdfCatalogEntryRecord] = []
    for entry in sorted(snapshot.entries, key=lambda item: (item.namespace, item.name)):
        return_code, params_code = serialize_signature(entry.signature)
        records.append(
            WasmUdfCatalogEntryRecord(
                id=entry.id,
                namespace=entry.namespace,
                name=entry.name,
                return_code=return_code,
                params_code=params_code,
            )
        )
    entries = tuple(records)
    return WasmUdfCatalogSnapshot(
        generation=snapshot.generation,
        entries=entries,
        fingerprint=_fingerprint(snapshot.generation, entries),
    )


def encode_catalog_snapshot(snapshot: CatalogSnapshot | WasmUdfCatalogSnapshot) -> bytes:
    """Encode a catalog snapshot summary as MessagePack.

    Returns
    -------
    bytes
        MessagePack payload.
    """
    if not isinstance(snapshot, WasmUdfCatalogSnapshot):
        snapshot = catalog_snapshot_payload(snapshot)
    return dumps_msgpack(snapshot)


def decode_catalog_snapshot(payload: bytes) -> WasmUdfCatalogSnapshot:
    """Decode a MessagePack catalog snapshot summary.

    Returns
    -------
    WasmUdfCatalogSnapshot
        Decoded snapshot contract.

    Raises
    ------
    ValueError
        Raised when the payload is malformed or its fingerprint does not
        match its contents.
    """
    try:
        decoded = loads_msgpack(payload, target_type=WasmUdfCatalogSnapshot)
    except (msgspec.DecodeError, msgspec.ValidationError) as exc:
        msg = f"Invalid WASM UDF catalog snapshot payload: {exc}"
        raise ValueError(msg) from exc
    expected = _fingerprint(decoded.generation, decoded.entries)
    if decoded.fingerprint != expected:
        msg = "WASM UDF catalog snapshot fingerprint does not match its entries."
        raise ValueError(msg)
    return decoded


__all__ = [
    "WASM_UDF_SNAPSHOT_VERSION",
    "WasmUdfCatalogEntryRecord",
    "WasmUdfCatalogSnapshot",
    "catalog_snapshot_payload",
    "decode_catalog_snapshot",
    "encode_catalog_snapshot",
]
