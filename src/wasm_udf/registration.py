"""Administrative registration path for new WASM UDFs."""

from __future__ import annotations

import logging

from wasm_udf.catalog import normalize_identifier
from wasm_udf.metadata import WasmFunctionRow
from wasm_udf.runtime import WasmRuntime
from wasm_udf.signature import extract_signature, serialize_signature
from wasm_udf.store import ContentAddressedStore, bytecode_checksum

_LOGGER = logging.getLogger(__name__)


def prepare_registration(
    runtime: WasmRuntime,
    bytecode: bytes,
    namespace: str,
    name: str,
    *,
    store: ContentAddressedStore | None = None,
) -> WasmFunctionRow:
    """Validate bytecode and build the metadata row to persist for it.

    The module is compiled and its signature extracted before anything is
    written, so invalid bytecode never reaches the store.

    Returns
    -------
    WasmFunctionRow
        Row carrying the checksum id and serialized signature.
    """
    payload = bytes(bytecode)
    extracted = extract_signature(runtime, payload)
    return_code, params_code = serialize_signature(extracted.signature)
    checksum = bytecode_checksum(payload)
    if store is not None:
        store.persist(payload)
    row = WasmFunctionRow(
        id=checksum,
        namespace=normalize_identifier(namespace),
        name=normalize_identifier(name),
        bytecode=payload,
        return_code=return_code,
        params_code=params_code,
    )
    _LOGGER.info(
        "Prepared WASM UDF %s.%s (id=%d, signature=%s%s)",
        row.namespace,
        row.name,
        checksum,
        return_code,
        params_code,
    )
    return row


__all__ = ["prepare_registration"]
