"""Content-addressed persistence for WASM bytecode."""

from __future__ import annotations

import logging
from pathlib import Path

from obs.otel.constants import AttributeName
from obs.otel.scopes import SCOPE_STORAGE
from obs.otel.tracing import stage_span
from utils.file_io import read_bytes, write_bytes_atomic
from utils.hashing import hash64_from_bytes, hash_file_sha256, hash_sha256_hex
from wasm_udf.constants import BYTECODE_SUFFIX

_LOGGER = logging.getLogger(__name__)


def bytecode_checksum(bytecode: bytes) -> int:
    """Return the stable content identity for module bytecode.

    Returns
    -------
    int
        Non-negative signed 64-bit checksum (BLAKE2b-64, top bit cleared).
    """
    return hash64_from_bytes(bytes(bytecode))


class ContentAddressedStore:
    """Stores bytecode under a path derived only from its checksum."""

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root).expanduser()

    def path_for(self, checksum: int) -> Path:
        return self.root / f"{checksum}{BYTECODE_SUFFIX}"

    def contains(self, checksum: int) -> bool:
        return self.path_for(checksum).is_file()

    def persist(self, bytecode: bytes) -> Path:
        """Write bytecode under its checksum; repeated uploads are no-ops.

        Returns
        -------
        pathlib.Path
            Location of the stored bytecode.
        """
        payload = bytes(bytecode)
        checksum = bytecode_checksum(payload)
        path = self.path_for(checksum)
        if path.is_file() and hash_file_sha256(path) == hash_sha256_hex(payload):
            _LOGGER.debug("WASM bytecode %s already persisted at %s", checksum, path)
            return path
        with stage_span(
            "wasm_udf.store.persist",
            scope_name=SCOPE_STORAGE,
            attributes={AttributeName.FUNCTION_ID: checksum},
        ):
            try:
                write_bytes_atomic(path, payload)
            except OSError as exc:
                msg = f"Failed to persist WASM bytecode to {path}: {exc}"
                raise OSError(msg) from exc
        _LOGGER.info("Persisted WASM bytecode %s (%d bytes) to %s", checksum, len(payload), path)
        return path

    def load(self, checksum: int) -> bytes:
        """Read stored bytecode by checksum.

        Returns
        -------
        bytes
            Stored bytecode.

        Raises
        ------
        FileNotFoundError
            Raised when nothing is stored under the checksum.
        """
        path = self.path_for(checksum)
        if not path.is_file():
            msg = f"No WASM bytecode stored for checksum {checksum} under {self.root}."
            raise FileNotFoundError(msg)
        return read_bytes(path)


__all__ = [
    "ContentAddressedStore",
    "bytecode_checksum",
]
