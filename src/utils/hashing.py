"""Explicit hash utilities with stable serialization semantics."""

from __future__ import annotations

import hashlib
from typing import TYPE_CHECKING

from serde_msgspec import MSGPACK_ENCODER

if TYPE_CHECKING:
    from pathlib import Path

_INT63_MASK = (1 << 63) - 1


def hash_sha256_hex(payload: bytes, *, length: int | None = None) -> str:
    """Return SHA-256 hex digest, optionally truncated.

    Parameters
    ----------
    payload
        Raw bytes to hash.
    length
        Optional length of hex digest to return.

    Returns
    -------
    str
        Hex digest string (possibly truncated).
    """
    digest = hashlib.sha256(payload).hexdigest()
    return digest if length is None else digest[:length]


def hash64_from_bytes(payload: bytes) -> int:
    """Return a deterministic non-negative signed 64-bit hash for raw bytes.

    The value always fits a SQL ``BIGINT`` column.

    Parameters
    ----------
    payload
        Raw bytes to hash.

    Returns
    -------
    int
        Deterministic hash value in ``[0, 2**63)``.
    """
    digest = hashlib.blake2b(payload, digest_size=8).digest()
    unsigned = int.from_bytes(digest, "big", signed=False)
    return unsigned & _INT63_MASK


def hash_msgpack_canonical(payload: object) -> str:
    """Return SHA-256 hexdigest using MSGPACK_ENCODER (deterministic order).

    Parameters
    ----------
    payload
        Payload to encode.

    Returns
    -------
    str
        SHA-256 hexdigest.
    """
    return hash_sha256_hex(MSGPACK_ENCODER.encode(payload))


def hash_file_sha256(path: Path, chunk_size: int = 1024 * 1024) -> str:
    """Return SHA-256 hexdigest of file contents (chunked reading).

    Parameters
    ----------
    path
        File path to hash.
    chunk_size
        Read chunk size in bytes.

    Returns
    -------
    str
        SHA-256 hexdigest.
    """
    h = hashlib.sha256()
    with path.open("rb") as handle:
        while chunk := handle.read(chunk_size):
            h.update(chunk)
    return h.hexdigest()


__all__ = [
    "hash64_from_bytes",
    "hash_file_sha256",
    "hash_msgpack_canonical",
    "hash_sha256_hex",
]
