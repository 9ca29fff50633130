"""File I/O utilities with consistent write semantics."""

from __future__ import annotations

import contextlib
import os
import tempfile
from pathlib import Path


def read_bytes(path: Path) -> bytes:
    """Read a binary file.

    Parameters
    ----------
    path
        Path to the file.

    Returns
    -------
    bytes
        File contents.
    """
    return path.read_bytes()


def write_bytes_atomic(path: Path, payload: bytes, *, mode: int = 0o644) -> None:
    """Write bytes to ``path`` through a sibling temp file and an atomic rename.

    Readers never observe a partially written file. The parent directory is
    created when missing.

    Parameters
    ----------
    path
        Destination path.
    payload
        Bytes to write.
    mode
        Permission bits applied to the final file.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(payload)
            handle.flush()
            os.fsync(handle.fileno())
        tmp_path.chmod(mode)
        tmp_path.replace(path)
    except BaseException:
        with contextlib.suppress(FileNotFoundError):
            tmp_path.unlink()
        raise


__all__ = [
    "read_bytes",
    "write_bytes_atomic",
]
