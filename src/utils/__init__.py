"""Shared utilities for wasm-udf."""

from utils.env_utils import env_bool, env_int, env_optional_limit, env_value
from utils.file_io import read_bytes, write_bytes_atomic
from utils.hashing import (
    hash64_from_bytes,
    hash_file_sha256,
    hash_msgpack_canonical,
    hash_sha256_hex,
)

__all__ = [
    "env_bool",
    "env_int",
    "env_optional_limit",
    "env_value",
    "hash64_from_bytes",
    "hash_file_sha256",
    "hash_msgpack_canonical",
    "hash_sha256_hex",
    "read_bytes",
    "write_bytes_atomic",
]
