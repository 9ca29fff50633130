"""Unified environment variable resolution utilities."""

from __future__ import annotations

import logging
import os
from typing import overload

_LOGGER = logging.getLogger(__name__)

_TRUE_VALUES = frozenset({"1", "true", "yes", "y"})
_FALSE_VALUES = frozenset({"0", "false", "no", "n"})
_DISABLED_VALUES = frozenset({"none", "off", "unbounded"})


def env_value(name: str) -> str | None:
    """Return stripped env var value, or None if empty/not set.

    Parameters
    ----------
    name
        Environment variable name.

    Returns
    -------
    str | None
        Stripped value or None.
    """
    raw = os.environ.get(name)
    if raw is None:
        return None
    stripped = raw.strip()
    return stripped if stripped else None


@overload
def env_bool(name: str) -> bool | None: ...


@overload
def env_bool(name: str, *, default: bool) -> bool: ...


def env_bool(name: str, *, default: bool | None = None) -> bool | None:
    """Parse environment variable as boolean.

    Invalid values log a warning and resolve to ``default``.

    Parameters
    ----------
    name
        Environment variable name.
    default
        Default value if not set or invalid.

    Returns
    -------
    bool | None
        Parsed boolean or default/None.
    """
    raw = os.environ.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    _LOGGER.warning("Invalid boolean for %s: %r", name, raw)
    return default


@overload
def env_int(name: str) -> int | None: ...


@overload
def env_int(name: str, *, default: int) -> int: ...


@overload
def env_int(name: str, *, default: int | None) -> int | None: ...


def env_int(name: str, *, default: int | None = None) -> int | None:
    """Parse environment variable as integer with error logging.

    Parameters
    ----------
    name
        Environment variable name.
    default
        Default value if not set or invalid.

    Returns
    -------
    int | None
        Parsed integer or default/None.
    """
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        _LOGGER.warning("Invalid integer for %s: %r", name, raw)
        return default


def env_optional_limit(name: str, *, default: int | None) -> int | None:
    """Parse a non-negative limit where ``none``/``off`` disables the limit.

    Returns
    -------
    int | None
        Parsed limit, ``None`` when disabled, or ``default`` when unset/invalid.
    """
    raw = env_value(name)
    if raw is None:
        return default
    if raw.lower() in _DISABLED_VALUES:
        return None
    try:
        value = int(raw)
    except ValueError:
        _LOGGER.warning("Invalid limit for %s: %r", name, raw)
        return default
    if value < 0:
        _LOGGER.warning("Negative limit for %s: %r", name, raw)
        return default
    return value


__all__ = [
    "env_bool",
    "env_int",
    "env_optional_limit",
    "env_value",
]
