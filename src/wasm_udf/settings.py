"""Runtime settings for WASM UDF execution and bytecode storage."""

from __future__ import annotations

import logging
from pathlib import Path

from serde_msgspec import StructBaseStrict
from utils.env_utils import env_bool, env_optional_limit, env_value
from wasm_udf.constants import (
    DEFAULT_FUEL_PER_CALL,
    ENTRY_POINT_NAME,
    ENV_ENTRY_POINT,
    ENV_FUEL_PER_CALL,
    ENV_PERSIST_ON_REGISTER,
    ENV_STORE_DIR,
)
from wasm_udf.runtime import WasmRuntime
from wasm_udf.store import ContentAddressedStore

_LOGGER = logging.getLogger(__name__)


class WasmUdfSettings(StructBaseStrict, frozen=True):
    """Execution and storage policy for WASM UDFs.

    ``fuel_per_call=None`` disables the per-call execution bound.
    """

    entry_point: str = ENTRY_POINT_NAME
    fuel_per_call: int | None = DEFAULT_FUEL_PER_CALL
    store_root: str | None = None
    persist_on_register: bool = False

    def build_runtime(self) -> WasmRuntime:
        """Return a runtime configured with this policy.

        Returns
        -------
        WasmRuntime
            Runtime using ``entry_point`` and ``fuel_per_call``.
        """
        return WasmRuntime(fuel_per_call=self.fuel_per_call, entry_point=self.entry_point)

    def build_store(self) -> ContentAddressedStore | None:
        """Return the configured bytecode store, if any.

        Returns
        -------
        ContentAddressedStore | None
            Store rooted at ``store_root``, or ``None`` when unset.
        """
        if self.store_root is None:
            return None
        return ContentAddressedStore(Path(self.store_root))

    def registration_store(self) -> ContentAddressedStore | None:
        """Return the store registrations should persist into.

        Returns
        -------
        ContentAddressedStore | None
            Configured store when ``persist_on_register`` is set.
        """
        if not self.persist_on_register:
            return None
        store = self.build_store()
        if store is None:
            _LOGGER.warning(
                "persist_on_register is set without a store root; bytecode will not be persisted"
            )
        return store


def wasm_udf_settings_from_env() -> WasmUdfSettings:
    """Build settings from ``WASM_UDF_*`` environment variables.

    Returns
    -------
    WasmUdfSettings
        Settings with unset or invalid values left at their defaults.
    """
    fuel = env_optional_limit(ENV_FUEL_PER_CALL, default=DEFAULT_FUEL_PER_CALL)
    if fuel == 0:
        _LOGGER.warning(
            "Zero fuel for %s; using default %d", ENV_FUEL_PER_CALL, DEFAULT_FUEL_PER_CALL
        )
        fuel = DEFAULT_FUEL_PER_CALL
    return WasmUdfSettings(
        entry_point=env_value(ENV_ENTRY_POINT) or ENTRY_POINT_NAME,
        fuel_per_call=fuel,
        store_root=env_value(ENV_STORE_DIR),
        persist_on_register=env_bool(ENV_PERSIST_ON_REGISTER, default=False),
    )


__all__ = [
    "WasmUdfSettings",
    "wasm_udf_settings_from_env",
]
