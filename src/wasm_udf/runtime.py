"""wasmtime execution engine binding for WASM UDFs.

One ``wasmtime.Engine`` is shared by every compiled module. Compiled modules
are safe to share across threads; stores and instances are not, so every call
builds its own store and instance from the shared module. Per-call fuel bounds
execution time: a call that exhausts it traps and is reported as a timeout.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import wasmtime

from wasm_udf.constants import DEFAULT_FUEL_PER_CALL, ENTRY_POINT_NAME
from wasm_udf.errors import EntryNotFoundError, ExecutionFaultError, InvalidBytecodeError

_FUEL_TRAP_MARKERS = ("all fuel consumed", "out of fuel")


class WasmRuntime:
    """Owns the execution engine and the call policy shared by all modules."""

    def __init__(
        self,
        *,
        fuel_per_call: int | None = DEFAULT_FUEL_PER_CALL,
        entry_point: str = ENTRY_POINT_NAME,
    ) -> None:
        if fuel_per_call is not None and fuel_per_call <= 0:
            msg = f"fuel_per_call must be positive or None, got {fuel_per_call}."
            raise ValueError(msg)
        config = wasmtime.Config()
        config.consume_fuel = fuel_per_call is not None
        self._engine = wasmtime.Engine(config)
        self.fuel_per_call = fuel_per_call
        self.entry_point = entry_point

    @property
    def engine(self) -> wasmtime.Engine:
        return self._engine

    def compile(self, bytecode: bytes) -> CompiledModule:
        """Compile raw module bytecode.

        Returns
        -------
        CompiledModule
            Compiled module bound to this runtime.

        Raises
        ------
        InvalidBytecodeError
            Raised when the bytecode fails to parse or validate, or when the
            module declares imports (UDF modules run without host functions).
        """
        if not isinstance(bytecode, (bytes, bytearray, memoryview)):
            msg = f"WASM bytecode must be bytes, got {type(bytecode).__name__}."
            raise InvalidBytecodeError(msg)
        try:
            module = wasmtime.Module(self._engine, bytes(bytecode))
        except wasmtime.WasmtimeError as exc:
            msg = f"Invalid WASM bytecode: {exc}"
            raise InvalidBytecodeError(msg) from exc
        imports = module.imports
        if imports:
            names = ", ".join(f"{item.module}.{item.name}" for item in imports)
            msg = f"WASM UDF modules must not declare imports (found: {names})."
            raise InvalidBytecodeError(msg)
        return CompiledModule(runtime=self, module=module)

    def new_store(self) -> wasmtime.Store:
        """Return a fresh store charged with the per-call fuel budget.

        Returns
        -------
        wasmtime.Store
            Store owned by a single call.
        """
        store = wasmtime.Store(self._engine)
        if self.fuel_per_call is not None:
            store.set_fuel(self.fuel_per_call)
        return store


@dataclass(frozen=True)
class CompiledModule:
    """Compiled module handle; immutable and shareable across threads."""

    runtime: WasmRuntime
    module: wasmtime.Module

    def export_function_type(self, name: str) -> wasmtime.FuncType:
        """Return the declared type of an exported function.

        Returns
        -------
        wasmtime.FuncType
            Declared parameter and result types.

        Raises
        ------
        EntryNotFoundError
            Raised when no function export with ``name`` exists.
        """
        for export in self.module.exports:
            if export.name != name:
                continue
            export_type = export.type
            if isinstance(export_type, wasmtime.FuncType):
                return export_type
        raise EntryNotFoundError(name)

    def instantiate(self) -> ModuleInstance:
        """Create an isolated instance for one call.

        Returns
        -------
        ModuleInstance
            Fresh store, instance and entry-point function.

        Raises
        ------
        ExecutionFaultError
            Raised when instantiation fails or the start function traps.
        EntryNotFoundError
            Raised when the entry point is not an exported function.
        """
        store = self.runtime.new_store()
        try:
            instance = wasmtime.Instance(store, self.module, [])
        except (wasmtime.Trap, wasmtime.WasmtimeError) as exc:
            msg = f"Failed to initialize WASM module: {exc}"
            raise ExecutionFaultError(msg, reason="instantiate") from exc
        entry_point = self.runtime.entry_point
        try:
            func = instance.exports(store)[entry_point]
        except KeyError as exc:
            raise EntryNotFoundError(entry_point) from exc
        if not isinstance(func, wasmtime.Func):
            raise EntryNotFoundError(entry_point)
        return ModuleInstance(store=store, func=func)


@dataclass(frozen=True)
class ModuleInstance:
    """A live instance; owned by exactly one caller for one call."""

    store: wasmtime.Store
    func: wasmtime.Func

    def call(self, args: Sequence[int | float]) -> object:
        """Call the entry point with already-marshaled arguments.

        Returns
        -------
        object
            Raw result returned by wasmtime.

        Raises
        ------
        ExecutionFaultError
            Raised when the module traps or exhausts its fuel.
        """
        try:
            return self.func(self.store, *args)
        except (wasmtime.Trap, wasmtime.WasmtimeError) as exc:
            if _is_fuel_exhausted(exc):
                msg = f"WASM UDF exceeded its execution budget: {exc}"
                raise ExecutionFaultError(msg, reason="timeout") from exc
            msg = f"WASM UDF trapped: {exc}"
            raise ExecutionFaultError(msg, reason="trap") from exc


def _is_fuel_exhausted(exc: Exception) -> bool:
    trap_code = getattr(exc, "trap_code", None)
    if trap_code is not None and getattr(trap_code, "name", "") == "OUT_OF_FUEL":
        return True
    message = str(exc).lower()
    return any(marker in message for marker in _FUEL_TRAP_MARKERS)


__all__ = [
    "CompiledModule",
    "ModuleInstance",
    "WasmRuntime",
]
