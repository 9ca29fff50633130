"""Hot-swappable catalog of WASM UDFs.

A ``CatalogSnapshot`` is built completely before anyone can see it and is
never modified afterwards. ``CatalogHandle`` holds a single reference to the
current snapshot; readers take that reference without locking, and a reload
replaces it with one assignment. A reader holding an older snapshot keeps a
consistent (if stale) view.
"""

from __future__ import annotations

import itertools
import logging
import threading
import time
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType

from obs.otel.constants import AttributeName
from obs.otel.metrics import record_reload
from obs.otel.scopes import SCOPE_CATALOG
from obs.otel.tracing import set_span_attributes, stage_span
from wasm_udf.errors import (
    CatalogReloadError,
    DuplicateFunctionError,
    RowLoadFailure,
    WasmUdfError,
)
from wasm_udf.metadata import MetadataSource, WasmFunctionRow
from wasm_udf.runtime import CompiledModule, WasmRuntime
from wasm_udf.signature import FunctionSignature, extract_signature, resolve_signature
from wasm_udf.store import bytecode_checksum

_LOGGER = logging.getLogger(__name__)


def normalize_identifier(value: str) -> str:
    """Return the case-normalized form used for namespace and name keys.

    Returns
    -------
    str
        Lower-cased identifier.
    """
    return value.lower()


@dataclass(frozen=True)
class CatalogEntry:
    """One loaded UDF; owned by the snapshot that contains it."""

    id: int
    namespace: str
    name: str
    compiled: CompiledModule
    signature: FunctionSignature

    @property
    def qualified_name(self) -> str:
        return f"{self.namespace}.{self.name}"


@dataclass(frozen=True)
class CatalogSnapshot:
    """Point-in-time set of UDFs with id and name indices built together."""

    entries: tuple[CatalogEntry, ...]
    by_id: Mapping[int, CatalogEntry]
    by_name: Mapping[str, Mapping[str, CatalogEntry]]
    generation: int = 0

    @classmethod
    def build(cls, entries: Sequence[CatalogEntry], *, generation: int = 0) -> CatalogSnapshot:
        """Index entries into a new snapshot.

        Returns
        -------
        CatalogSnapshot
            Snapshot whose three views cover exactly ``entries``.

        Raises
        ------
        DuplicateFunctionError
            Raised when two entries share an id or a (namespace, name) key.
        """
        by_id: dict[int, CatalogEntry] = {}
        by_name: dict[str, dict[str, CatalogEntry]] = {}
        for entry in entries:
            if entry.id in by_id:
                msg = (
                    f"Duplicate WASM function id {entry.id}: "
                    f"{by_id[entry.id].qualified_name} and {entry.qualified_name}."
                )
                raise DuplicateFunctionError(msg)
            names = by_name.setdefault(entry.namespace, {})
            if entry.name in names:
                msg = f"Duplicate WASM function name {entry.qualified_name}."
                raise DuplicateFunctionError(msg)
            by_id[entry.id] = entry
            names[entry.name] = entry
        return cls(
            entries=tuple(entries),
            by_id=MappingProxyType(by_id),
            by_name=MappingProxyType(
                {namespace: MappingProxyType(names) for namespace, names in by_name.items()}
            ),
            generation=generation,
        )

    @classmethod
    def empty(cls) -> CatalogSnapshot:
        return cls.build(())

    def lookup_by_id(self, function_id: int) -> CatalogEntry | None:
        return self.by_id.get(function_id)

    def lookup_by_name(self, namespace: str, name: str) -> CatalogEntry | None:
        names = self.by_name.get(normalize_identifier(namespace))
        if names is None:
            return None
        return names.get(normalize_identifier(name))

    def namespace_entries(self, namespace: str) -> tuple[CatalogEntry, ...]:
        names = self.by_name.get(normalize_identifier(namespace), {})
        return tuple(names.values())

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[CatalogEntry]:
        return iter(self.entries)


def load_entry(runtime: WasmRuntime, row: WasmFunctionRow) -> CatalogEntry:
    """Compile one metadata row into a catalog entry.

    Returns
    -------
    CatalogEntry
        Entry with a compiled module and settled signature.
    """
    if row.has_signature:
        extracted = resolve_signature(
            runtime,
            row.bytecode,
            return_code=row.return_code,
            params_code=row.params_code,
        )
    else:
        extracted = extract_signature(runtime, row.bytecode)
    function_id = row.id if row.id is not None else bytecode_checksum(row.bytecode)
    return CatalogEntry(
        id=function_id,
        namespace=normalize_identifier(row.namespace),
        name=normalize_identifier(row.name),
        compiled=extracted.compiled,
        signature=extracted.signature,
    )


def build_snapshot(
    runtime: WasmRuntime,
    rows: Sequence[WasmFunctionRow],
    *,
    generation: int = 0,
) -> CatalogSnapshot:
    """Build a complete snapshot from metadata rows, or fail as a whole.

    Every row is attempted so that one reload reports all bad rows.

    Returns
    -------
    CatalogSnapshot
        Fully built snapshot.

    Raises
    ------
    CatalogReloadError
        Raised when any row fails to load or keys collide.
    """
    entries: list[CatalogEntry] = []
    failures: list[RowLoadFailure] = []
    seen_ids: set[int] = set()
    seen_names: set[tuple[str, str]] = set()
    for index, row in enumerate(rows):
        try:
            entry = load_entry(runtime, row)
            key = (entry.namespace, entry.name)
            if entry.id in seen_ids:
                msg = f"Duplicate WASM function id {entry.id} at {entry.qualified_name}."
                raise DuplicateFunctionError(msg)
            if key in seen_names:
                msg = f"Duplicate WASM function name {entry.qualified_name}."
                raise DuplicateFunctionError(msg)
            seen_ids.add(entry.id)
            seen_names.add(key)
            entries.append(entry)
        except WasmUdfError as exc:
            failures.append(
                RowLoadFailure(
                    index=index,
                    function_id=row.id,
                    namespace=row.namespace,
                    name=row.name,
                    error=exc,
                )
            )
    if failures:
        raise CatalogReloadError(failures) from failures[0].error
    return CatalogSnapshot.build(entries, generation=generation)


class CatalogHandle:
    """Owner of the current catalog snapshot.

    Reads never lock. Installs are serialized by a writer lock; when reloads
    race, the last one to install wins and the others are simply superseded.
    """

    def __init__(self, runtime: WasmRuntime, snapshot: CatalogSnapshot | None = None) -> None:
        self.runtime = runtime
        self._snapshot = snapshot if snapshot is not None else CatalogSnapshot.empty()
        self._generations = itertools.count(self._snapshot.generation + 1)
        self._install_lock = threading.Lock()

    def current(self) -> CatalogSnapshot:
        return self._snapshot

    def lookup_by_id(self, function_id: int) -> CatalogEntry | None:
        return self._snapshot.lookup_by_id(function_id)

    def lookup_by_name(self, namespace: str, name: str) -> CatalogEntry | None:
        return self._snapshot.lookup_by_name(namespace, name)

    def install(self, snapshot: CatalogSnapshot) -> CatalogSnapshot:
        """Make ``snapshot`` current and return the snapshot it replaced.

        Returns
        -------
        CatalogSnapshot
            Previously installed snapshot.
        """
        with self._install_lock:
            previous = self._snapshot
            self._snapshot = snapshot
        return previous

    def reload(self, source: MetadataSource) -> CatalogSnapshot:
        """Rebuild the catalog from ``source`` and install it on full success.

        On any failure the previously installed snapshot stays current.

        Returns
        -------
        CatalogSnapshot
            Newly installed snapshot.
        """
        generation = next(self._generations)
        start = time.monotonic()
        status = "error"
        try:
            with stage_span(
                "wasm_udf.catalog.reload",
                scope_name=SCOPE_CATALOG,
                attributes={AttributeName.GENERATION: generation},
            ) as span:
                rows = source.fetch_rows()
                set_span_attributes(span, {AttributeName.ROW_COUNT: len(rows)})
                _LOGGER.info(
                    "Reloading WASM UDF catalog generation %d from %d row(s)",
                    generation,
                    len(rows),
                )
                try:
                    snapshot = build_snapshot(self.runtime, rows, generation=generation)
                except CatalogReloadError as exc:
                    set_span_attributes(span, {AttributeName.FAILURE_COUNT: len(exc.failures)})
                    _LOGGER.warning(
                        "WASM UDF catalog reload %d aborted; keeping generation %d: %s",
                        generation,
                        self._snapshot.generation,
                        exc,
                    )
                    raise
                if not snapshot.entries:
                    _LOGGER.warning(
                        "Installing an empty WASM UDF catalog (generation %d)", generation
                    )
                self.install(snapshot)
                status = "ok"
        finally:
            record_reload(status, time.monotonic() - start)
        _LOGGER.info(
            "Installed WASM UDF catalog generation %d with %d function(s)",
            generation,
            len(snapshot),
        )
        return snapshot


__all__ = [
    "CatalogEntry",
    "CatalogHandle",
    "CatalogSnapshot",
    "build_snapshot",
    "load_entry",
    "normalize_identifier",
]
