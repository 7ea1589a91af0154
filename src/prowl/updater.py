"""Index updater — decides when and how the route store is rescanned.

Triggers and what they do::

    start()            restore from disk; full scan if that fails
    on_changes(batch)  incremental rescan of the changed files (throttled)
    update_files(ps)   incremental rescan, no throttle
    force_rebuild()    full scan, no throttle

All scans run on one background worker. The store's single-flight guard
is claimed when a scan is *scheduled*, so a trigger that arrives while
another scan is queued or running is dropped, not queued. Every trigger
returns the scheduled ``Future`` or ``None`` when nothing was scheduled.
"""

import logging
import time
from collections.abc import Callable, Iterable
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

from prowl.config import IndexConfig
from prowl.errors import ScanFailure
from prowl.events import ChangeEvent
from prowl.persistence import IndexPersistence
from prowl.routing.route import IndexState, Route
from prowl.scanner import group_by_file, scan_file, scan_workspace
from prowl.store import RouteSnapshot, RouteStore
from prowl.symbols.protocol import SymbolProvider

logger = logging.getLogger("prowl.index")


@dataclass(frozen=True, slots=True)
class ScanResult:
    """Outcome of one scheduled job."""

    kind: str  # "full", "incremental", or "restore"
    route_count: int = 0
    files: tuple[str, ...] = ()
    error: ScanFailure | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class IndexUpdater:
    """Schedules full and incremental scans against a ``RouteStore``."""

    __slots__ = (
        "_clock",
        "_config",
        "_executor",
        "_last_indexed",
        "_owns_executor",
        "_persistence",
        "_provider",
        "_store",
    )

    def __init__(
        self,
        provider: SymbolProvider,
        store: RouteStore,
        *,
        persistence: IndexPersistence | None = None,
        config: IndexConfig | None = None,
        executor: Executor | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._provider = provider
        self._store = store
        self._persistence = persistence
        self._config = config or IndexConfig()
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(max_workers=1, thread_name_prefix="prowl-index")
        self._clock = clock
        # Wall-clock seconds of the last successful index, None before the first
        self._last_indexed: float | None = None

    @property
    def last_indexed(self) -> float | None:
        return self._last_indexed

    # -- Triggers --

    def start(self) -> Future[ScanResult] | None:
        """Host readiness signal: restore the saved index, or scan from scratch."""
        return self._schedule("restore", self._startup)

    def force_rebuild(self) -> Future[ScanResult] | None:
        """Full rescan, ignoring the minimum interval."""
        return self._schedule("full", self._full_scan)

    def on_changes(self, events: Iterable[ChangeEvent]) -> Future[ScanResult] | None:
        """Handle one batch of file change notifications.

        The batch is narrowed to likely controller sources, then dropped if
        the index has never been built or was rebuilt within
        ``min_interval`` seconds.
        """
        paths = tuple(dict.fromkeys(e.path for e in events if self.is_candidate(e.path)))
        if not paths:
            return None
        if self._last_indexed is None:
            logger.debug("Index not built yet, ignoring %d changed file(s)", len(paths))
            return None
        elapsed = self._clock() - self._last_indexed
        if elapsed < self._config.min_interval:
            logger.debug(
                "Last index %.0fs ago (< %.0fs), ignoring %d changed file(s)",
                elapsed,
                self._config.min_interval,
                len(paths),
            )
            return None
        return self.update_files(paths)

    def update_files(self, paths: Iterable[str]) -> Future[ScanResult] | None:
        """Incremental rescan of exactly *paths*, ignoring the minimum interval."""
        targets = tuple(dict.fromkeys(self._provider.canonical_path(p) for p in paths))
        if not targets:
            return None
        return self._schedule("incremental", lambda: self._incremental(targets))

    def is_candidate(self, path: str) -> bool:
        """Cheap prefilter: a supported extension and a controller-ish file name."""
        name = Path(path).name
        if not name.endswith(self._config.source_extensions):
            return False
        lowered = name.lower()
        return any(hint in lowered for hint in self._config.controller_name_hints)

    def wait_idle(self, timeout: float | None = None) -> None:
        """Block until every job queued so far has finished."""
        self._executor.submit(lambda: None).result(timeout)

    def close(self) -> None:
        """Stop accepting work. Pending jobs are cancelled."""
        if self._owns_executor:
            self._executor.shutdown(wait=False, cancel_futures=True)

    # -- Scheduling --

    def _schedule(self, kind: str, job: Callable[[], ScanResult]) -> Future[ScanResult] | None:
        if not self._store.try_begin_scan():
            logger.info("Scan already in progress, skipping %s scan", kind)
            return None
        try:
            return self._executor.submit(self._run, kind, job)
        except RuntimeError:
            # Executor already shut down
            self._store.end_scan()
            logger.debug("Updater closed, dropping %s scan", kind)
            return None

    def _run(self, kind: str, job: Callable[[], ScanResult]) -> ScanResult:
        started = time.perf_counter()
        try:
            result = job()
        except Exception as exc:
            failure = ScanFailure(f"{kind} scan failed: {exc}")
            failure.__cause__ = exc
            logger.exception("%s scan failed; keeping previous routes", kind.capitalize())
            return ScanResult(kind=kind, error=failure)
        finally:
            self._store.end_scan()
        logger.info(
            "%s scan finished: %d routes in %.2fs",
            kind.capitalize(),
            result.route_count,
            time.perf_counter() - started,
        )
        if result.kind == "restore" and result.files:
            # Adopted a saved index; check it against the files on disk
            self.update_files(result.files)
        return result

    # -- Jobs (run on the worker, guard held) --

    def _full_scan(self) -> ScanResult:
        routes = scan_workspace(self._provider)
        snapshot = RouteSnapshot.from_groups(group_by_file(routes))
        self._store.publish(snapshot)
        self._last_indexed = self._clock()
        return ScanResult(kind="full", route_count=len(snapshot.routes), files=tuple(snapshot.groups))

    def _incremental(self, paths: tuple[str, ...]) -> ScanResult:
        updates: dict[str, list[Route]] = {}
        for path in paths:
            file = self._provider.find_file(path)
            updates[path] = scan_file(file) if file is not None else []
        snapshot = self._store.replace_files(updates)
        self._last_indexed = self._clock()
        return ScanResult(kind="incremental", route_count=len(snapshot.routes), files=paths)

    def _startup(self) -> ScanResult:
        state = self._persistence.load() if self._persistence is not None else IndexState()
        if not state.is_empty:
            restored = self._persistence.restore(state.routes)
            if restored and len(restored) == len(state.routes):
                snapshot = RouteSnapshot.from_groups(group_by_file(restored))
                self._store.publish(snapshot, notify=False)
                self._last_indexed = state.last_index_time / 1000
                logger.info("Restored %d routes from %s", len(restored), self._persistence.path)
                drifted = tuple(sorted(self._persistence.drifted_files(state)))
                return ScanResult(kind="restore", route_count=len(snapshot.routes), files=drifted)
            logger.info(
                "Saved index only partially resolved (%d of %d routes), rescanning",
                len(restored),
                len(state.routes),
            )
        result = self._full_scan()
        return ScanResult(kind="full", route_count=result.route_count, files=result.files)
