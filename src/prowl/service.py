"""RouteIndex — one workspace's route index, wired end to end.

Basic usage::

    from prowl import RouteIndex

    index = RouteIndex.for_workspace("path/to/project")
    index.start().result()          # restore or full scan
    index.search("get /api/users/42")

With live updates::

    index.watch()                   # watchdog-backed change source
    ...
    index.close()                   # stops watching, empties the cache
"""

from concurrent.futures import Executor, Future
from pathlib import Path

from prowl.config import IndexConfig
from prowl.events import ChangeEvent
from prowl.persistence import IndexPersistence
from prowl.query import QueryEngine
from prowl.routing.route import Route
from prowl.settings import ServicePrefixSettings
from prowl.store import RouteStore
from prowl.symbols.protocol import SymbolProvider
from prowl.updater import IndexUpdater, ScanResult


class RouteIndex:
    """Query surface plus index lifecycle for a single workspace.

    ``search`` never raises and never waits for a scan; pair it with
    ``is_indexing()`` to tell users the results may be incomplete.
    """

    __slots__ = ("_engine", "_watcher", "config", "persistence", "root", "settings", "store", "updater")

    def __init__(
        self,
        provider: SymbolProvider,
        *,
        root: str | Path | None = None,
        config: IndexConfig | None = None,
        settings: ServicePrefixSettings | None = None,
        persist: bool = True,
        executor: Executor | None = None,
    ) -> None:
        self.config = config or IndexConfig()
        self.root = Path(root) if root is not None else None
        storage = self.root / self.config.storage_dir if self.root is not None else None

        if settings is None:
            settings = ServicePrefixSettings(storage / self.config.settings_file if storage else None)
        self.settings = settings

        self.persistence: IndexPersistence | None = None
        if persist and storage is not None:
            self.persistence = IndexPersistence(storage / self.config.index_file, provider)

        self.store = RouteStore(self.persistence.write_through if self.persistence else None)
        self.updater = IndexUpdater(
            provider,
            self.store,
            persistence=self.persistence,
            config=self.config,
            executor=executor,
        )
        self._engine = QueryEngine(self.store, self.settings)
        self._watcher = None

    @classmethod
    def for_workspace(cls, root: str | Path, *, config: IndexConfig | None = None) -> "RouteIndex":
        """Index a Java/Kotlin source tree with the built-in source reader."""
        from prowl.symbols.source import SourceSymbolProvider

        config = config or IndexConfig()
        provider = SourceSymbolProvider(root, extensions=config.source_extensions)
        return cls(provider, root=provider.root, config=config)

    # -- Query surface --

    def search(self, query: str, limit: int | None = None) -> list[Route]:
        return self._engine.search(query, limit)

    def routes(self) -> tuple[Route, ...]:
        return self.store.current_routes()

    def is_indexing(self) -> bool:
        return self.store.is_indexing()

    def force_rebuild(self) -> Future[ScanResult] | None:
        return self.updater.force_rebuild()

    # -- Lifecycle --

    def start(self) -> Future[ScanResult] | None:
        return self.updater.start()

    def on_changes(self, events: list[ChangeEvent]) -> Future[ScanResult] | None:
        return self.updater.on_changes(events)

    def watch(self) -> None:
        """Start a watchdog change source feeding ``on_changes``."""
        if self.root is None:
            msg = "watch() needs a workspace root"
            raise ValueError(msg)
        from prowl.watch import WorkspaceWatcher

        if self._watcher is None:
            self._watcher = WorkspaceWatcher(
                self.root,
                self.updater.on_changes,
                debounce=self.config.debounce_seconds,
                extensions=self.config.source_extensions,
            )
        self._watcher.start()

    def close(self) -> None:
        """End the workspace session: stop watching and drop the cache."""
        if self._watcher is not None:
            self._watcher.stop()
        self.updater.close()
        self.store.close()
