"""Workspace change source built on watchdog.

Watches the workspace tree, debounces bursts of filesystem events, and
hands each quiet-period batch of ``ChangeEvent`` to a callback (normally
``IndexUpdater.on_changes``)::

    watcher = WorkspaceWatcher(root, updater.on_changes, debounce=0.15)
    watcher.start()
    ...
    watcher.stop()

Moves are reported as a deletion of the old path plus a creation of the
new one.
"""

import logging
from collections.abc import Callable, Sequence
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from prowl._internal.debounce import Debouncer
from prowl.events import ChangeEvent, ChangeKind
from prowl.symbols.source import EXCLUDE_DIRS

logger = logging.getLogger("prowl.watch")


class _ChangeHandler(FileSystemEventHandler):
    """Translate watchdog events into ``ChangeEvent`` pushes."""

    def __init__(self, sink: Callable[[ChangeEvent], None], extensions: Sequence[str]) -> None:
        super().__init__()
        self._sink = sink
        self._extensions = tuple(extensions)

    def _emit(self, path: str | bytes, kind: ChangeKind) -> None:
        if isinstance(path, bytes):
            path = path.decode()
        if not path.endswith(self._extensions):
            return
        if any(part in EXCLUDE_DIRS for part in Path(path).parts):
            return
        self._sink(ChangeEvent(path=path, kind=kind))

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._emit(event.src_path, ChangeKind.CREATED)

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._emit(event.src_path, ChangeKind.MODIFIED)

    def on_deleted(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._emit(event.src_path, ChangeKind.DELETED)

    def on_moved(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._emit(event.src_path, ChangeKind.DELETED)
            self._emit(event.dest_path, ChangeKind.CREATED)


class WorkspaceWatcher:
    """Recursive watchdog observer with debounced, batched delivery."""

    __slots__ = ("_debouncer", "_handler", "_observer", "root")

    def __init__(
        self,
        root: str | Path,
        on_batch: Callable[[list[ChangeEvent]], object],
        *,
        debounce: float = 0.15,
        extensions: Sequence[str] = (".java", ".kt"),
    ) -> None:
        self.root = Path(root).resolve()
        self._debouncer = Debouncer(debounce, on_batch, key=lambda e: e.path)
        self._handler = _ChangeHandler(self._debouncer.push, extensions)
        self._observer: Observer | None = None

    def start(self) -> None:
        if self._observer is not None:
            return
        observer = Observer()
        observer.schedule(self._handler, str(self.root), recursive=True)
        observer.daemon = True
        observer.start()
        self._observer = observer
        logger.info("Watching %s", self.root)

    def stop(self) -> None:
        observer, self._observer = self._observer, None
        if observer is None:
            return
        observer.stop()
        observer.join(timeout=5)
        self._debouncer.cancel()

    @property
    def is_running(self) -> bool:
        return self._observer is not None
