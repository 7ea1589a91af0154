"""Route store — the live, queryable route cache.

Holds one immutable ``RouteSnapshot`` (per-file groups plus their
flattened concatenation) and swaps it by reference, so readers see either
the old complete snapshot or the new one, never a mix.

Free-threading safety:
    - RouteSnapshot is a frozen dataclass built before publication
    - ``_snapshot`` is replaced, never mutated
    - status and the populated flag change together under ``_lock``
"""

import logging
import threading
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from prowl.routing.route import Route

logger = logging.getLogger("prowl.index")


class IndexStatus(Enum):
    """Lifecycle of the store.

    ``EMPTY`` until the first publish, ``SCANNING`` while a scan holds the
    single-flight guard, ``READY`` otherwise.
    """

    EMPTY = "empty"
    SCANNING = "scanning"
    READY = "ready"


@dataclass(frozen=True, slots=True)
class RouteSnapshot:
    """Per-file route groups and their flattened concatenation."""

    groups: Mapping[str, tuple[Route, ...]] = field(default_factory=lambda: MappingProxyType({}))
    routes: tuple[Route, ...] = ()

    @classmethod
    def from_groups(cls, groups: Mapping[str, Iterable[Route]]) -> "RouteSnapshot":
        """Build a snapshot, omitting empty groups."""
        frozen = {path: tuple(group) for path, group in groups.items()}
        frozen = {path: group for path, group in frozen.items() if group}
        flat = tuple(route for group in frozen.values() for route in group)
        return cls(groups=MappingProxyType(frozen), routes=flat)


_EMPTY = RouteSnapshot()

# Called with the published snapshot after every successful publish
PublishListener = Callable[[RouteSnapshot], None]


class RouteStore:
    """In-memory route cache with a single-flight scan guard.

    Usage::

        store = RouteStore(on_publish=persistence.write_through)
        if store.try_begin_scan():
            try:
                store.publish(RouteSnapshot.from_groups(groups))
            finally:
                store.end_scan()
    """

    __slots__ = ("_closed", "_listeners", "_lock", "_populated", "_snapshot", "_status")

    def __init__(self, on_publish: PublishListener | None = None) -> None:
        self._lock = threading.Lock()
        self._snapshot = _EMPTY
        self._status = IndexStatus.EMPTY
        self._closed = False
        self._populated = False
        self._listeners: list[PublishListener] = [on_publish] if on_publish else []

    # -- Reads (never block on a scan) --

    def current_routes(self) -> tuple[Route, ...]:
        return self._snapshot.routes

    def snapshot(self) -> RouteSnapshot:
        return self._snapshot

    @property
    def status(self) -> IndexStatus:
        return self._status

    def is_indexing(self) -> bool:
        """True while a scan is in flight or before the first publish."""
        with self._lock:
            return self._status is not IndexStatus.READY

    @property
    def is_populated(self) -> bool:
        return self._populated

    # -- Single-flight guard --

    def try_begin_scan(self) -> bool:
        """Claim the scan slot. Returns ``False`` if a scan is already running."""
        with self._lock:
            if self._status is IndexStatus.SCANNING:
                return False
            self._status = IndexStatus.SCANNING
            return True

    def end_scan(self) -> None:
        """Release the scan slot, whether or not the scan published."""
        with self._lock:
            self._status = IndexStatus.READY if self._populated else IndexStatus.EMPTY

    # -- Writes --

    def add_listener(self, listener: PublishListener) -> None:
        self._listeners.append(listener)

    def publish(self, snapshot: RouteSnapshot, *, notify: bool = True) -> None:
        """Replace the whole snapshot, then notify write-through listeners.

        Pass ``notify=False`` when the snapshot came from storage itself.
        """
        with self._lock:
            if self._closed:
                return
            self._snapshot = snapshot
            self._populated = True
        logger.debug("Published %d routes across %d files", len(snapshot.routes), len(snapshot.groups))
        if notify:
            self._notify(snapshot)

    def replace_files(self, updates: Mapping[str, Iterable[Route]]) -> RouteSnapshot:
        """Replace the groups of the given files and publish the result.

        An empty group removes the file. Groups of other files keep their
        identity and position; a file seen for the first time is appended.
        """
        with self._lock:
            if self._closed:
                return self._snapshot
            groups = dict(self._snapshot.groups)
            for path, routes in updates.items():
                group = tuple(routes)
                if group:
                    groups[path] = group
                else:
                    groups.pop(path, None)
            snapshot = RouteSnapshot.from_groups(groups)
            self._snapshot = snapshot
            self._populated = True
        logger.debug("Replaced %d file group(s); %d routes total", len(updates), len(snapshot.routes))
        self._notify(snapshot)
        return snapshot

    def clear(self) -> None:
        """Drop every route. Used when the workspace session ends."""
        with self._lock:
            self._snapshot = _EMPTY
            self._populated = False
            if self._status is not IndexStatus.SCANNING:
                self._status = IndexStatus.EMPTY

    def close(self) -> None:
        """Clear and refuse further writes.

        A scan still running when the session ends finishes without
        republishing or notifying listeners.
        """
        with self._lock:
            self._closed = True
        self.clear()

    @property
    def closed(self) -> bool:
        return self._closed

    def _notify(self, snapshot: RouteSnapshot) -> None:
        if self._closed:
            return
        for listener in self._listeners:
            try:
                listener(snapshot)
            except Exception:
                # Write-through is best-effort; the in-memory cache stays authoritative
                logger.exception("Route store listener failed")
