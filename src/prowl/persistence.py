"""Index persistence — save, load, and restore the route index.

The index is written as one XML document per workspace
(``.prowl/route-index.xml`` by default)::

    <routeIndex lastIndexTime="1760745600000">
      <routes>
        <route method="GET" path="/api/users/{id}" className="UserController"
               memberName="get" moduleName="user-service"
               filePath="/ws/src/UserController.java" memberSignature="get(Long)" />
      </routes>
      <fileTimestamps>
        <file path="/ws/src/UserController.java" timestamp="1760745590000" />
      </fileTimestamps>
    </routeIndex>

Symbol handles cannot be stored. ``restore()`` re-locates each member by
file path, type name, and exact signature; entries that no longer resolve
are dropped without affecting the rest.
"""

import logging
import os
import time
import xml.etree.ElementTree as ET
from collections.abc import Iterable, Sequence
from pathlib import Path

from prowl._internal.xmlfile import read_document, write_document
from prowl.errors import StalePersistedEntry
from prowl.routing.route import IndexState, PersistedRoute, Route
from prowl.store import RouteSnapshot
from prowl.symbols.protocol import FileHandle, MemberHandle, SymbolProvider

logger = logging.getLogger("prowl.persistence")

_ROUTE_FIELDS = (
    ("method", "method"),
    ("path", "path"),
    ("class_name", "className"),
    ("member_name", "memberName"),
    ("module_name", "moduleName"),
    ("file_path", "filePath"),
    ("member_signature", "memberSignature"),
)


def member_signature(member: MemberHandle) -> str:
    """``name(T1,T2)`` from the member's canonical parameter types.

    Computed the same way at save and restore time.
    """
    return f"{member.name}({','.join(member.parameter_types())})"


def file_timestamp(path: str) -> int | None:
    """Modification time of *path* in milliseconds, or ``None`` if missing."""
    try:
        return os.stat(path).st_mtime_ns // 1_000_000
    except OSError:
        return None


def to_persisted(route: Route) -> PersistedRoute:
    return PersistedRoute(
        method=route.method,
        path=route.path,
        class_name=route.class_name,
        member_name=route.member_name,
        module_name=route.module_name,
        file_path=route.file_path,
        member_signature=member_signature(route.owner),
    )


# ---------------------------------------------------------------------------
# XML codec
# ---------------------------------------------------------------------------

def state_to_xml(state: IndexState) -> ET.Element:
    root = ET.Element("routeIndex", lastIndexTime=str(state.last_index_time))
    routes_el = ET.SubElement(root, "routes")
    for entry in state.routes:
        ET.SubElement(
            routes_el,
            "route",
            {xml_name: getattr(entry, attr) for attr, xml_name in _ROUTE_FIELDS},
        )
    stamps_el = ET.SubElement(root, "fileTimestamps")
    for path, stamp in state.file_timestamps.items():
        ET.SubElement(stamps_el, "file", path=path, timestamp=str(stamp))
    return root


def state_from_xml(root: ET.Element) -> IndexState:
    routes = tuple(
        PersistedRoute(**{attr: el.get(xml_name, "") for attr, xml_name in _ROUTE_FIELDS})
        for el in root.iterfind("routes/route")
    )
    stamps: dict[str, int] = {}
    for el in root.iterfind("fileTimestamps/file"):
        path = el.get("path")
        stamp = el.get("timestamp")
        if path and stamp and stamp.lstrip("-").isdigit():
            stamps[path] = int(stamp)
    last = root.get("lastIndexTime", "0")
    return IndexState(
        routes=routes,
        file_timestamps=stamps,
        last_index_time=int(last) if last.lstrip("-").isdigit() else 0,
    )


# ---------------------------------------------------------------------------
# Persistence adapter
# ---------------------------------------------------------------------------

class IndexPersistence:
    """Durable, workspace-scoped storage for the route index.

    Thread-safety: ``save`` is only called from the single scan worker;
    ``load`` and ``restore`` run during startup on the same worker.
    """

    __slots__ = ("_provider", "path")

    def __init__(self, path: str | Path, provider: SymbolProvider) -> None:
        self.path = Path(path)
        self._provider = provider

    # -- Save / load --

    def save(self, routes: Sequence[Route], *, now: int | None = None) -> IndexState:
        """Write *routes* plus the timestamps of their files. Returns the saved state."""
        entries = tuple(to_persisted(route) for route in routes)
        stamps: dict[str, int] = {}
        for entry in entries:
            if entry.file_path in stamps:
                continue
            stamp = file_timestamp(entry.file_path)
            if stamp is not None:
                stamps[entry.file_path] = stamp
        state = IndexState(
            routes=entries,
            file_timestamps=stamps,
            last_index_time=now if now is not None else int(time.time() * 1000),
        )
        write_document(self.path, state_to_xml(state))
        logger.debug("Saved %d routes to %s", len(entries), self.path)
        return state

    def write_through(self, snapshot: RouteSnapshot) -> None:
        """Store listener: persist every published snapshot."""
        self.save(snapshot.routes)

    def load(self) -> IndexState:
        """Return the last saved state, or an empty one if none is usable."""
        try:
            root = read_document(self.path)
        except (ET.ParseError, OSError) as exc:
            logger.warning("Ignoring unreadable route index %s: %s", self.path, exc)
            return IndexState()
        if root is None:
            return IndexState()
        return state_from_xml(root)

    # -- Restore --

    def restore(self, entries: Iterable[PersistedRoute]) -> list[Route]:
        """Re-resolve persisted entries into live routes, dropping stale ones."""
        files: dict[str, FileHandle | None] = {}
        routes: list[Route] = []
        dropped = 0
        for entry in entries:
            try:
                routes.append(self._resolve(entry, files))
            except StalePersistedEntry as exc:
                dropped += 1
                logger.debug("Dropping stale route entry %s", exc)
        if dropped:
            logger.info("Restore dropped %d stale route entr%s", dropped, "y" if dropped == 1 else "ies")
        return routes

    def _resolve(self, entry: PersistedRoute, files: dict[str, FileHandle | None]) -> Route:
        if entry.file_path not in files:
            files[entry.file_path] = self._provider.find_file(entry.file_path)
        file = files[entry.file_path]
        if file is None:
            raise StalePersistedEntry(entry.file_path, entry.member_signature, "file not found")

        type_found = False
        for type_ in file.types():
            if type_.name != entry.class_name:
                continue
            type_found = True
            for member in type_.members():
                if member_signature(member) == entry.member_signature:
                    return Route(
                        method=entry.method,
                        path=entry.path,
                        owner=member,
                        class_name=entry.class_name,
                        member_name=member.name,
                        module_name=entry.module_name,
                    )
        if type_found:
            raise StalePersistedEntry(entry.file_path, entry.member_signature, "member not found")
        raise StalePersistedEntry(entry.file_path, entry.member_signature, f"type {entry.class_name} not found")

    # -- Drift --

    @staticmethod
    def drifted_files(state: IndexState) -> set[str]:
        """Files whose modification time changed (or that vanished) since *state*."""
        return {
            path
            for path, stamp in state.file_timestamps.items()
            if file_timestamp(path) != stamp
        }

