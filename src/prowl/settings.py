"""Service-prefix settings.

Service prefixes let a query written against a gateway URL
(``/api/user/info``) match a route declared without the service segment
(``/api/info``), and the other way round.

Stored as ``.prowl/settings.xml``::

    <settings>
      <servicePrefixes>
        <prefix>user</prefix>
        <prefix>order</prefix>
      </servicePrefixes>
    </settings>
"""

import logging
import threading
import xml.etree.ElementTree as ET
from collections.abc import Iterable
from pathlib import Path

from prowl._internal.xmlfile import read_document, write_document

logger = logging.getLogger("prowl.persistence")


def clean_prefixes(prefixes: Iterable[str]) -> list[str]:
    """Trim whitespace and slashes from each prefix and drop the blanks.

    ``"/user/"`` and ``" user "`` both become ``"user"``; ``"/"`` is dropped.
    """
    cleaned = (p.strip().strip("/").strip() for p in prefixes if p)
    return [p for p in cleaned if p]


def _load(path: Path) -> list[str]:
    try:
        root = read_document(path)
    except (ET.ParseError, OSError) as exc:
        logger.warning("Ignoring unreadable settings %s: %s", path, exc)
        return []
    if root is None:
        return []
    return clean_prefixes(el.text or "" for el in root.iterfind("servicePrefixes/prefix"))


class ServicePrefixSettings:
    """Ordered list of service-name prefixes, optionally file-backed.

    Blank prefixes are filtered out on the way in, never reported as
    errors. Without a *path* the settings live only in memory.
    """

    __slots__ = ("_lock", "_prefixes", "path")

    def __init__(self, path: str | Path | None = None, prefixes: Iterable[str] = ()) -> None:
        self.path = Path(path) if path is not None else None
        self._lock = threading.Lock()
        self._prefixes: tuple[str, ...] = tuple(clean_prefixes(prefixes))
        if self.path is not None and not self._prefixes:
            self._prefixes = tuple(_load(self.path))

    def get_service_prefixes(self) -> list[str]:
        return list(self._prefixes)

    def set_service_prefixes(self, prefixes: Iterable[str]) -> None:
        cleaned = tuple(clean_prefixes(prefixes))
        with self._lock:
            self._prefixes = cleaned
            if self.path is not None:
                root = ET.Element("settings")
                group = ET.SubElement(root, "servicePrefixes")
                for prefix in cleaned:
                    ET.SubElement(group, "prefix").text = prefix
                write_document(self.path, root)
