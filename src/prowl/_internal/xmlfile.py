"""Small XML document helpers shared by the index and settings stores.

Documents are written to a sibling temporary file and moved into place
with ``os.replace``, so a crash mid-write leaves the previous file intact.
"""

import os
import tempfile
import xml.etree.ElementTree as ET
from pathlib import Path


def read_document(path: Path) -> ET.Element | None:
    """Parse *path* and return its root element, or ``None`` if it is missing.

    Raises ``ET.ParseError`` for a malformed document.
    """
    if not path.is_file():
        return None
    return ET.parse(path).getroot()


def write_document(path: Path, root: ET.Element) -> None:
    """Atomically write *root* as a UTF-8 XML document to *path*."""
    path.parent.mkdir(parents=True, exist_ok=True)
    ET.indent(root)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "wb") as fh:
            ET.ElementTree(root).write(fh, encoding="utf-8", xml_declaration=True)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
