"""File change events delivered to the index updater.

Change sources (``prowl.watch`` or a host IDE) emit batches of
``ChangeEvent``. Events are frozen, so one batch can be shared across
threads.
"""

from dataclasses import dataclass
from enum import Enum


class ChangeKind(Enum):
    CREATED = "created"
    MODIFIED = "modified"
    DELETED = "deleted"


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    """One file-level change."""

    path: str
    kind: ChangeKind = ChangeKind.MODIFIED
