"""Prowl exception hierarchy.

Shared across the scanner, store, updater, and persistence layers so every
module raises and catches the same types.
"""

from dataclasses import dataclass


class ProwlError(Exception):
    """Base for all prowl-specific errors."""


class ConfigurationError(ProwlError):
    """Raised when index configuration is invalid.

    Typically raised by ``IndexConfig.__post_init__`` at construction.
    """


class ResolutionFailure(ProwlError):  # noqa: N818
    """A symbol-provider lookup produced nothing usable.

    Raised by providers when an annotation type is not present in the
    workspace (e.g. the web framework is not on the classpath). The
    scanner skips the annotation and continues.
    """


@dataclass(frozen=True, slots=True)
class StalePersistedEntry(ProwlError):  # noqa: N818
    """A persisted route whose file, type, or member no longer resolves.

    Raised while re-resolving a single entry and caught per entry, so one
    stale record never aborts a restore.
    """

    file_path: str
    member_signature: str
    reason: str = ""

    def __str__(self) -> str:
        detail = f"{self.file_path}#{self.member_signature}"
        if self.reason:
            return f"{detail}: {self.reason}"
        return detail


class ScanFailure(ProwlError):  # noqa: N818
    """An unexpected error escaped a full or incremental scan.

    The original exception is chained as ``__cause__``.
    """
