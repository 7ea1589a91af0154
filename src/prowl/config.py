"""Index configuration.

IndexConfig is a frozen dataclass: immutable after creation,
IDE-autocompletable, no string-key dict lookups.
"""

from dataclasses import dataclass

from prowl.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class IndexConfig:
    """Route index configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = IndexConfig(min_interval=60.0, display_limit=20)
    """

    # Incremental updates
    min_interval: float = 600.0  # Seconds since last index before change batches are honoured
    debounce_seconds: float = 0.15  # Quiescence window before a change batch is delivered

    # Change prefilter (cheap, not authoritative: the scanner re-checks annotations)
    source_extensions: tuple[str, ...] = (".java", ".kt")
    controller_name_hints: tuple[str, ...] = ("controller", "resource", "api", "endpoint")

    # Storage, relative to the workspace root
    storage_dir: str = ".prowl"
    index_file: str = "route-index.xml"
    settings_file: str = "settings.xml"

    # Query
    display_limit: int = 50

    def __post_init__(self) -> None:
        if self.min_interval < 0:
            msg = f"min_interval must be >= 0, got {self.min_interval!r}"
            raise ConfigurationError(msg)
        if self.debounce_seconds < 0:
            msg = f"debounce_seconds must be >= 0, got {self.debounce_seconds!r}"
            raise ConfigurationError(msg)
        if self.display_limit < 1:
            msg = f"display_limit must be >= 1, got {self.display_limit!r}"
            raise ConfigurationError(msg)
        for ext in self.source_extensions:
            if not ext.startswith("."):
                msg = f"source extension {ext!r} must start with '.'"
                raise ConfigurationError(msg)
