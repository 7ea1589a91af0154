"""Route, PersistedRoute and IndexState dataclasses."""

from dataclasses import dataclass, field

from prowl.symbols.protocol import MemberHandle


@dataclass(frozen=True, slots=True)
class Route:
    """One HTTP-exposed operation.

    ``owner`` is a reference into the symbol provider's model, used to
    navigate back to source. The index never owns or mutates it.
    """

    method: str
    path: str
    owner: MemberHandle
    class_name: str
    member_name: str
    module_name: str

    @property
    def location(self) -> tuple[str, int]:
        """``(file_path, text_offset)`` of the owning member."""
        return self.owner.navigate()

    @property
    def file_path(self) -> str:
        return self.owner.navigate()[0]

    @property
    def display_text(self) -> str:
        return f"[{self.method}] {self.path} → {self.class_name}.{self.member_name}() [{self.module_name}]"


@dataclass(frozen=True, slots=True)
class PersistedRoute:
    """A Route without its live symbol handle.

    ``member_signature`` (``name(T1,T2)``) re-locates the exact member
    after a restart; text offsets are too unstable across edits.
    """

    method: str
    path: str
    class_name: str
    member_name: str
    module_name: str
    file_path: str
    member_signature: str


@dataclass(frozen=True, slots=True)
class IndexState:
    """Persisted aggregate written after every successful index."""

    routes: tuple[PersistedRoute, ...] = ()
    # file path -> modification time (ms) when last indexed
    file_timestamps: dict[str, int] = field(default_factory=dict)
    last_index_time: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.routes
