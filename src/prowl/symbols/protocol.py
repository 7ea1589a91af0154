"""Symbol provider protocols.

The scanner never touches a parser directly. It sees the workspace through
these structural protocols, so a host IDE, a source-file reader, or a
fake in-memory table can all feed the same engine.

Handles are opaque: the route index holds references to them but never
owns or mutates them.
"""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable


@runtime_checkable
class AnnotationHandle(Protocol):
    """An annotation applied to a type or member."""

    @property
    def qualified_name(self) -> str: ...

    def attribute(self, name: str) -> str | None:
        """Return the raw literal text of attribute *name*, or ``None``.

        A bare ``@X("/a")`` exposes its argument as ``value``.
        Array literals keep their braces: ``{"/a", "/b"}``.
        """
        ...


@runtime_checkable
class MemberHandle(Protocol):
    """A method-like member of a type."""

    @property
    def name(self) -> str: ...

    def annotation(self, qualified_name: str) -> AnnotationHandle | None: ...

    def parameter_types(self) -> Sequence[str]:
        """Canonical parameter type names, in declaration order."""
        ...

    def navigate(self) -> tuple[str, int]:
        """Return ``(file_path, text_offset)`` of the declaration."""
        ...


@runtime_checkable
class TypeHandle(Protocol):
    """A class-like declaration."""

    @property
    def name(self) -> str: ...

    @property
    def file_path(self) -> str: ...

    def members(self) -> Sequence[MemberHandle]: ...

    def annotation(self, qualified_name: str) -> AnnotationHandle | None: ...

    def module_id(self) -> str | None:
        """Identifier of the enclosing build module, if one is known."""
        ...


@runtime_checkable
class FileHandle(Protocol):
    """A resolved source file."""

    @property
    def path(self) -> str: ...

    def types(self) -> Sequence[TypeHandle]:
        """Types declared directly in this file, in source order."""
        ...


@runtime_checkable
class SymbolProvider(Protocol):
    """Read access to the annotated declarations of one workspace."""

    def find_annotated_types(self, annotation: str) -> Sequence[TypeHandle]:
        """Return project types carrying *annotation*.

        May raise ``ResolutionFailure`` when the annotation type itself is
        unknown to the workspace.
        """
        ...

    def find_file(self, path: str) -> FileHandle | None:
        """Resolve a file by path, or ``None`` if it no longer exists."""
        ...

    def canonical_path(self, path: str) -> str:
        """Return the spelling of *path* that handles report as ``file_path``.

        Two paths naming the same file must map to the same string, since
        the index groups routes by it.
        """
        ...
