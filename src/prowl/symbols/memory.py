"""In-memory symbol table.

A provider backed by plain frozen dataclasses. Tests build workspaces
with it; embedding hosts that already have a parsed model can project
into it instead of implementing the protocols themselves.

Example::

    table = SymbolTable()
    table.put_file("src/UserController.java", [
        TypeSymbol(
            name="UserController",
            file_path="src/UserController.java",
            annotations=(Annotation(REST_CONTROLLER),),
            members_=(
                MemberSymbol(
                    name="get",
                    file_path="src/UserController.java",
                    annotations=(Annotation(GET_MAPPING, value='"/users/{id}"'),),
                ),
            ),
        ),
    ])
"""

import threading
from collections.abc import Sequence
from dataclasses import dataclass

from prowl.errors import ResolutionFailure


class Annotation:
    """An annotation with raw attribute text, keyed by attribute name."""

    __slots__ = ("_attributes", "qualified_name")

    def __init__(self, qualified_name: str, **attributes: str) -> None:
        self.qualified_name = qualified_name
        self._attributes = dict(attributes)

    def attribute(self, name: str) -> str | None:
        return self._attributes.get(name)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Annotation):
            return NotImplemented
        return (
            self.qualified_name == other.qualified_name
            and self._attributes == other._attributes
        )

    def __hash__(self) -> int:
        return hash((self.qualified_name, tuple(sorted(self._attributes.items()))))

    def __repr__(self) -> str:
        return f"Annotation({self.qualified_name!r}, **{self._attributes!r})"


def _find(annotations: Sequence[Annotation], qualified_name: str) -> Annotation | None:
    for ann in annotations:
        if ann.qualified_name == qualified_name:
            return ann
    return None


@dataclass(frozen=True, slots=True)
class MemberSymbol:
    """A method declaration."""

    name: str
    file_path: str
    annotations: tuple[Annotation, ...] = ()
    params: tuple[str, ...] = ()
    offset: int = 0

    def annotation(self, qualified_name: str) -> Annotation | None:
        return _find(self.annotations, qualified_name)

    def parameter_types(self) -> Sequence[str]:
        return self.params

    def navigate(self) -> tuple[str, int]:
        return self.file_path, self.offset


@dataclass(frozen=True, slots=True)
class TypeSymbol:
    """A class declaration."""

    name: str
    file_path: str
    annotations: tuple[Annotation, ...] = ()
    members_: tuple[MemberSymbol, ...] = ()
    module: str | None = None

    def members(self) -> Sequence[MemberSymbol]:
        return self.members_

    def annotation(self, qualified_name: str) -> Annotation | None:
        return _find(self.annotations, qualified_name)

    def module_id(self) -> str | None:
        return self.module


@dataclass(frozen=True, slots=True)
class FileSymbol:
    """A file and the types declared in it."""

    path: str
    types_: tuple[TypeSymbol, ...] = ()

    def types(self) -> Sequence[TypeSymbol]:
        return self.types_


class SymbolTable:
    """Mutable, thread-safe collection of files.

    ``put_file`` and ``delete_file`` simulate edits; lookups always see
    the latest version of each file.
    """

    __slots__ = ("_files", "_lock", "known_annotations")

    def __init__(self, known_annotations: Sequence[str] | None = None) -> None:
        self._files: dict[str, FileSymbol] = {}
        self._lock = threading.Lock()
        # None means every annotation type resolves
        self.known_annotations = frozenset(known_annotations) if known_annotations is not None else None

    def put_file(self, path: str, types: Sequence[TypeSymbol]) -> FileSymbol:
        file = FileSymbol(path=path, types_=tuple(types))
        with self._lock:
            self._files[path] = file
        return file

    def delete_file(self, path: str) -> None:
        with self._lock:
            self._files.pop(path, None)

    def find_annotated_types(self, annotation: str) -> Sequence[TypeSymbol]:
        if self.known_annotations is not None and annotation not in self.known_annotations:
            raise ResolutionFailure(annotation)
        with self._lock:
            files = list(self._files.values())
        return [
            type_
            for file in files
            for type_ in file.types_
            if type_.annotation(annotation) is not None
        ]

    def find_file(self, path: str) -> FileSymbol | None:
        with self._lock:
            return self._files.get(path)

    def canonical_path(self, path: str) -> str:
        # Keys are used verbatim
        return path
