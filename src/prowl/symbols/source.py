"""Source-tree symbol provider for Java and Kotlin workspaces.

Parses ``.java`` and ``.kt`` files with tree-sitter and keeps just enough
structure for route extraction: type declarations, their annotations,
methods with annotations and parameter types, and the build module that
encloses each file.

Annotation simple names are resolved to qualified names through the
file's imports::

    import org.springframework.web.bind.annotation.GetMapping;   // explicit
    import org.springframework.web.bind.annotation.*;            // wildcard

Wildcard imports only resolve names listed in ``known_annotations``.
"""

from __future__ import annotations

import os
import re
import threading
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from pathlib import Path

import tree_sitter_java
import tree_sitter_kotlin
from tree_sitter import Language, Node, Parser

from prowl.annotations import CONTROLLER_ANNOTATIONS, MAPPING_ANNOTATIONS

# Directories never worth descending into
EXCLUDE_DIRS = frozenset({
    ".git", ".gradle", ".idea", ".prowl", ".svn", "build", "node_modules", "out", "target",
})

# Files that mark the root of a build module
BUILD_FILES = ("build.gradle", "build.gradle.kts", "pom.xml")

JAVA = Language(tree_sitter_java.language())
KOTLIN = Language(tree_sitter_kotlin.language())

_WS_RE = re.compile(r"\s+")

_NAME_NODES = ("simple_identifier", "type_identifier", "identifier")
_COMMENT_NODES = frozenset({"block_comment", "comment", "line_comment", "multiline_comment"})


# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class SourceAnnotation:
    """An annotation as written in source, with its raw arguments."""

    qualified_name: str
    arguments: tuple[tuple[str, str], ...] = ()

    def attribute(self, name: str) -> str | None:
        for key, value in self.arguments:
            if key == name:
                return value
        return None


def _lookup(annotations: Iterable[SourceAnnotation], qualified_name: str) -> SourceAnnotation | None:
    for ann in annotations:
        if ann.qualified_name == qualified_name:
            return ann
    return None


@dataclass(frozen=True, slots=True)
class SourceMember:
    """A method (Java) or ``fun`` (Kotlin) declared in a type body."""

    name: str
    file_path: str
    offset: int
    annotations: tuple[SourceAnnotation, ...] = ()
    params: tuple[str, ...] = ()

    def annotation(self, qualified_name: str) -> SourceAnnotation | None:
        return _lookup(self.annotations, qualified_name)

    def parameter_types(self) -> Sequence[str]:
        return self.params

    def navigate(self) -> tuple[str, int]:
        return self.file_path, self.offset


@dataclass(frozen=True, slots=True)
class SourceType:
    """A class-like declaration and its direct members."""

    name: str
    file_path: str
    offset: int
    annotations: tuple[SourceAnnotation, ...] = ()
    members_: tuple[SourceMember, ...] = ()
    module: str | None = None

    def members(self) -> Sequence[SourceMember]:
        return self.members_

    def annotation(self, qualified_name: str) -> SourceAnnotation | None:
        return _lookup(self.annotations, qualified_name)

    def module_id(self) -> str | None:
        return self.module


@dataclass(frozen=True, slots=True)
class SourceFile:
    """A parsed source file."""

    path: str
    types_: tuple[SourceType, ...] = ()

    def types(self) -> Sequence[SourceType]:
        return self.types_


# ---------------------------------------------------------------------------
# Syntax tree helpers
# ---------------------------------------------------------------------------

def _text(node: Node | None) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8", errors="ignore")


def _compact(text: str) -> str:
    return _WS_RE.sub("", text)


def _child(node: Node | None, types: Iterable[str]) -> Node | None:
    """First named child of *node* whose type is in *types*."""
    if node is None:
        return None
    for child in node.named_children:
        if child.type in types:
            return child
    return None


def _name_node(node: Node) -> Node | None:
    return node.child_by_field_name("name") or _child(node, _NAME_NODES)


class _Imports:
    """Simple-name -> qualified-name resolution for one file."""

    __slots__ = ("_explicit", "_known", "_wildcards", "package")

    def __init__(self, known: frozenset[str]) -> None:
        self._explicit: dict[str, str] = {}
        self._wildcards: list[str] = []
        self._known = known
        self.package = ""

    def add(self, target: str, alias: str | None = None) -> None:
        self._explicit[alias or target.rsplit(".", 1)[-1]] = target

    def add_wildcard(self, package: str) -> None:
        self._wildcards.append(package)

    def resolve(self, name: str) -> str:
        if "." in name:
            return name
        if name in self._explicit:
            return self._explicit[name]
        for package in self._wildcards:
            candidate = f"{package}.{name}"
            if candidate in self._known:
                return candidate
        if self.package:
            candidate = f"{self.package}.{name}"
            if candidate in self._known:
                return candidate
        return name


# ---------------------------------------------------------------------------
# Readers
# ---------------------------------------------------------------------------

class _Reader:
    """Walks one syntax tree and collects type declarations.

    Subclasses supply the grammar-specific pieces. Local and anonymous
    classes inside method bodies are not visited.
    """

    __slots__ = ("imports", "module", "path", "source", "types")

    language: Language
    type_nodes: frozenset[str]

    def __init__(self, source: bytes, path: str, module: str | None, known: frozenset[str]) -> None:
        self.source = source
        self.path = path
        self.module = module
        self.imports = _Imports(known)
        self.types: list[SourceType] = []

    def read(self) -> SourceFile:
        root = Parser(self.language).parse(self.source).root_node
        self.read_imports(root)
        self.visit(root)
        self.types.sort(key=lambda t: t.offset)
        return SourceFile(path=self.path, types_=tuple(self.types))

    def visit(self, node: Node) -> None:
        for child in node.named_children:
            if child.type in self.type_nodes:
                self.read_type(child)
            elif child.type == "ERROR":
                self.visit(child)

    def offset(self, node: Node) -> int:
        """Character offset of *node* in the decoded file."""
        return len(self.source[: node.start_byte].decode("utf-8", errors="replace"))

    def slice(self, start: int, end: int) -> str:
        return self.source[start:end].decode("utf-8", errors="replace").strip()

    def read_type(self, node: Node) -> None:
        name = _name_node(node)
        if name is None:
            return
        members: list[SourceMember] = []
        for child in self.body_items(node):
            if child.type in self.type_nodes:
                self.read_type(child)
            else:
                member = self.read_member(child)
                if member is not None:
                    members.append(member)
        self.types.append(
            SourceType(
                name=_text(name),
                file_path=self.path,
                offset=self.offset(name),
                annotations=self.annotations(node),
                members_=tuple(members),
                module=self.module,
            )
        )

    def member(self, node: Node, params: Iterable[str]) -> SourceMember | None:
        name = _name_node(node)
        if name is None:
            return None
        return SourceMember(
            name=_text(name),
            file_path=self.path,
            offset=self.offset(name),
            annotations=self.annotations(node),
            params=tuple(params),
        )

    def read_imports(self, root: Node) -> None:
        raise NotImplementedError

    def body_items(self, node: Node) -> Iterator[Node]:
        raise NotImplementedError

    def read_member(self, node: Node) -> SourceMember | None:
        raise NotImplementedError

    def annotations(self, node: Node) -> tuple[SourceAnnotation, ...]:
        raise NotImplementedError


class _JavaReader(_Reader):
    __slots__ = ()
    language = JAVA
    type_nodes = frozenset({
        "annotation_type_declaration", "class_declaration", "enum_declaration",
        "interface_declaration", "record_declaration",
    })

    def read_imports(self, root: Node) -> None:
        for child in root.named_children:
            if child.type == "package_declaration":
                self.imports.package = _text(_child(child, ("scoped_identifier", "identifier")))
            elif child.type == "import_declaration":
                target = _child(child, ("scoped_identifier", "identifier"))
                if target is None:
                    continue
                if any(c.type in ("asterisk", "*") for c in child.children):
                    self.imports.add_wildcard(_text(target))
                else:
                    self.imports.add(_text(target))

    def body_items(self, node: Node) -> Iterator[Node]:
        if node.type == "annotation_type_declaration":
            return
        body = node.child_by_field_name("body")
        if body is None:
            return
        for child in body.named_children:
            if child.type == "enum_body_declarations":
                yield from child.named_children
            else:
                yield child

    def read_member(self, node: Node) -> SourceMember | None:
        if node.type != "method_declaration":
            return None
        params = node.child_by_field_name("parameters")
        return self.member(
            node,
            (
                _java_parameter_type(p)
                for p in (params.named_children if params is not None else ())
                if p.type in ("formal_parameter", "spread_parameter")
            ),
        )

    def annotations(self, node: Node) -> tuple[SourceAnnotation, ...]:
        modifiers = _child(node, ("modifiers",))
        if modifiers is None:
            return ()
        return tuple(
            self.annotation(child)
            for child in modifiers.named_children
            if child.type in ("annotation", "marker_annotation")
        )

    def annotation(self, node: Node) -> SourceAnnotation:
        name = _compact(_text(node.child_by_field_name("name")))
        arguments: list[tuple[str, str]] = []
        args = node.child_by_field_name("arguments")
        for arg in args.named_children if args is not None else ():
            if arg.type in _COMMENT_NODES:
                continue
            if arg.type == "element_value_pair":
                arguments.append(
                    (_text(arg.child_by_field_name("key")), _text(arg.child_by_field_name("value")))
                )
            else:
                arguments.append(("value", _text(arg)))
        return SourceAnnotation(self.imports.resolve(name), tuple(arguments))


def _java_parameter_type(param: Node) -> str:
    """``@PathVariable("id") final Long id`` -> ``Long``; varargs keep ``...``."""
    type_node = param.child_by_field_name("type")
    if type_node is not None:
        return _compact(_text(type_node))
    for child in param.named_children:
        if child.type not in ("modifiers", "variable_declarator") and child.type not in _COMMENT_NODES:
            return _compact(_text(child)) + "..."
    return ""


class _KotlinReader(_Reader):
    __slots__ = ()
    language = KOTLIN
    type_nodes = frozenset({"class_declaration", "object_declaration"})

    def read_imports(self, root: Node) -> None:
        for child in root.named_children:
            if child.type == "package_header":
                self.imports.package = _compact(_text(_child(child, ("identifier", "qualified_identifier"))))
            elif child.type in ("import_list", "import_header", "import"):
                headers = child.named_children if child.type == "import_list" else (child,)
                for header in headers:
                    if header.type in ("import_header", "import"):
                        self.read_import(header)

    def read_import(self, header: Node) -> None:
        target = _child(header, ("identifier", "qualified_identifier"))
        if target is None:
            return
        if _child(header, ("wildcard_import",)) is not None or any(c.type == "*" for c in header.children):
            self.imports.add_wildcard(_compact(_text(target)))
            return
        alias = _child(header, ("import_alias",))
        alias_name = _text(_child(alias, _NAME_NODES)) if alias is not None else None
        self.imports.add(_compact(_text(target)), alias_name or None)

    def body_items(self, node: Node) -> Iterator[Node]:
        body = _child(node, ("class_body", "enum_class_body"))
        if body is not None:
            yield from body.named_children

    def read_member(self, node: Node) -> SourceMember | None:
        if node.type != "function_declaration":
            return None
        params = _child(node, ("function_value_parameters",))
        types: list[str] = []
        for child in params.named_children if params is not None else ():
            if child.type == "function_value_parameter":
                child = _child(child, ("parameter",))
            if child is not None and child.type == "parameter":
                types.append(_kotlin_parameter_type(child))
        return self.member(node, types)

    def annotations(self, node: Node) -> tuple[SourceAnnotation, ...]:
        modifiers = _child(node, ("modifiers",))
        if modifiers is None:
            return ()
        found: list[SourceAnnotation] = []
        for child in modifiers.named_children:
            if child.type == "annotation":
                annotation = self.annotation(child)
                if annotation is not None:
                    found.append(annotation)
        return tuple(found)

    def annotation(self, node: Node) -> SourceAnnotation | None:
        target = _child(node, ("constructor_invocation", "user_type"))
        if target is None:
            return None
        type_node = target if target.type == "user_type" else _child(target, ("user_type",))
        name = _compact(_text(type_node)).split("<", 1)[0]
        arguments: list[tuple[str, str]] = []
        args = _child(target, ("value_arguments",)) if target.type == "constructor_invocation" else None
        for arg in args.named_children if args is not None else ():
            if arg.type != "value_argument":
                continue
            eq = next((c for c in arg.children if c.type == "="), None)
            if eq is None:
                arguments.append(("value", _text(arg).strip()))
            else:
                arguments.append(
                    (self.slice(arg.start_byte, eq.start_byte), self.slice(eq.end_byte, arg.end_byte))
                )
        return SourceAnnotation(self.imports.resolve(name), tuple(arguments))


def _kotlin_parameter_type(param: Node) -> str:
    """``@RequestBody body: Map<String, Any>`` -> ``Map<String,Any>``."""
    colon = next((c for c in param.children if c.type == ":"), None)
    if colon is None:
        return ""
    for child in param.named_children:
        if child.start_byte >= colon.end_byte and child.type not in _COMMENT_NODES:
            return _compact(_text(child))
    return ""


def parse_source(
    text: str | bytes,
    path: str,
    *,
    module: str | None = None,
    known_annotations: frozenset[str] = frozenset(),
) -> SourceFile:
    """Parse one Java or Kotlin file into a :class:`SourceFile`."""
    source = text.encode("utf-8") if isinstance(text, str) else text
    reader = _KotlinReader if path.endswith((".kt", ".kts")) else _JavaReader
    return reader(source, path, module, known_annotations).read()


# ---------------------------------------------------------------------------
# Module identification
# ---------------------------------------------------------------------------

def module_id_for(path: Path, root: Path) -> str | None:
    """Build-module identifier for *path*, or ``None`` outside any module.

    Gradle-style source sets produce ``<root>.<module path>.<source set>``
    (``shop.user-service.main``); modules without a ``src/<set>`` layout
    use the module directory name.
    """
    try:
        rel_dir = path.parent.relative_to(root)
    except ValueError:
        return None

    candidates = [root / Path(*rel_dir.parts[:i]) for i in range(len(rel_dir.parts), -1, -1)]
    for module_dir in candidates:
        if not any((module_dir / marker).is_file() for marker in BUILD_FILES):
            continue
        module_parts = module_dir.relative_to(root).parts
        inner = path.relative_to(module_dir).parts
        if len(inner) > 2 and inner[0] == "src":
            return ".".join([root.name, *module_parts, inner[1]])
        return module_dir.name
    return None


# ---------------------------------------------------------------------------
# Provider
# ---------------------------------------------------------------------------

class SourceSymbolProvider:
    """Symbol provider over a directory of Java/Kotlin sources.

    Parsed files are cached by modification time, so repeated lookups
    after a single edit reparse only that file. Files are keyed by their
    resolved absolute path, whatever spelling a caller uses. Thread-safe.
    """

    __slots__ = ("_cache", "_known", "_lock", "extensions", "root")

    def __init__(
        self,
        root: str | Path,
        *,
        extensions: Sequence[str] = (".java", ".kt"),
        known_annotations: Iterable[str] | None = None,
    ) -> None:
        self.root = Path(root).resolve()
        self.extensions = tuple(extensions)
        if known_annotations is None:
            known_annotations = (*CONTROLLER_ANNOTATIONS, *MAPPING_ANNOTATIONS)
        self._known = frozenset(known_annotations)
        self._cache: dict[str, tuple[int, SourceFile]] = {}
        self._lock = threading.Lock()

    def canonical_path(self, path: str) -> str:
        """Resolved absolute form of *path*; relative paths are taken from the root."""
        candidate = Path(path)
        if not candidate.is_absolute():
            candidate = self.root / candidate
        return os.path.realpath(candidate)

    def iter_source_files(self) -> Iterator[Path]:
        """Yield every source file under the root, skipping build output."""
        seen: set[str] = set()
        for dirpath, dirnames, filenames in os.walk(self.root):
            dirnames[:] = sorted(d for d in dirnames if d not in EXCLUDE_DIRS)
            for filename in sorted(filenames):
                if not filename.endswith(self.extensions):
                    continue
                path = self.canonical_path(os.path.join(dirpath, filename))
                if path not in seen:
                    seen.add(path)
                    yield Path(path)

    def find_annotated_types(self, annotation: str) -> Sequence[SourceType]:
        found: list[SourceType] = []
        for path in self.iter_source_files():
            file = self._parse(path)
            if file is None:
                continue
            found.extend(t for t in file.types_ if t.annotation(annotation) is not None)
        return found

    def find_file(self, path: str) -> SourceFile | None:
        candidate = Path(self.canonical_path(path))
        if not candidate.name.endswith(self.extensions):
            return None
        return self._parse(candidate)

    def _parse(self, path: Path) -> SourceFile | None:
        key = str(path)
        try:
            stamp = path.stat().st_mtime_ns
        except OSError:
            with self._lock:
                self._cache.pop(key, None)
            return None

        with self._lock:
            cached = self._cache.get(key)
        if cached is not None and cached[0] == stamp:
            return cached[1]

        try:
            source = path.read_bytes()
        except OSError:
            return None
        file = parse_source(
            source,
            key,
            module=module_id_for(path, self.root),
            known_annotations=self._known,
        )
        with self._lock:
            self._cache[key] = (stamp, file)
        return file
