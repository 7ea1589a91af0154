"""Route scanner — annotated declarations in, Route records out.

Pure with respect to the index: the scanner reads from a symbol provider
and returns lists. It never touches the store or persistence.

Pipeline::

    for each controller annotation          (CONTROLLER_ANNOTATIONS)
      for each annotated type               (provider.find_annotated_types)
        prefix = type-level RequestMapping path
        for each member, each mapping annotation present on it
          path  = normalize(prefix + member path)
          verbs = explicit RequestMethod.X list, or the annotation default
          emit one Route per verb
"""

import logging
import re
from collections.abc import Iterable, Sequence

from prowl.annotations import (
    CONTROLLER_ANNOTATIONS,
    EXPLICIT_VERB_ANNOTATIONS,
    MAPPING_ANNOTATIONS,
    REQUEST_MAPPING,
)
from prowl.errors import ResolutionFailure
from prowl.routing.paths import join_paths
from prowl.routing.route import Route
from prowl.symbols.protocol import AnnotationHandle, FileHandle, SymbolProvider, TypeHandle

logger = logging.getLogger("prowl.index")

UNKNOWN = "Unknown"

_STRING_LITERAL_RE = re.compile(r'"([^"]*)"')
_VERB_ENUM_RE = re.compile(r"RequestMethod\.(\w+)")

# Opening tokens of array literals across Java ({...}) and Kotlin ([...], arrayOf(...))
_ARRAY_PREFIXES = ("{", "[", "arrayOf(")


def extract_path(annotation: AnnotationHandle | None) -> str:
    """Read the ``value`` (or ``path``) attribute of a mapping annotation.

    - absent attribute or annotation -> ``""``
    - array literal ``{"/a", "/b"}`` -> first string element, ``"/a"``
    - single literal ``"/a"`` -> ``"/a"`` (quotes stripped)
    """
    if annotation is None:
        return ""
    raw = annotation.attribute("value")
    if raw is None:
        raw = annotation.attribute("path")
    if raw is None:
        return ""
    text = raw.strip()
    if text.startswith(_ARRAY_PREFIXES):
        match = _STRING_LITERAL_RE.search(text)
        return match.group(1) if match else ""
    if len(text) >= 2 and text[0] == '"' and text[-1] == '"':
        return text[1:-1]
    return text


def extract_methods(
    annotation: AnnotationHandle,
    qualified_name: str,
    defaults: Sequence[str],
) -> tuple[str, ...]:
    """HTTP verbs declared by a mapping annotation.

    Only ``RequestMapping`` may narrow its verbs with
    ``method = RequestMethod.X`` (or a list of them). Everything else, and
    a ``RequestMapping`` without a usable ``method``, uses *defaults*.
    """
    if qualified_name not in EXPLICIT_VERB_ANNOTATIONS:
        return tuple(defaults)
    raw = annotation.attribute("method")
    if raw is None:
        return tuple(defaults)
    verbs = tuple(dict.fromkeys(v.upper() for v in _VERB_ENUM_RE.findall(raw)))
    return verbs or tuple(defaults)


def module_name(module_id: str | None) -> str:
    """Short module label from a build-module identifier.

    ``"shop.user-service.main"`` -> ``"user-service"``; a single-segment
    identifier is used verbatim; no identifier -> ``"Unknown"``.
    """
    if not module_id:
        return UNKNOWN
    parts = module_id.split(".")
    if len(parts) >= 2:
        return parts[-2]
    return module_id


def class_prefix(type_: TypeHandle) -> str:
    """Class-level path prefix from the type's own ``RequestMapping``."""
    return extract_path(type_.annotation(REQUEST_MAPPING))


def scan_type(type_: TypeHandle) -> list[Route]:
    """Routes declared by the members of one controller-like type."""
    prefix = class_prefix(type_)
    module = module_name(type_.module_id())
    routes: list[Route] = []

    for member in type_.members():
        for qualified_name, defaults in MAPPING_ANNOTATIONS.items():
            annotation = member.annotation(qualified_name)
            if annotation is None:
                continue
            path = join_paths(prefix, extract_path(annotation))
            for verb in extract_methods(annotation, qualified_name, defaults):
                routes.append(
                    Route(
                        method=verb,
                        path=path,
                        owner=member,
                        class_name=type_.name or UNKNOWN,
                        member_name=member.name,
                        module_name=module,
                    )
                )
    return routes


def is_controller(type_: TypeHandle, controller_annotations: Iterable[str] = CONTROLLER_ANNOTATIONS) -> bool:
    return any(type_.annotation(name) is not None for name in controller_annotations)


def find_controllers(
    provider: SymbolProvider,
    controller_annotations: Sequence[str] = CONTROLLER_ANNOTATIONS,
) -> list[TypeHandle]:
    """Every controller-like type in the workspace, deduplicated, in discovery order.

    Annotations the provider cannot resolve are skipped.
    """
    seen: set[int] = set()
    controllers: list[TypeHandle] = []
    for annotation in controller_annotations:
        try:
            found = provider.find_annotated_types(annotation)
        except ResolutionFailure:
            logger.debug("Annotation %s not resolvable in workspace, skipping", annotation)
            continue
        for type_ in found:
            if id(type_) in seen:
                continue
            seen.add(id(type_))
            controllers.append(type_)
    return controllers


def scan_types(types: Iterable[TypeHandle]) -> list[Route]:
    routes: list[Route] = []
    for type_ in types:
        routes.extend(scan_type(type_))
    return routes


def scan_workspace(
    provider: SymbolProvider,
    controller_annotations: Sequence[str] = CONTROLLER_ANNOTATIONS,
) -> list[Route]:
    """Full scan: every route in the workspace."""
    return scan_types(find_controllers(provider, controller_annotations))


def scan_file(
    file: FileHandle,
    controller_annotations: Sequence[str] = CONTROLLER_ANNOTATIONS,
) -> list[Route]:
    """Routes from the controller-like types declared directly in *file*."""
    return scan_types(t for t in file.types() if is_controller(t, controller_annotations))


def group_by_file(routes: Iterable[Route]) -> dict[str, tuple[Route, ...]]:
    """Group routes by the file of their owning member, keeping order."""
    groups: dict[str, list[Route]] = {}
    for route in routes:
        groups.setdefault(route.file_path, []).append(route)
    return {path: tuple(group) for path, group in groups.items()}
