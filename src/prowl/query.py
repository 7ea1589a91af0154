"""Query engine — substring search over the cached routes.

Supported query forms::

    /api/info                         path fragment
    POST /api/info                    verb filter + path fragment
    https://host/api/user/42?x=1      pasted URL (host, query string, ids dropped)
    getUser                           member or module name fragment

Queries never trigger or wait for a scan. They filter whatever snapshot
the store holds at call time.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from prowl.annotations import HTTP_METHODS
from prowl.routing.paths import clean_url, normalize_for_match
from prowl.routing.route import Route
from prowl.settings import ServicePrefixSettings
from prowl.store import RouteStore

_VERBS = frozenset(m.lower() for m in HTTP_METHODS)


@dataclass(frozen=True, slots=True)
class ParsedQuery:
    """A raw query split into its verb filter and comparable path form."""

    method: str | None
    path: str


def parse_query(raw: str) -> ParsedQuery:
    """Lowercase, split off an optional leading verb, and clean the path.

    ``"POST /api/info"`` -> ``ParsedQuery("post", "/api/info")``
    ``"https://example.com/api/info?a=1"`` -> ``ParsedQuery(None, "/api/info")``
    """
    query = raw.strip().lower()
    head, sep, rest = query.partition(" ")
    if sep and head in _VERBS:
        return ParsedQuery(method=head, path=clean_url(rest.strip()))
    return ParsedQuery(method=None, path=clean_url(query))


def collapse_prefixes(path: str, prefixes: Iterable[str]) -> list[str]:
    """*path* plus one variant per prefix whose ``/api/<prefix>/`` segment it contains.

    ``collapse_prefixes("/api/user/info", ["user"])`` ->
    ``["/api/user/info", "/api/info"]``
    """
    variants = [path]
    for prefix in prefixes:
        segment = f"/api/{prefix.lower()}/"
        if segment in path:
            variant = path.replace(segment, "/api/")
            if variant not in variants:
                variants.append(variant)
    return variants


def matches(route: Route, parsed: ParsedQuery, variants: Sequence[str], prefixes: Sequence[str]) -> bool:
    if parsed.method is not None and route.method.lower() != parsed.method:
        return False
    targets = [
        *collapse_prefixes(normalize_for_match(route.path.lower()), prefixes),
        route.member_name.lower(),
        route.module_name.lower(),
    ]
    return any(variant in target for variant in variants for target in targets)


def search_routes(
    routes: Sequence[Route],
    raw_query: str,
    prefixes: Sequence[str] = (),
    limit: int | None = None,
) -> list[Route]:
    """Filter *routes* by *raw_query*, keeping their order.

    A blank query returns every route.
    """
    if not raw_query.strip():
        result = list(routes)
    else:
        parsed = parse_query(raw_query)
        variants = collapse_prefixes(parsed.path, prefixes)
        result = [r for r in routes if matches(r, parsed, variants, prefixes)]
    if limit is not None:
        return result[:limit]
    return result


class QueryEngine:
    """Read-only search over a store's current snapshot."""

    __slots__ = ("_settings", "_store")

    def __init__(self, store: RouteStore, settings: ServicePrefixSettings | None = None) -> None:
        self._store = store
        self._settings = settings or ServicePrefixSettings()

    def search(self, raw_query: str, limit: int | None = None) -> list[Route]:
        return search_routes(
            self._store.current_routes(),
            raw_query,
            self._settings.get_service_prefixes(),
            limit,
        )
