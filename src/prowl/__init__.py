"""Prowl — a live index of HTTP routes declared in annotated source code.

Finds Spring-style controller routes in a Java/Kotlin workspace, keeps the
index fresh while files change, persists it across restarts, and answers
path-shaped queries in microseconds.

Basic usage::

    from prowl import RouteIndex

    index = RouteIndex.for_workspace(".")
    index.start().result()
    for route in index.search("post /api/orders"):
        print(route.display_text)
"""

# Declare free-threading support (PEP 703)
_Py_mod_gil = 0

__version__ = "0.1.0.dev0"
__all__ = [
    "ChangeEvent",
    "ChangeKind",
    "ConfigurationError",
    "IndexConfig",
    "IndexStatus",
    "ProwlError",
    "Route",
    "RouteIndex",
    "RouteStore",
    "ServicePrefixSettings",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import prowl`` fast and keeps watchdog out of the import path
    until it is needed.
    """
    if name == "RouteIndex":
        from prowl.service import RouteIndex

        return RouteIndex

    if name == "IndexConfig":
        from prowl.config import IndexConfig

        return IndexConfig

    if name == "Route":
        from prowl.routing.route import Route

        return Route

    if name in ("RouteStore", "IndexStatus"):
        from prowl import store as _store

        return getattr(_store, name)

    if name == "ServicePrefixSettings":
        from prowl.settings import ServicePrefixSettings

        return ServicePrefixSettings

    if name in ("ChangeEvent", "ChangeKind"):
        from prowl import events as _events

        return getattr(_events, name)

    if name in ("ProwlError", "ConfigurationError"):
        from prowl import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
