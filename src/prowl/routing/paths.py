"""Path normalization.

Two distinct normal forms:

- ``normalize_path``: the canonical stored form of a route path, built
  by the scanner from class-level and member-level fragments.
- ``normalize_for_match``: the comparison form used by the query engine.
  Applied identically to query strings and stored paths so placeholders
  of any name compare equal.
"""

import re

PLACEHOLDER = "{*}"

_REPEATED_SLASH_RE = re.compile(r"/{2,}")
_PLACEHOLDER_RE = re.compile(r"\{[^}]*\}")
_SCHEME_HOST_RE = re.compile(r"^[a-z][a-z0-9+.\-]*://[^/]+", re.IGNORECASE)
_DIGITS_RE = re.compile(r"^\d+$")


def normalize_path(path: str) -> str:
    """Canonical route path: one leading slash, no trailing slash except root.

    Examples::

        "api//users/"   -> "/api/users"
        "users/{id}"    -> "/users/{id}"
        ""              -> "/"
    """
    collapsed = _REPEATED_SLASH_RE.sub("/", path).strip("/")
    return "/" + collapsed if collapsed else "/"


def join_paths(prefix: str, suffix: str) -> str:
    """Concatenate a class-level prefix and member path, then normalize."""
    if prefix and suffix and not prefix.endswith("/") and not suffix.startswith("/"):
        return normalize_path(f"{prefix}/{suffix}")
    return normalize_path(prefix + suffix)


def normalize_for_match(path: str) -> str:
    """Comparison form: ``{anything}`` -> ``{*}`` and ``//`` -> ``/{*}/``.

    An empty segment is treated as a wildcard segment, so a query like
    ``/api//info`` lines up with ``/api/{id}/info``.
    """
    result = _PLACEHOLDER_RE.sub(PLACEHOLDER, path)
    return result.replace("//", "/" + PLACEHOLDER + "/")


def clean_url(url: str) -> str:
    """Reduce a pasted URL to a comparable path.

    Examples::

        "https://example.com/api/info?a=1" -> "/api/info"
        "/api/user/12345"                  -> "/api/user/{*}"
    """
    path = _SCHEME_HOST_RE.sub("", url)
    query_index = path.find("?")
    if query_index != -1:
        path = path[:query_index]
    path = "/".join(
        PLACEHOLDER if _DIGITS_RE.match(segment) else segment
        for segment in path.split("/")
    )
    return normalize_for_match(path)
