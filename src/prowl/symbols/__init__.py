"""Symbol access — protocols plus two reference providers.

- ``protocol``: the structural interface the scanner consumes.
- ``memory``: an in-memory symbol table, for tests and embedding hosts.
- ``source``: a lightweight reader of Java/Kotlin source trees.
"""

from prowl.symbols.protocol import (
    AnnotationHandle,
    FileHandle,
    MemberHandle,
    SymbolProvider,
    TypeHandle,
)

__all__ = [
    "AnnotationHandle",
    "FileHandle",
    "MemberHandle",
    "SymbolProvider",
    "TypeHandle",
]
