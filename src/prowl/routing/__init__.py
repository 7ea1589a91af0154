"""Routing — route records and the path normalization shared by scan and query.

Routes are produced by the scanner, held by the store, and projected to
``PersistedRoute`` for storage.
"""
