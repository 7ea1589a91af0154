"""Workspace opening — shared by ``routes``, ``search`` and ``watch``."""

import argparse
import sys
from pathlib import Path

from prowl.config import IndexConfig
from prowl.service import RouteIndex


def open_index(args: argparse.Namespace, config: IndexConfig | None = None) -> RouteIndex:
    """Build a RouteIndex for ``args.workspace`` and wait for it to be ready.

    Exits with status 1 when the workspace is not a directory.
    """
    root = Path(args.workspace)
    if not root.is_dir():
        print(f"Error: workspace not found: {root}", file=sys.stderr)
        raise SystemExit(1)

    index = RouteIndex.for_workspace(root, config=config)
    future = index.force_rebuild() if args.rebuild else index.start()
    if future is not None:
        result = future.result()
        if result.error is not None:
            print(f"Error: {result.error}", file=sys.stderr)
            index.close()
            raise SystemExit(1)
    index.updater.wait_idle()
    return index
