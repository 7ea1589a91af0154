"""Prowl CLI — list, search, and watch the routes of a workspace.

Entry point registered as ``prowl`` in ``pyproject.toml``::

    [project.scripts]
    prowl = "prowl.cli:main"
"""

import argparse
import logging
import sys


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-w",
        "--workspace",
        default=".",
        help="Workspace root to index (default: current directory)",
    )
    parser.add_argument(
        "--rebuild",
        action="store_true",
        help="Ignore the saved index and rescan every file",
    )


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``prowl`` command."""
    parser = argparse.ArgumentParser(
        prog="prowl",
        description="Prowl — find the code behind any HTTP route.",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0, help="More logging (-vv for debug)")
    subparsers = parser.add_subparsers(dest="command")

    # -- prowl routes -----------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List every indexed route")
    _add_common(routes_parser)

    # -- prowl search -----------------------------------------------------
    search_parser = subparsers.add_parser("search", help="Search routes by path, verb, or name")
    search_parser.add_argument("query", help='Query, e.g. "get /api/users/42" or a full URL')
    search_parser.add_argument("--limit", type=int, default=None, help="Maximum results to print")
    _add_common(search_parser)

    # -- prowl watch ------------------------------------------------------
    watch_parser = subparsers.add_parser("watch", help="Re-run a search whenever routes change")
    watch_parser.add_argument("query", nargs="?", default="", help="Query to re-run (default: all routes)")
    watch_parser.add_argument("--limit", type=int, default=None, help="Maximum results to print")
    watch_parser.add_argument(
        "--min-interval",
        type=float,
        default=None,
        help="Seconds between incremental re-indexes (default: 600)",
    )
    _add_common(watch_parser)

    # -- prowl prefixes ---------------------------------------------------
    prefixes_parser = subparsers.add_parser("prefixes", help="Show or set service-name prefixes")
    prefixes_parser.add_argument(
        "--set",
        dest="values",
        default=None,
        help="Comma-separated prefixes to store (empty string clears them)",
    )
    prefixes_parser.add_argument("-w", "--workspace", default=".", help="Workspace root")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    level = logging.WARNING - 10 * min(args.verbose, 2)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    if args.command == "routes":
        from prowl.cli._routes import run_routes

        run_routes(args)
    elif args.command == "search":
        from prowl.cli._search import run_search

        run_search(args)
    elif args.command == "watch":
        from prowl.cli._watch import run_watch

        run_watch(args)
    elif args.command == "prefixes":
        from prowl.cli._prefixes import run_prefixes

        run_prefixes(args)
