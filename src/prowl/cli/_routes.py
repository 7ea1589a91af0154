"""``prowl routes`` — list indexed routes as a table."""

import argparse
from collections.abc import Sequence

from prowl.cli._open import open_index
from prowl.routing.route import Route


def format_table(routes: Sequence[Route]) -> list[str]:
    """Render METHOD, PATH, HANDLER and MODULE columns."""
    rows = [
        (route.method, route.path, f"{route.class_name}.{route.member_name}()", route.module_name)
        for route in routes
    ]
    max_method = max([len(r[0]) for r in rows] + [6])  # "METHOD" header
    max_path = max([len(r[1]) for r in rows] + [4])  # "PATH" header
    max_handler = max([len(r[2]) for r in rows] + [7])  # "HANDLER" header

    fmt = f"{{:<{max_method}}}  {{:<{max_path}}}  {{:<{max_handler}}}  {{}}"
    lines = [fmt.format("METHOD", "PATH", "HANDLER", "MODULE")]
    lines.append("-" * min(max_method + max_path + max_handler + 12, 100))
    lines.extend(fmt.format(*row).rstrip() for row in rows)
    return lines


def run_routes(args: argparse.Namespace) -> None:
    """Index ``args.workspace`` and print every route."""
    index = open_index(args)
    try:
        routes = index.routes()
        if not routes:
            print("No routes found.")
            return
        for line in format_table(routes):
            print(line)
        print(f"\n{len(routes)} route(s)")
    finally:
        index.close()
