"""``prowl search`` — one-shot route search."""

import argparse

from prowl.cli._open import open_index
from prowl.cli._routes import format_table


def run_search(args: argparse.Namespace) -> None:
    index = open_index(args)
    try:
        limit = args.limit if args.limit is not None else index.config.display_limit
        matches = index.search(args.query)
        if not matches:
            print(f"No routes match {args.query!r}.")
            return
        for line in format_table(matches[:limit]):
            print(line)
        if len(matches) > limit:
            print(f"\nShowing first {limit} of {len(matches)}")
        else:
            print(f"\nFound {len(matches)}")
    finally:
        index.close()
