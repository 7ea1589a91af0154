"""``prowl watch`` — keep the index live and re-run a query on every change.

Query re-execution is debounced separately from indexing, so a burst of
store publishes redraws the results once.
"""

import argparse
import threading

from prowl._internal.debounce import Debouncer
from prowl.cli._open import open_index
from prowl.cli._routes import format_table
from prowl.config import IndexConfig


def run_watch(args: argparse.Namespace) -> None:
    overrides = {}
    if args.min_interval is not None:
        overrides["min_interval"] = args.min_interval
    config = IndexConfig(**overrides)
    index = open_index(args, config)
    limit = args.limit if args.limit is not None else config.display_limit

    def render(_batch: list[object] | None = None) -> None:
        matches = index.search(args.query, limit)
        print("\033[2J\033[H", end="")
        if index.is_indexing():
            print("Indexing...")
        if matches:
            for line in format_table(matches):
                print(line)
        else:
            print("No routes match." if args.query else "No routes found.")
        print(f"\nWatching {index.root} (Ctrl+C to stop)", flush=True)

    redraw = Debouncer(config.debounce_seconds, render)
    index.store.add_listener(lambda _snapshot: redraw.push("publish"))

    render()
    index.watch()
    try:
        threading.Event().wait()
    except KeyboardInterrupt:
        pass
    finally:
        redraw.cancel()
        index.close()
