"""``prowl prefixes`` — show or replace the service-name prefixes."""

import argparse
from pathlib import Path

from prowl.config import IndexConfig
from prowl.settings import ServicePrefixSettings


def run_prefixes(args: argparse.Namespace) -> None:
    config = IndexConfig()
    path = Path(args.workspace) / config.storage_dir / config.settings_file
    settings = ServicePrefixSettings(path)

    if args.values is not None:
        settings.set_service_prefixes(args.values.split(","))

    prefixes = settings.get_service_prefixes()
    if not prefixes:
        print("No service prefixes configured.")
        return
    for prefix in prefixes:
        print(prefix)
