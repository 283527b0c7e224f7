#!/usr/bin/env python
"""Repair a diverged catalog by assigning contiguous sort orders.

Usage:
    python scripts/renumber_catalog.py            # show the current order
    python scripts/renumber_catalog.py --apply    # renumber 0..N-1
"""
from __future__ import annotations

import argparse
import asyncio
import sys
from collections import Counter
from pathlib import Path

project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from libs.catalog import OrderedCatalog, SqlCatalogStore
from libs.common import configure_logging, get_settings
from libs.data.database import get_session_factory


async def main(apply: bool) -> int:
    configure_logging(get_settings().log_level)
    catalog = OrderedCatalog(SqlCatalogStore(get_session_factory()))
    snapshot = await catalog.refresh()

    duplicates = {key for key, count in Counter(e.sort_order for e in snapshot.items).items() if count > 1}
    for position, entry in enumerate(snapshot.items):
        marker = " <- duplicate" if entry.sort_order in duplicates else ""
        print(f"{position:4d}  sort_order={entry.sort_order:<6d} {entry.id}  {entry.name}{marker}")
    print(f"\n{len(snapshot)} products, revision {snapshot.revision[:12]}")

    if not apply:
        print("Dry run; pass --apply to renumber")
        return 0

    result = await catalog.renumber()
    print(f"Renumbered: {result.status.value}")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--apply", action="store_true", help="write contiguous sort orders")
    sys.exit(asyncio.run(main(parser.parse_args().apply)))
