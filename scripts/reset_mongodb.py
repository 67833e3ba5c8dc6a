#!/usr/bin/env python
"""
Clear the job and trace stores for development.

Usage:
    python scripts/reset_mongodb.py --help
    python scripts/reset_mongodb.py --jobs --confirm
    python scripts/reset_mongodb.py --all --confirm

Removes every document from the selected stores. Indexes and validators
are kept, so migrations do not need to be re-applied.
"""

import argparse
import os

from hub_libs.models import JobArchiveSettings
from hub_libs.mongo_store import MongoDocumentStore, build_stores


def get_connection_string() -> str:
    """Get MongoDB connection URI from environment."""
    return os.getenv("MONGODB_URI", "mongodb://localhost:27017")


def reset_stores(stores: dict[str, MongoDocumentStore], confirm: bool) -> dict[str, int]:
    """
    Clear the given stores.

    Returns:
        Documents removed per store name (empty on a dry run)
    """
    if not confirm:
        print("Dry run - would clear:", sorted(stores))
        print("Add --confirm to actually clear the stores.")
        return {}

    removed = {}
    for name, store in stores.items():
        removed[name] = store.clear()
        print(f"Cleared {name}: {removed[name]} document(s) from {store.database}.{store.collection}")
    return removed


def main():
    parser = argparse.ArgumentParser(description="Clear the job and trace stores")
    parser.add_argument("--jobs", action="store_true", help="Clear the job store")
    parser.add_argument("--traces", action="store_true", help="Clear the trace store")
    parser.add_argument("--all", action="store_true", help="Clear both stores")
    parser.add_argument(
        "--confirm",
        action="store_true",
        help="Actually clear the stores (without this, dry run only)",
    )

    args = parser.parse_args()

    if not (args.all or args.jobs or args.traces):
        parser.print_help()
        return

    job_store, trace_store = build_stores(get_connection_string(), JobArchiveSettings())
    stores = {}
    if args.all or args.jobs:
        stores["jobs"] = job_store
    if args.all or args.traces:
        stores["traces"] = trace_store

    reset_stores(stores, args.confirm)


if __name__ == "__main__":
    main()
