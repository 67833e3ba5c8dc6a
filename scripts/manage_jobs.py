#!/usr/bin/env python
"""
Delete, export and import pipeline jobs from the command line.

Usage:
    python scripts/manage_jobs.py delete --ids job-1,job-2
    python scripts/manage_jobs.py export jobs.zip [--ids job-1,job-2]
    python scripts/manage_jobs.py import jobs.zip

Connection settings come from MONGODB_URI and the JOBS_* / TRACES_*
environment variables (see hub_libs.models.config).
"""

import argparse
import logging
import os
import sys
from typing import Optional

from pymongo.errors import PyMongoError

from hub_libs.errors import JobArchiveError
from hub_libs.id_spec import parse_id_spec
from hub_libs.job_manager import JobManager
from hub_libs.models import JobArchiveSettings
from hub_libs.mongo_store import build_job_manager


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Manage pipeline jobs and their traces")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every document")
    commands = parser.add_subparsers(dest="command", required=True)

    delete = commands.add_parser("delete", help="Delete jobs and their traces")
    delete.add_argument("--ids", default=None, help="Comma-delimited job ids")

    export = commands.add_parser("export", help="Export jobs and their traces to an archive")
    export.add_argument("destination", help="Archive file to write")
    export.add_argument("--ids", default=None, help="Comma-delimited job ids (default: all jobs)")

    restore = commands.add_parser("import", help="Import jobs and traces from an archive")
    restore.add_argument("source", help="Archive file to read")

    return parser


def run(args: argparse.Namespace, manager: JobManager) -> int:
    """Execute one parsed command against a manager and print its response."""
    if args.command == "delete":
        response = manager.delete_jobs(args.ids)
        print(response.model_dump_json(by_alias=True, indent=2))
        return 0

    if args.command == "export":
        job_ids = None if args.ids is None else parse_id_spec(args.ids)
        response = manager.export_jobs(args.destination, job_ids)
        if response.path is None:
            print("No jobs to export; no archive written")
        else:
            print(f"Exported {response.job_count} job(s) and {response.trace_count} trace(s) to {response.path}")
        return 0

    response = manager.import_jobs(args.source)
    print(response.model_dump_json(by_alias=True, indent=2))
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    manager = build_job_manager(
        os.getenv("MONGODB_URI", "mongodb://localhost:27017"),
        JobArchiveSettings(),
    )
    try:
        return run(args, manager)
    except (PyMongoError, JobArchiveError, OSError) as e:
        print(f"{args.command} failed: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
