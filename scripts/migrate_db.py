# =============================================================================
# MongoDB Schema Migration Runner
# =============================================================================
# Applies versioned migrations for the job and trace stores. Discovers
# migration files in services/mongodb/migrations/, applies pending ones in
# order, and records applied versions in schema_migrations.
# =============================================================================

import sys
import time
import importlib.util
from pathlib import Path
from typing import Callable
from datetime import datetime, timezone

from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import CollectionInvalid, OperationFailure

from hub_libs.models import JobArchiveSettings, MongoSettings

MIGRATIONS_COLLECTION = "schema_migrations"
DEFAULT_MIGRATIONS_DIR = Path(__file__).parent.parent / "services" / "mongodb" / "migrations"


def discover_migrations(migrations_dir: Path) -> list[tuple[str, Path]]:
    """
    Discover migration files in the migrations directory.

    Migration files must match pattern: NNN_*.py where NNN is a zero-padded
    3-digit version number (e.g., 001, 002, 010).

    Args:
        migrations_dir: Path to migrations directory

    Returns:
        List of (version, file_path) tuples, sorted by version number

    Raises:
        ValueError: If the directory is missing or two files share a version
    """
    if not migrations_dir.exists():
        raise ValueError(f"Migrations directory does not exist: {migrations_dir}")

    migrations = []
    seen_versions = set()

    for file_path in migrations_dir.glob("*.py"):
        filename = file_path.name
        if filename.startswith("__"):
            continue

        version = filename[0:3]
        if not version.isdigit():
            print(f"Warning: Skipping file '{filename}' - does not start with 3-digit version", file=sys.stderr)
            continue

        if version in seen_versions:
            raise ValueError(f"Duplicate migration version '{version}' found in '{filename}'")

        seen_versions.add(version)
        migrations.append((version, file_path))

    # Lexicographic sort works for zero-padded versions
    migrations.sort(key=lambda x: x[0])
    return migrations


def load_migration_module(file_path: Path) -> tuple[str, Callable[[Database], None]]:
    """
    Load a migration module and return its VERSION and up() function.

    Raises:
        ValueError: If the module lacks a string VERSION or a callable up()
        ImportError: If the module cannot be imported
    """
    spec = importlib.util.spec_from_file_location(f"migration_{file_path.stem}", file_path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Could not load migration module from {file_path}")

    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    version = getattr(module, "VERSION", None)
    if version is None:
        raise ValueError(f"Migration '{file_path.name}' missing VERSION constant")
    if not isinstance(version, str):
        raise ValueError(f"Migration '{file_path.name}' VERSION must be a string, got {type(version).__name__}")

    up_func = getattr(module, "up", None)
    if up_func is None:
        raise ValueError(f"Migration '{file_path.name}' missing up() function")
    if not callable(up_func):
        raise ValueError(f"Migration '{file_path.name}' up must be callable, got {type(up_func).__name__}")

    return version, up_func


def ensure_schema_migrations_collection(db: Database) -> None:
    """
    Ensure schema_migrations exists with a unique index on version.
    """
    try:
        db.create_collection(MIGRATIONS_COLLECTION)
    except CollectionInvalid:
        pass

    try:
        db[MIGRATIONS_COLLECTION].create_index("version", unique=True)
    except OperationFailure:
        pass


def get_applied_versions(db: Database) -> set[str]:
    """
    Return the set of migration versions already recorded.
    """
    applied = db[MIGRATIONS_COLLECTION].find({}, {"version": 1})
    return {doc["version"] for doc in applied}


def apply_migration(db: Database, version: str, up_func: Callable[[Database], None]) -> None:
    """
    Apply a single migration and record it in schema_migrations.

    A failed migration is not recorded, so it is retried on the next run.
    """
    start_time = time.time()
    try:
        up_func(db)
    except Exception as e:
        print(f"Migration {version} failed: {e}", file=sys.stderr)
        raise

    duration_ms = int((time.time() - start_time) * 1000)
    db[MIGRATIONS_COLLECTION].insert_one({
        "version": version,
        "applied_at": datetime.now(timezone.utc),
        "duration_ms": duration_ms,
    })
    print(f"Applied migration {version} (took {duration_ms}ms)")


def run_migrations(db: Database, migrations_dir: Path = DEFAULT_MIGRATIONS_DIR) -> list[str]:
    """
    Apply every pending migration in version order.

    Returns:
        Versions applied by this run (empty when everything was up to date)

    Raises:
        ValueError: If a migration's VERSION does not match its filename
    """
    ensure_schema_migrations_collection(db)
    migrations = discover_migrations(migrations_dir)
    print(f"Discovered {len(migrations)} migration(s)")

    applied_versions = get_applied_versions(db)
    newly_applied = []

    for version, file_path in migrations:
        if version in applied_versions:
            print(f"Skipping migration {version}: already applied")
            continue

        print(f"Applying migration {version} from {file_path.name}...")
        migration_version, up_func = load_migration_module(file_path)
        if migration_version != version:
            raise ValueError(
                f"Migration '{file_path.name}' VERSION '{migration_version}' "
                f"does not match filename version '{version}'"
            )

        apply_migration(db, version, up_func)
        newly_applied.append(version)

    return newly_applied


def main() -> int:
    """
    Main migration runner entry point.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    try:
        settings = MongoSettings()
        archive_settings = JobArchiveSettings()
        client = MongoClient(
            settings.connection_string,
            serverSelectionTimeoutMS=archive_settings.server_selection_timeout_ms,
        )
        try:
            migrations_dir = DEFAULT_MIGRATIONS_DIR
            if not migrations_dir.exists():
                # Container execution
                migrations_dir = Path("/app/services/mongodb/migrations")

            applied = run_migrations(client[settings.database], migrations_dir)
            print(f"All migrations applied successfully ({len(applied)} new)")
            return 0
        finally:
            client.close()

    except Exception as e:
        print(f"Migration failed: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
