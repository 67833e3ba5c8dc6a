"""
Migration 001: Job and trace collections

This migration:
1. Creates the job and trace collections in their own databases
2. Indexes the trace back-reference (job_id) used to find a job's traces
3. Indexes the declared format on both collections
4. Adds a validator requiring a declared format and content on every document

Document schema (both collections):
- _id: document identifier (string)
- format: "xml" | "json"
- content: markup string (xml) or embedded document / array (json)
- job_id: indexed jobId back-reference (string or null)
- updated_at: last write timestamp
"""

from pymongo.database import Database
from pymongo.errors import CollectionInvalid

from hub_libs.models import JobArchiveSettings

VERSION = "001"


def _document_validator() -> dict:
    return {
        "$jsonSchema": {
            "bsonType": "object",
            "required": ["format", "content"],
            "properties": {
                "_id": {"bsonType": "string"},
                "format": {"enum": ["xml", "json"]},
                "job_id": {"bsonType": ["string", "null"]},
                "updated_at": {"bsonType": "date"},
            },
        }
    }


def _ensure_collection(db: Database, name: str) -> None:
    try:
        db.create_collection(name)
    except CollectionInvalid:
        # Collection already exists
        pass
    db.command(
        "collMod",
        name,
        validator=_document_validator(),
        validationLevel="strict",
        validationAction="error",
    )


def up(db: Database) -> None:
    """
    Apply this migration.

    Args:
        db: PyMongo Database instance holding schema_migrations. The job and
            trace databases are reached through the same client.

    Raises:
        Exception: If migration fails (will cause retry on next startup).
    """
    settings = JobArchiveSettings()
    client = db.client

    # ==========================================================================
    # Step 1: Job collection
    # ==========================================================================
    jobs_db = client[settings.jobs_database]
    _ensure_collection(jobs_db, settings.jobs_collection)
    jobs = jobs_db[settings.jobs_collection]
    jobs.create_index("format", name="format_1")

    # ==========================================================================
    # Step 2: Trace collection
    # ==========================================================================
    traces_db = client[settings.traces_database]
    _ensure_collection(traces_db, settings.traces_collection)
    traces = traces_db[settings.traces_collection]
    traces.create_index("job_id", name="job_id_1")  # For finding a job's traces
    traces.create_index("format", name="format_1")
