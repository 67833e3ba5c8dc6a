# =============================================================================
# MongoDB Document Store
# =============================================================================
# pymongo implementation of the job and trace document stores, shared by the
# Dagster resource, the webapp and the operator scripts.
# =============================================================================

import json
import logging
from datetime import datetime, timezone
from functools import cached_property
from typing import Any, Optional

import bson
from bson.errors import InvalidDocument
from pymongo import MongoClient
from pymongo.collection import Collection

from hub_libs.document_store import JOB_INDEX_FIELD, extract_job_ref
from hub_libs.errors import DocumentFormatError
from hub_libs.job_manager import JobManager
from hub_libs.models import DocumentFormat, JobArchiveSettings, StoredDocument

__all__ = ["MongoDocumentStore", "build_job_manager", "build_stores"]

logger = logging.getLogger(__name__)


def _prepare_json(doc_id: str, content: Any) -> Any:
    """
    Return JSON content in the form it is stored: a parsed object or array.

    JSON text (str or bytes) is parsed first. The result must survive both a
    strict JSON dump and BSON encoding, so every stored JSON document can be
    exported again and read back.

    Raises:
        DocumentFormatError: If the content is not an object or array that
            JSON and BSON can both represent
    """
    if isinstance(content, (str, bytes)):
        try:
            content = json.loads(content)
        except ValueError as e:
            raise DocumentFormatError(f"JSON document '{doc_id}' is not valid JSON: {e}") from e

    if not isinstance(content, (dict, list)):
        raise DocumentFormatError(
            f"JSON document '{doc_id}' must be an object or array, got {type(content).__name__}"
        )

    try:
        json.dumps(content, allow_nan=False)
        bson.encode({"content": content})
    except (TypeError, ValueError, OverflowError, InvalidDocument) as e:
        raise DocumentFormatError(f"JSON document '{doc_id}' cannot be stored: {e}") from e
    return content


class MongoDocumentStore:
    """
    One document store (jobs or traces) backed by a MongoDB collection.

    Each document is kept as:

        {"_id": <id>, "format": "xml" | "json", "content": <markup or object>,
         "job_id": <back-reference or None>, "updated_at": <datetime>}

    XML content stays a string and JSON content stays an embedded object, so
    the declared format is never re-derived from the content.
    """

    def __init__(
        self,
        connection_string: str,
        database: str = "data_hub_jobs",
        collection: str = "jobs",
        server_selection_timeout_ms: int = 10000,
    ) -> None:
        self.connection_string = connection_string
        self.database = database
        self.collection = collection
        self.server_selection_timeout_ms = server_selection_timeout_ms

    @cached_property
    def _client(self) -> MongoClient:
        return MongoClient(
            self.connection_string,
            serverSelectionTimeoutMS=self.server_selection_timeout_ms,
        )

    def _get_collection(self) -> Collection:
        return self._client[self.database][self.collection]

    @staticmethod
    def _to_document(raw: dict[str, Any]) -> StoredDocument:
        return StoredDocument(
            doc_id=str(raw["_id"]),
            format=DocumentFormat(raw["format"]),
            content=raw["content"],
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, doc_id: str) -> Optional[StoredDocument]:
        """
        Load a document by id, or None when it does not exist.
        """
        raw = self._get_collection().find_one({"_id": doc_id})
        if not raw:
            return None
        return self._to_document(raw)

    def list_ids(self) -> set[str]:
        """
        Return the ids of every document in the store.
        """
        cursor = self._get_collection().find({}, projection={"_id": 1})
        return {str(raw["_id"]) for raw in cursor}

    def query(self, criteria: dict[str, Any]) -> set[str]:
        """
        Return the ids of documents matching a MongoDB filter.

        Used for relationship discovery, e.g. ``{"job_id": "<job id>"}`` to
        find the traces of a job.
        """
        cursor = self._get_collection().find(criteria, projection={"_id": 1})
        return {str(raw["_id"]) for raw in cursor}

    def count(self) -> int:
        """
        Number of documents in the store.
        """
        return self._get_collection().count_documents({})

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def put(self, doc_id: str, content: Any, format: DocumentFormat) -> None:
        """
        Insert or overwrite a document with an explicitly declared format.

        JSON text is parsed and stored as an object. The ``jobId``
        back-reference found in the content is indexed under ``job_id``.

        Raises:
            DocumentFormatError: If XML content is not a well-formed markup
                string, or JSON content is not a storable object or array
        """
        format = DocumentFormat(format)
        if format == DocumentFormat.XML:
            if not isinstance(content, str):
                raise DocumentFormatError(
                    f"XML document '{doc_id}' must be a string, got {type(content).__name__}"
                )
        else:
            content = _prepare_json(doc_id, content)

        document = {
            "_id": doc_id,
            "format": format.value,
            "content": content,
            JOB_INDEX_FIELD: extract_job_ref(content, format),
            "updated_at": datetime.now(timezone.utc),
        }
        self._get_collection().replace_one({"_id": doc_id}, document, upsert=True)
        logger.debug(f"Stored {format.value} document {doc_id} in {self.database}.{self.collection}")

    def delete(self, doc_id: str) -> bool:
        """
        Delete a document. Returns True when a document was removed.
        """
        result = self._get_collection().delete_one({"_id": doc_id})
        return result.deleted_count > 0

    def clear(self) -> int:
        """
        Delete every document in the store and return how many were removed.
        """
        result = self._get_collection().delete_many({})
        return result.deleted_count


# ----------------------------------------------------------------------
# Wiring
# ----------------------------------------------------------------------


def build_stores(
    connection_string: str,
    settings: Optional[JobArchiveSettings] = None,
) -> tuple[MongoDocumentStore, MongoDocumentStore]:
    """
    Build the (job store, trace store) pair described by the settings.
    """
    settings = settings or JobArchiveSettings()
    job_store = MongoDocumentStore(
        connection_string,
        database=settings.jobs_database,
        collection=settings.jobs_collection,
        server_selection_timeout_ms=settings.server_selection_timeout_ms,
    )
    trace_store = MongoDocumentStore(
        connection_string,
        database=settings.traces_database,
        collection=settings.traces_collection,
        server_selection_timeout_ms=settings.server_selection_timeout_ms,
    )
    return job_store, trace_store


def build_job_manager(
    connection_string: str,
    settings: Optional[JobArchiveSettings] = None,
) -> JobManager:
    """
    Build a JobManager over the MongoDB job and trace stores.
    """
    job_store, trace_store = build_stores(connection_string, settings)
    return JobManager(job_store, trace_store)
