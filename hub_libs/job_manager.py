# =============================================================================
# Job Manager - Delete / Export / Import
# =============================================================================
# Operates on pipeline job documents and the trace documents each job emits.
# Jobs and traces live in two independent stores; the job → traces
# relationship is resolved by querying the trace store on its job_id index.
# =============================================================================

import logging
from pathlib import Path
from typing import Iterable, Optional, Union

from hub_libs.archive import ArchiveWriter, iter_entries, parse_entry_name
from hub_libs.document_store import JOB_INDEX_FIELD, DocumentStore
from hub_libs.id_spec import parse_id_spec
from hub_libs.models import (
    DocumentKind,
    JobDeleteResponse,
    JobExportResponse,
    JobImportResponse,
    StoredDocument,
)

__all__ = ["JobManager"]

logger = logging.getLogger(__name__)


class JobManager:
    """
    Delete, export and import pipeline jobs together with their traces.

    The manager holds nothing but the two store handles, so every operation
    can be called repeatedly and in any order. Batch operations report
    per-item outcomes in their response; only store connection errors
    (``pymongo.errors.PyMongoError``) and archive I/O failures abort a call.

    Example:
        >>> manager = JobManager(job_store, trace_store)
        >>> manager.delete_jobs("job-1,job-2").total_count
        2
    """

    def __init__(self, job_store: DocumentStore, trace_store: DocumentStore) -> None:
        self.job_store = job_store
        self.trace_store = trace_store

    def _trace_ids(self, job_id: str) -> set[str]:
        return self.trace_store.query({JOB_INDEX_FIELD: job_id})

    def _store_for(self, kind: DocumentKind) -> DocumentStore:
        return self.job_store if kind == DocumentKind.JOB else self.trace_store

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    def delete_jobs(self, id_spec: Optional[str]) -> JobDeleteResponse:
        """
        Delete jobs and every trace that references them.

        Args:
            id_spec: Comma-delimited job ids. None or "" deletes nothing.

        Returns:
            JobDeleteResponse with counts and the ids removed. Ids that do not
            resolve to a job increment error_count and leave traces untouched.
            Traces the trace store fails to remove are listed in failed_traces;
            their job is still deleted.
        """
        response = JobDeleteResponse()

        for job_id in parse_id_spec(id_spec):
            if self.job_store.get(job_id) is None:
                logger.warning(f"Job not found, nothing deleted: {job_id!r}")
                response.record_error()
                continue

            deleted_traces: list[str] = []
            failed_traces: list[str] = []
            for trace_id in self._trace_ids(job_id):
                if self.trace_store.delete(trace_id):
                    deleted_traces.append(trace_id)
                else:
                    failed_traces.append(trace_id)
            response.record_traces(deleted_traces, failed_traces)

            if failed_traces:
                logger.warning(
                    f"Job {job_id}: {len(failed_traces)} trace(s) were not removed: "
                    f"{sorted(failed_traces)}"
                )

            if self.job_store.delete(job_id):
                response.record_job(job_id)
                logger.debug(f"Deleted job {job_id} and {len(deleted_traces)} trace(s)")
            else:
                # Removed by someone else between lookup and delete
                logger.warning(f"Job {job_id} disappeared before it could be deleted")
                response.record_error()

        logger.info(
            f"Deleted {response.total_count} job(s) and "
            f"{len(response.deleted_traces)} trace(s); {response.error_count} error(s)"
        )
        return response

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def _resolve_jobs(self, job_ids: Optional[Iterable[str]]) -> list[StoredDocument]:
        if job_ids is None:
            selection = sorted(self.job_store.list_ids())
        else:
            selection = list(dict.fromkeys(job_ids))

        jobs = []
        for job_id in selection:
            document = self.job_store.get(job_id)
            if document is None:
                logger.debug(f"Job not found, not exported: {job_id!r}")
                continue
            jobs.append(document)
        return jobs

    def export_jobs(
        self,
        destination: Union[str, Path],
        job_ids: Optional[Iterable[str]] = None,
    ) -> JobExportResponse:
        """
        Export jobs and their traces to an archive container.

        Args:
            destination: Path of the archive to create (overwritten if present)
            job_ids: Jobs to export. None exports every job in the job store.
                Ids that do not exist are ignored.

        Returns:
            JobExportResponse. When no selected job exists nothing is written
            and ``path`` is None.

        Raises:
            OSError: If the archive cannot be written. The destination is never
                left holding a partial archive.
        """
        destination = Path(destination)
        jobs = self._resolve_jobs(job_ids)
        if not jobs:
            logger.info(f"No jobs selected for export; {destination} not written")
            return JobExportResponse()

        trace_count = 0
        with ArchiveWriter(destination) as writer:
            for job in jobs:
                writer.add(DocumentKind.JOB, job)
                for trace_id in sorted(self._trace_ids(job.doc_id)):
                    trace = self.trace_store.get(trace_id)
                    if trace is None:
                        logger.debug(f"Trace {trace_id} vanished during export")
                        continue
                    writer.add(DocumentKind.TRACE, trace)
                    trace_count += 1

        return JobExportResponse(
            path=destination,
            job_count=len(jobs),
            trace_count=trace_count,
        )

    # ------------------------------------------------------------------
    # Import
    # ------------------------------------------------------------------

    def import_jobs(self, source: Union[str, Path]) -> JobImportResponse:
        """
        Restore jobs and traces from an archive container.

        Each entry is written under its original id with the format given by
        its extension, overwriting any existing document. Traces are imported
        whether or not their job exists in the job store. Entries with an
        unknown directory or extension, or whose payload does not parse in its
        declared format, are skipped and listed in the response.

        Raises:
            FileNotFoundError: If the archive does not exist
            ArchiveError: If the archive is not a readable container
        """
        response = JobImportResponse()

        for name, payload in iter_entries(source):
            try:
                kind, doc_id, format = parse_entry_name(name)
                document = StoredDocument.from_bytes(doc_id, payload, format)
                self._store_for(kind).put(doc_id, document.content, format)
            except ValueError as e:
                logger.warning(f"Skipping archive entry {name}: {e}")
                response.skipped_entries.append(name)
                continue

            if kind == DocumentKind.JOB:
                response.imported_jobs.add(doc_id)
            else:
                response.imported_traces.add(doc_id)
            logger.debug(f"Imported {kind.value} {doc_id} ({format.value})")

        logger.info(
            f"Imported {len(response.imported_jobs)} job(s) and "
            f"{len(response.imported_traces)} trace(s) from {source}; "
            f"skipped {response.skipped_count} entries"
        )
        return response
