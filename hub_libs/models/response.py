# =============================================================================
# Job Archive Response Models
# =============================================================================
# Aggregate results returned by the delete / export / import operations.
# =============================================================================

from pathlib import Path
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_serializer
from pydantic.alias_generators import to_camel

__all__ = ["JobDeleteResponse", "JobExportResponse", "JobImportResponse"]


_RESPONSE_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
)


class JobDeleteResponse(BaseModel):
    """
    Outcome of a batch job deletion.

    Every candidate id is evaluated independently; the response accumulates
    per-candidate outcomes instead of stopping at the first missing job.

    Attributes:
        total_count: Jobs deleted
        error_count: Candidate ids that did not resolve to a job
        deleted_jobs: Ids of deleted jobs
        deleted_traces: Ids of traces removed along with their job
        failed_traces: Ids of traces the trace store did not remove
    """

    model_config = _RESPONSE_CONFIG

    total_count: int = Field(0, description="Number of jobs deleted")
    error_count: int = Field(0, description="Number of ids that could not be deleted")
    deleted_jobs: set[str] = Field(default_factory=set)
    deleted_traces: set[str] = Field(default_factory=set)
    failed_traces: set[str] = Field(default_factory=set)

    @computed_field
    @property
    def degraded(self) -> bool:
        """True when a job was removed but some of its traces were not."""
        return bool(self.failed_traces)

    @field_serializer("deleted_jobs", "deleted_traces", "failed_traces")
    def _sorted_ids(self, ids: set[str]) -> list[str]:
        return sorted(ids)

    def record_job(self, job_id: str) -> None:
        self.total_count += 1
        self.deleted_jobs.add(job_id)

    def record_traces(
        self, deleted_ids: Iterable[str], failed_ids: Iterable[str] = ()
    ) -> None:
        self.deleted_traces.update(deleted_ids)
        self.failed_traces.update(failed_ids)

    def record_error(self) -> None:
        self.error_count += 1


class JobExportResponse(BaseModel):
    """Outcome of an export. ``path`` is None when no archive was written."""

    model_config = _RESPONSE_CONFIG

    path: Optional[Path] = None
    job_count: int = 0
    trace_count: int = 0

    @computed_field
    @property
    def entry_count(self) -> int:
        return self.job_count + self.trace_count


class JobImportResponse(BaseModel):
    """
    Outcome of an import.

    Attributes:
        imported_jobs: Ids written to the job store
        imported_traces: Ids written to the trace store
        skipped_entries: Archive entry names that were not imported
    """

    model_config = _RESPONSE_CONFIG

    imported_jobs: set[str] = Field(default_factory=set)
    imported_traces: set[str] = Field(default_factory=set)
    skipped_entries: list[str] = Field(default_factory=list)

    @computed_field
    @property
    def skipped_count(self) -> int:
        return len(self.skipped_entries)

    @field_serializer("imported_jobs", "imported_traces")
    def _sorted_ids(self, ids: set[str]) -> list[str]:
        return sorted(ids)
