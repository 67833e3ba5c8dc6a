"""MongoDB Resource - Job and trace store connections for pipeline runs."""

from functools import cached_property

from dagster import ConfigurableResource
from pydantic import Field

from hub_libs.job_manager import JobManager
from hub_libs.mongo_store import MongoDocumentStore

__all__ = ["JobArchiveResource"]


class JobArchiveResource(ConfigurableResource):
    """
    Dagster resource for the job and trace stores.

    Pipeline runs write their job document through ``job_store`` and every
    trace they emit through ``trace_store``; housekeeping ops get a
    ``JobManager`` over the same pair.
    """

    connection_string: str = Field(..., description="MongoDB connection URI")
    jobs_database: str = Field("data_hub_jobs", description="Job store database")
    jobs_collection: str = Field("jobs", description="Job store collection")
    traces_database: str = Field("data_hub_traces", description="Trace store database")
    traces_collection: str = Field("traces", description="Trace store collection")
    server_selection_timeout_ms: int = Field(
        10000, description="Server selection timeout in milliseconds"
    )

    @cached_property
    def job_store(self) -> MongoDocumentStore:
        return MongoDocumentStore(
            self.connection_string,
            database=self.jobs_database,
            collection=self.jobs_collection,
            server_selection_timeout_ms=self.server_selection_timeout_ms,
        )

    @cached_property
    def trace_store(self) -> MongoDocumentStore:
        return MongoDocumentStore(
            self.connection_string,
            database=self.traces_database,
            collection=self.traces_collection,
            server_selection_timeout_ms=self.server_selection_timeout_ms,
        )

    def get_job_manager(self) -> JobManager:
        """Job manager over this resource's job and trace stores."""
        return JobManager(self.job_store, self.trace_store)
