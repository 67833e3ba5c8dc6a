"""
Shared pytest fixtures for the job archive tests.

Provides mongomock-backed job and trace stores and a seeded data set that
mirrors a few pipeline runs: three runs of a flow writing XML traces and one
run of a flow writing JSON traces, each run producing two traces.
"""

from dataclasses import dataclass, field

import mongomock
import pytest

from hub_libs.job_manager import JobManager
from hub_libs.models import DocumentFormat
from hub_libs.mongo_store import MongoDocumentStore


# =============================================================================
# Content builders
# =============================================================================

JOB_NS = "http://marklogic.com/data-hub/job"
TRACE_NS = "http://marklogic.com/data-hub/trace"


def xml_job(job_id: str) -> str:
    return (
        f'<?xml version="1.0" encoding="UTF-8"?>\n'
        f'<job xmlns="{JOB_NS}">'
        f"<jobId>{job_id}</jobId>"
        f"<flowName>testharmonize-xml</flowName>"
        f"<entityName>e2eentity</entityName>"
        f"<status>FINISHED</status>"
        f"</job>"
    )


def json_job(job_id: str) -> dict:
    return {
        "jobId": job_id,
        "flowName": "testharmonize-json",
        "entityName": "e2eentity",
        "status": "FINISHED",
        "options": {"name": "Bob Smith", "age": 55},
    }


def xml_trace(trace_id: str, job_id: str) -> str:
    return (
        f'<trace xmlns="{TRACE_NS}">'
        f"<jobId>{job_id}</jobId>"
        f"<traceId>{trace_id}</traceId>"
        f"<identifier>/doc-{trace_id}.xml</identifier>"
        f"</trace>"
    )


def json_trace(trace_id: str, job_id: str) -> dict:
    return {
        "trace": {
            "jobId": job_id,
            "traceId": trace_id,
            "identifier": f"/doc-{trace_id}.json",
        }
    }


# =============================================================================
# Store fixtures
# =============================================================================

@pytest.fixture
def mongomock_client():
    """In-memory MongoDB client for tests."""
    return mongomock.MongoClient()


@pytest.fixture
def patch_mongo_client(monkeypatch, mongomock_client):
    """Route every MongoDocumentStore to the mongomock client."""
    monkeypatch.setattr(
        "hub_libs.mongo_store.MongoClient",
        lambda *args, **kwargs: mongomock_client,
    )
    return mongomock_client


@pytest.fixture
def job_store(patch_mongo_client):
    return MongoDocumentStore(
        connection_string="mongodb://localhost:27017",
        database="data_hub_jobs",
        collection="jobs",
    )


@pytest.fixture
def trace_store(patch_mongo_client):
    return MongoDocumentStore(
        connection_string="mongodb://localhost:27017",
        database="data_hub_traces",
        collection="traces",
    )


@pytest.fixture
def job_manager(job_store, trace_store):
    return JobManager(job_store, trace_store)


# =============================================================================
# Seeded data
# =============================================================================

@dataclass
class SeededHub:
    """Ids of the seeded jobs and the traces each job produced."""

    job_ids: list[str]
    traces: dict[str, list[str]] = field(default_factory=dict)
    formats: dict[str, DocumentFormat] = field(default_factory=dict)


@pytest.fixture
def seeded_hub(job_store, trace_store) -> SeededHub:
    """Four jobs with two traces each: three XML runs and one JSON run."""
    hub = SeededHub(job_ids=[])
    runs = [
        ("job-1001", DocumentFormat.XML),
        ("job-1002", DocumentFormat.XML),
        ("job-1003", DocumentFormat.XML),
        ("job-2001", DocumentFormat.JSON),
    ]
    for job_id, format in runs:
        hub.job_ids.append(job_id)
        hub.formats[job_id] = format
        if format == DocumentFormat.XML:
            job_store.put(job_id, xml_job(job_id), format)
        else:
            job_store.put(job_id, json_job(job_id), format)

        hub.traces[job_id] = []
        for n in range(2):
            trace_id = f"{job_id}-trace-{n}"
            hub.traces[job_id].append(trace_id)
            hub.formats[trace_id] = format
            if format == DocumentFormat.XML:
                trace_store.put(trace_id, xml_trace(trace_id, job_id), format)
            else:
                trace_store.put(trace_id, json_trace(trace_id, job_id), format)
    return hub
