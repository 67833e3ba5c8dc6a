"""Dagster Resources - Job and Trace Store Connections."""

from .mongodb_resource import JobArchiveResource

__all__ = [
    "JobArchiveResource",
]
