# =============================================================================
# Job Archive Errors
# =============================================================================
# Exception types raised by the job archive libraries.
# =============================================================================

__all__ = ["JobArchiveError", "ArchiveError", "DocumentFormatError"]


class JobArchiveError(Exception):
    """Base class for job archive failures."""


class ArchiveError(JobArchiveError):
    """The archive container is unreadable or structurally corrupt."""


class DocumentFormatError(JobArchiveError, ValueError):
    """Document content does not parse in its declared format."""
