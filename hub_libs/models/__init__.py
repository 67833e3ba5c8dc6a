# =============================================================================
# Data Models Library
# =============================================================================
# Pydantic models and settings for the job archive.
# =============================================================================

"""
Data models for the job archive.

This library provides:
- StoredDocument: A job or trace document with its declared format
- Response models for delete / export / import
- Configuration models
"""

__version__ = "0.1.0"

# Document models
from .document import (
    DocumentFormat,
    DocumentKind,
    StoredDocument,
    parse_xml,
)

# Response models
from .response import (
    JobDeleteResponse,
    JobExportResponse,
    JobImportResponse,
)

# Configuration models
from .config import (
    MongoSettings,
    JobArchiveSettings,
)

__all__ = [
    # Document models
    "DocumentFormat",
    "DocumentKind",
    "StoredDocument",
    "parse_xml",
    # Response models
    "JobDeleteResponse",
    "JobExportResponse",
    "JobImportResponse",
    # Configuration models
    "MongoSettings",
    "JobArchiveSettings",
]
