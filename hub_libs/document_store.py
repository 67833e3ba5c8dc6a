# =============================================================================
# Document Store Contract
# =============================================================================
# The interface the job manager needs from the job store and the trace store,
# plus helpers for deriving the indexed job back-reference from content.
# =============================================================================

from __future__ import annotations

from typing import Any, Optional, Protocol

from hub_libs.models import DocumentFormat, StoredDocument, parse_xml

__all__ = ["DocumentStore", "JOB_INDEX_FIELD", "JOB_REF_FIELD", "extract_job_ref"]

# Back-reference field inside document content
JOB_REF_FIELD = "jobId"
# Top-level field the store indexes the back-reference under
JOB_INDEX_FIELD = "job_id"


class DocumentStore(Protocol):
    """
    Minimal document store used for both jobs and traces.

    Implementations keep the declared format next to each document and index
    the ``jobId`` back-reference under ``job_id`` so that ``query`` can find
    all traces of a job.
    """

    def get(self, doc_id: str) -> Optional[StoredDocument]: ...

    def list_ids(self) -> set[str]: ...

    def query(self, criteria: dict[str, Any]) -> set[str]: ...

    def put(self, doc_id: str, content: Any, format: DocumentFormat) -> None: ...

    def delete(self, doc_id: str) -> bool: ...

    def count(self) -> int: ...


def extract_job_ref(content: Any, format: DocumentFormat) -> Optional[str]:
    """
    Find the job id a document refers to.

    JSON: a top-level ``jobId``, or ``jobId`` inside a top-level ``trace`` or
    ``job`` object. XML: the text of the first element whose local name is
    ``jobId``, whatever its namespace.

    Returns:
        The job id, or None when the document carries no back-reference

    Raises:
        DocumentFormatError: If XML content is not well-formed
    """
    if format == DocumentFormat.XML:
        root = parse_xml(content)
        for element in root.iter():
            if not isinstance(element.tag, str):
                continue
            if element.tag.rsplit("}", 1)[-1] == JOB_REF_FIELD:
                text = (element.text or "").strip()
                return text or None
        return None

    if not isinstance(content, dict):
        return None
    if content.get(JOB_REF_FIELD) is not None:
        return str(content[JOB_REF_FIELD])
    for wrapper in ("trace", "job"):
        nested = content.get(wrapper)
        if isinstance(nested, dict) and nested.get(JOB_REF_FIELD) is not None:
            return str(nested[JOB_REF_FIELD])
    return None
