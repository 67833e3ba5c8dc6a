# =============================================================================
# Document Models
# =============================================================================
# Defines the stored document model shared by the job and trace stores:
# - DocumentFormat: declared serialization (xml / json)
# - DocumentKind: which store a document belongs to (job / trace)
# - StoredDocument: identifier + declared format + content
# =============================================================================

import json
import xml.etree.ElementTree as ET
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, model_validator

from hub_libs.errors import DocumentFormatError

__all__ = [
    "DocumentFormat",
    "DocumentKind",
    "StoredDocument",
    "parse_xml",
]


# =============================================================================
# Enums
# =============================================================================

class DocumentFormat(str, Enum):
    """Declared serialization of a stored document."""
    XML = "xml"
    JSON = "json"

    @property
    def extension(self) -> str:
        """File extension used for archive entries, including the dot."""
        return f".{self.value}"

    @classmethod
    def from_extension(cls, extension: str) -> "DocumentFormat":
        """
        Resolve a format from a file extension.

        Accepts the extension with or without the leading dot, in any case.

        Raises:
            ValueError: If the extension is not ".xml" or ".json"
        """
        normalized = extension.lower().lstrip(".")
        for member in cls:
            if member.value == normalized:
                return member
        raise ValueError(f"Unsupported document extension: '{extension}'")


class DocumentKind(str, Enum):
    """Which of the two stores a document lives in."""
    JOB = "job"
    TRACE = "trace"


# =============================================================================
# Parsing helpers
# =============================================================================

def parse_xml(content: str | bytes) -> ET.Element:
    """
    Parse markup content into an element tree root.

    Raises:
        DocumentFormatError: If the content is not well-formed XML
    """
    try:
        return ET.fromstring(content)
    except ET.ParseError as e:
        raise DocumentFormatError(f"Content is not well-formed XML: {e}") from e


# =============================================================================
# Stored Document
# =============================================================================

class StoredDocument(BaseModel):
    """
    A job or trace document as held by a document store.

    XML content is kept as the raw markup string. JSON content is kept as the
    parsed object so that it stays object-typed inside the store.

    Attributes:
        doc_id: Opaque document identifier (job id or trace id)
        format: Declared serialization format
        content: Markup string (xml) or parsed JSON value (json)
    """

    doc_id: str = Field(..., description="Document identifier")
    format: DocumentFormat = Field(..., description="Declared serialization format")
    content: Any = Field(..., description="Markup string or parsed JSON value")

    @model_validator(mode="after")
    def check_content_matches_format(self) -> "StoredDocument":
        if self.format == DocumentFormat.XML and not isinstance(self.content, str):
            raise ValueError("XML documents must carry their markup as a string")
        return self

    def serialize(self) -> bytes:
        """Render the document in its declared format as UTF-8 bytes."""
        if self.format == DocumentFormat.XML:
            return self.content.encode("utf-8")
        return json.dumps(self.content, indent=2, ensure_ascii=False).encode("utf-8")

    @classmethod
    def from_bytes(
        cls, doc_id: str, data: bytes, format: DocumentFormat
    ) -> "StoredDocument":
        """
        Build a document from its serialized form.

        Inverse of serialize(): the payload is decoded as UTF-8 and checked
        against the declared format.

        Raises:
            DocumentFormatError: If the payload is not valid in the declared format
        """
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DocumentFormatError(f"Document '{doc_id}' is not UTF-8: {e}") from e

        if format == DocumentFormat.XML:
            parse_xml(text)
            return cls(doc_id=doc_id, format=format, content=text)

        try:
            content = json.loads(text)
        except json.JSONDecodeError as e:
            raise DocumentFormatError(f"Document '{doc_id}' is not valid JSON: {e}") from e
        return cls(doc_id=doc_id, format=format, content=content)
