# =============================================================================
# Archive Container Utilities
# =============================================================================
# Naming conventions and I/O for job archive containers (ZIP files).
# Used by the job manager for export and import.
# =============================================================================

"""
Archive container utilities for the job archive.

Layout of a container:

    jobs/<job id>.xml | .json
    traces/<trace id>.xml | .json

The top-level directory says which store an entry belongs to and the
extension carries the document's declared format. No manifest entry and no
directory entries are written, so the entry count equals the number of
archived documents.
"""

import logging
import os
import tempfile
import zipfile
import zlib
from pathlib import Path
from types import TracebackType
from typing import Iterator, Optional, Type, Union

from hub_libs.errors import ArchiveError
from hub_libs.models import DocumentFormat, DocumentKind, StoredDocument

__all__ = [
    "KIND_DIRECTORIES",
    "ArchiveWriter",
    "entry_name",
    "iter_entries",
    "parse_entry_name",
]

logger = logging.getLogger(__name__)

KIND_DIRECTORIES: dict[DocumentKind, str] = {
    DocumentKind.JOB: "jobs",
    DocumentKind.TRACE: "traces",
}
_DIRECTORY_KINDS = {directory: kind for kind, directory in KIND_DIRECTORIES.items()}


# =============================================================================
# Entry naming
# =============================================================================

def entry_name(kind: DocumentKind, doc_id: str, format: DocumentFormat) -> str:
    """
    Build the archive entry name for a document.

    Examples:
        >>> entry_name(DocumentKind.JOB, "123", DocumentFormat.JSON)
        'jobs/123.json'
        >>> entry_name(DocumentKind.TRACE, "456", DocumentFormat.XML)
        'traces/456.xml'
    """
    return f"{KIND_DIRECTORIES[kind]}/{doc_id}{format.extension}"


def parse_entry_name(name: str) -> tuple[DocumentKind, str, DocumentFormat]:
    """
    Split an archive entry name into kind, document id and format.

    Everything between the top-level directory and the final extension is the
    document id, so ids containing "/" or "." survive a round trip.

    Raises:
        ValueError: If the directory or extension is not recognised, or the id is empty
    """
    directory, sep, remainder = name.partition("/")
    if not sep or directory not in _DIRECTORY_KINDS:
        raise ValueError(f"Entry '{name}' is not under jobs/ or traces/")

    doc_id, dot, extension = remainder.rpartition(".")
    if not dot:
        raise ValueError(f"Entry '{name}' has no extension")
    if not doc_id:
        raise ValueError(f"Entry '{name}' has an empty document id")

    return _DIRECTORY_KINDS[directory], doc_id, DocumentFormat.from_extension(extension)


# =============================================================================
# Writing
# =============================================================================

class ArchiveWriter:
    """
    Write an archive container atomically.

    Entries go to a temporary file next to the destination. The file is moved
    into place only when the ``with`` block exits cleanly; on any failure the
    temporary file is removed and the destination is left as it was.

    Example:
        >>> with ArchiveWriter(Path("/tmp/jobs.zip")) as writer:
        ...     writer.add(DocumentKind.JOB, job_document)
    """

    def __init__(self, destination: Union[str, Path]) -> None:
        self.destination = Path(destination)
        self.entry_count = 0
        self._temp_path: Optional[Path] = None
        self._zip: Optional[zipfile.ZipFile] = None

    def __enter__(self) -> "ArchiveWriter":
        self.destination.parent.mkdir(parents=True, exist_ok=True)
        temp_file = tempfile.NamedTemporaryFile(
            delete=False,
            dir=self.destination.parent,
            prefix=f".{self.destination.name}.",
            suffix=".part",
        )
        temp_file.close()
        self._temp_path = Path(temp_file.name)
        try:
            self._zip = zipfile.ZipFile(self._temp_path, "w", compression=zipfile.ZIP_DEFLATED)
        except Exception:
            self._discard()
            raise
        return self

    def add(self, kind: DocumentKind, document: StoredDocument) -> str:
        """Write one document and return its entry name."""
        if self._zip is None:
            raise RuntimeError("ArchiveWriter must be used as a context manager")
        name = entry_name(kind, document.doc_id, document.format)
        self._zip.writestr(name, document.serialize())
        self.entry_count += 1
        logger.debug(f"Archived {kind.value} {document.doc_id} as {name}")
        return name

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        try:
            if self._zip is not None:
                self._zip.close()
        except Exception:
            self._discard()
            if exc_type is None:
                raise
            return

        if exc_type is not None:
            self._discard()
            return

        try:
            os.replace(self._temp_path, self.destination)
        except Exception:
            self._discard()
            raise
        logger.info(f"Wrote archive {self.destination} with {self.entry_count} entries")

    def _discard(self) -> None:
        if self._temp_path is not None:
            self._temp_path.unlink(missing_ok=True)
            self._temp_path = None


# =============================================================================
# Reading
# =============================================================================

def iter_entries(source: Union[str, Path]) -> Iterator[tuple[str, bytes]]:
    """
    Yield ``(entry name, payload)`` for every file entry in a container.

    Directory entries are ignored.

    Raises:
        FileNotFoundError: If the container does not exist
        ArchiveError: If the container or one of its entries is corrupt
    """
    source = Path(source)
    if not source.is_file():
        raise FileNotFoundError(f"Archive not found: {source}")

    try:
        archive = zipfile.ZipFile(source)
    except zipfile.BadZipFile as e:
        raise ArchiveError(f"Not a readable archive: {source}: {e}") from e

    with archive:
        for info in archive.infolist():
            if info.is_dir():
                continue
            try:
                payload = archive.read(info)
            except (zipfile.BadZipFile, zlib.error, EOFError) as e:
                raise ArchiveError(
                    f"Corrupt entry '{info.filename}' in {source}: {e}"
                ) from e
            yield info.filename, payload
