"""
Unit tests for archive container utilities.

Covers entry naming, atomic writes and entry iteration.
"""

import zipfile

import pytest

from hub_libs.archive import ArchiveWriter, entry_name, iter_entries, parse_entry_name
from hub_libs.errors import ArchiveError
from hub_libs.models import DocumentFormat, DocumentKind, StoredDocument


@pytest.fixture
def json_job():
    return StoredDocument(doc_id="job-1", format=DocumentFormat.JSON, content={"jobId": "job-1"})


@pytest.fixture
def xml_trace():
    return StoredDocument(
        doc_id="trace-1",
        format=DocumentFormat.XML,
        content="<trace><jobId>job-1</jobId></trace>",
    )


# =============================================================================
# Entry naming
# =============================================================================


class TestEntryNames:
    def test_entry_name(self):
        assert entry_name(DocumentKind.JOB, "123", DocumentFormat.JSON) == "jobs/123.json"
        assert entry_name(DocumentKind.TRACE, "456", DocumentFormat.XML) == "traces/456.xml"

    def test_parse_entry_name(self):
        assert parse_entry_name("jobs/123.json") == (DocumentKind.JOB, "123", DocumentFormat.JSON)
        assert parse_entry_name("traces/456.XML") == (DocumentKind.TRACE, "456", DocumentFormat.XML)

    @pytest.mark.parametrize(
        "doc_id",
        ["plain", "with.dots.in.it", "nested/path/id", "1234567890123456789"],
    )
    def test_ids_survive_naming(self, doc_id):
        for kind in DocumentKind:
            for format in DocumentFormat:
                assert parse_entry_name(entry_name(kind, doc_id, format)) == (kind, doc_id, format)

    @pytest.mark.parametrize(
        "name",
        [
            "readme.md",
            "other/123.json",
            "jobs/noextension",
            "jobs/.json",
            "traces/123.txt",
            "Jobs/123.json",
        ],
    )
    def test_parse_rejects_unrecognised_names(self, name):
        with pytest.raises(ValueError):
            parse_entry_name(name)


# =============================================================================
# ArchiveWriter
# =============================================================================


class TestArchiveWriter:
    def test_writes_entries_on_clean_exit(self, tmp_path, json_job, xml_trace):
        destination = tmp_path / "out.zip"

        with ArchiveWriter(destination) as writer:
            assert writer.add(DocumentKind.JOB, json_job) == "jobs/job-1.json"
            assert writer.add(DocumentKind.TRACE, xml_trace) == "traces/trace-1.xml"
            assert not destination.exists()

        assert writer.entry_count == 2
        with zipfile.ZipFile(destination) as archive:
            assert archive.namelist() == ["jobs/job-1.json", "traces/trace-1.xml"]
            assert archive.read("traces/trace-1.xml") == b"<trace><jobId>job-1</jobId></trace>"
        assert list(tmp_path.iterdir()) == [destination]

    def test_failure_discards_temp_file(self, tmp_path, json_job):
        destination = tmp_path / "out.zip"

        with pytest.raises(RuntimeError, match="boom"):
            with ArchiveWriter(destination) as writer:
                writer.add(DocumentKind.JOB, json_job)
                raise RuntimeError("boom")

        assert list(tmp_path.iterdir()) == []

    def test_failure_keeps_existing_destination(self, tmp_path, json_job):
        destination = tmp_path / "out.zip"
        destination.write_bytes(b"previous archive")

        with pytest.raises(RuntimeError):
            with ArchiveWriter(destination) as writer:
                writer.add(DocumentKind.JOB, json_job)
                raise RuntimeError("boom")

        assert destination.read_bytes() == b"previous archive"
        assert list(tmp_path.iterdir()) == [destination]

    def test_overwrites_existing_destination(self, tmp_path, json_job):
        destination = tmp_path / "out.zip"
        destination.write_bytes(b"previous archive")

        with ArchiveWriter(destination) as writer:
            writer.add(DocumentKind.JOB, json_job)

        assert zipfile.is_zipfile(destination)

    def test_add_outside_context_raises(self, tmp_path, json_job):
        with pytest.raises(RuntimeError):
            ArchiveWriter(tmp_path / "out.zip").add(DocumentKind.JOB, json_job)


# =============================================================================
# iter_entries
# =============================================================================


class TestIterEntries:
    def test_yields_file_entries(self, tmp_path):
        source = tmp_path / "in.zip"
        with zipfile.ZipFile(source, "w") as archive:
            archive.writestr("jobs/", "")
            archive.writestr("jobs/j1.json", b"{}")
            archive.writestr("traces/t1.xml", b"<t/>")

        assert list(iter_entries(source)) == [
            ("jobs/j1.json", b"{}"),
            ("traces/t1.xml", b"<t/>"),
        ]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            list(iter_entries(tmp_path / "missing.zip"))

    def test_directory_is_not_an_archive(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            list(iter_entries(tmp_path))

    def test_not_a_zip(self, tmp_path):
        source = tmp_path / "in.zip"
        source.write_text("plain text")

        with pytest.raises(ArchiveError, match="Not a readable archive"):
            list(iter_entries(source))

    def test_corrupt_entry(self, tmp_path):
        source = tmp_path / "in.zip"
        with zipfile.ZipFile(source, "w", compression=zipfile.ZIP_STORED) as archive:
            archive.writestr("jobs/j1.json", b'{"jobId": "j1"}')

        # Flip a payload byte so the CRC check fails on read
        data = bytearray(source.read_bytes())
        offset = data.index(b'{"jobId"')
        data[offset] = ord("[")
        source.write_bytes(bytes(data))

        with pytest.raises(ArchiveError, match="Corrupt entry"):
            list(iter_entries(source))
