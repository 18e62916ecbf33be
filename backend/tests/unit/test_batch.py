"""Unit tests for batch processing.

Run with: pytest backend/tests/unit/test_batch.py -v
"""

import itertools

import pytest

from subintake.batch import group_batch, process_batch, process_document
from subintake.errors import UnsupportedFileType
from subintake.extraction.pipeline import ExtractionConfig, ExtractionPipeline
from subintake.models import ExtractionStats, ProcessOptions

PROPOSAL = (
    b"Contact: John Smith, john.smith@acme.com, (555) 123-4567, "
    b"Scope of Work: electrical installation"
)


def _ids():
    counter = itertools.count(1)
    return lambda: f"rec-{next(counter)}"


class TestProcessDocument:
    """Tests for single-document processing."""

    @pytest.mark.asyncio
    async def test_text_document(self):
        """Test a plain-text proposal end to end."""
        stats = ExtractionStats()

        record = await process_document(
            PROPOSAL,
            "Acme Electric LLC Proposal.txt",
            "rec-1",
            options=ProcessOptions(enable_augmentation=False),
            stats=stats,
        )

        assert record.id == "rec-1"
        assert record.company_name == "Acme Electric LLC"
        assert record.email == "john.smith@acme.com"
        assert record.trade == "Electrical"
        assert stats.total_files_processed == 1
        assert stats.augmented_files_count == 0

    @pytest.mark.asyncio
    async def test_unsupported_file_raises(self):
        """Test that unknown extensions are rejected."""
        with pytest.raises(UnsupportedFileType):
            await process_document(b"\x89PNG", "photo.png", "rec-1")

    @pytest.mark.asyncio
    async def test_augmentation_is_counted(self, fake_provider):
        """Test that an attempted augmentation pass is recorded in stats."""
        provider = fake_provider(company_name="Doe Roofing Inc")
        pipeline = ExtractionPipeline(ExtractionConfig(), provider=provider)
        stats = ExtractionStats()

        record = await process_document(
            b"Reach me at jane.doe@acme.com", "notes.txt", "rec-1",
            stats=stats, pipeline=pipeline,
        )

        assert provider.calls == [("full", "notes.txt")]
        assert record.company_name == "Doe Roofing Inc"
        assert stats.augmented_files_count == 1


class TestProcessBatch:
    """Tests for batch processing."""

    @pytest.mark.asyncio
    async def test_failure_does_not_abort_batch(self):
        """Test that a bad file becomes an error entry in input order."""
        stats = ExtractionStats()
        files = [
            ("acme.txt", PROPOSAL),
            ("photo.png", b"\x89PNG"),
            ("bolt.csv", b"Bolt Mechanical Inc,mike@bolt.com,555-987-6543"),
        ]

        result = await process_batch(
            files,
            options=ProcessOptions(enable_augmentation=False),
            stats=stats,
            id_factory=_ids(),
        )

        assert [f.filename for f in result.processed_files] == [
            "acme.txt",
            "photo.png",
            "bolt.csv",
        ]
        assert [f.status for f in result.processed_files] == ["success", "error", "success"]

        failed = result.failed[0]
        assert failed.error_code == "UNSUPPORTED_FILE_TYPE"
        assert failed.contacts == []

        assert [c.id for c in result.contacts] == ["rec-1", "rec-3"]
        assert result.contacts[1].company_name == "Bolt Mechanical Inc"
        assert result.contacts[1].phone == "(555) 987-6543"
        assert stats.total_files_processed == 2

    @pytest.mark.asyncio
    async def test_empty_batch(self):
        """Test that no files yield an empty result."""
        result = await process_batch([])

        assert result.processed_files == []
        assert result.contacts == []


class TestGroupBatch:
    """Tests for batch grouping."""

    def test_groups_duplicates_across_files(self, record_factory):
        """Test that files sharing an email form one group."""
        records = [
            record_factory("1", "a.pdf", company_name=("Acme", 0.6), email=("j@acme.com", 0.95)),
            record_factory("2", "b.pdf", company_name=("Bolt", 0.9), email=("m@bolt.com", 0.95)),
            record_factory("3", "c.pdf", company_name=("Acme", 0.9), email=("j@acme.com", 0.95)),
        ]

        groups = group_batch(records)

        assert [g.company_name for g in groups] == ["Acme", "Bolt"]
        assert groups[0].is_duplicate is True
        assert groups[0].contacts[0].source == "a.pdf, c.pdf"
