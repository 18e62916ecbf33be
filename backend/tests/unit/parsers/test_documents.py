"""Unit tests for document dispatch, spreadsheets and plain text.

Run with: pytest backend/tests/unit/parsers/test_documents.py -v
"""

import io

import pytest
from openpyxl import Workbook

from subintake.errors import ParseFailure, UnsupportedFileType
from subintake.models import ExtractionMethod, ExtractionStats
from subintake.parsers import documents
from subintake.parsers.documents import (
    get_extension,
    is_supported,
    parse_document,
    parse_file,
    parse_pdf,
)
from subintake.parsers.spreadsheet import read_sheets, sheets_to_text

LONG_TEXT = "Acme Electric LLC\n" + "Electrical installation for the east wing. " * 5


def _workbook_bytes() -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = "Bids"
    ws.append(["Company", "Contact", "Phone"])
    ws.append(["Acme Electric LLC", None, "555-123-4567"])
    notes = wb.create_sheet("Notes")
    notes.append(["Includes, commas"])
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


class TestExtensions:
    """Tests for extension handling."""

    def test_extension_is_lower_cased(self):
        """Test case-insensitive extensions."""
        assert get_extension("Bid.PDF") == "pdf"
        assert get_extension("archive.tar.xlsx") == "xlsx"
        assert get_extension("README") is None

    def test_supported_types(self):
        """Test the accepted document types."""
        for name in ("a.pdf", "a.xlsx", "a.xlsm", "a.xls", "a.txt", "a.csv"):
            assert is_supported(name)
        assert not is_supported("photo.png")

    def test_unsupported_type_raises(self):
        """Test that unknown extensions raise UnsupportedFileType."""
        with pytest.raises(UnsupportedFileType) as exc_info:
            parse_document(b"data", "photo.png")

        assert exc_info.value.error_code == "UNSUPPORTED_FILE_TYPE"
        assert exc_info.value.message == "Unsupported file type: png"

    def test_missing_extension_raises(self):
        """Test that a file without an extension is unsupported."""
        with pytest.raises(UnsupportedFileType) as exc_info:
            parse_document(b"data", "README")

        assert "(none)" in exc_info.value.message


class TestPlainText:
    """Tests for text and CSV documents."""

    def test_decodes_utf8(self):
        """Test UTF-8 decoding of text files."""
        parsed = parse_document("Café Builders".encode("utf-8"), "notes.txt")
        assert parsed.text == "Café Builders"
        assert parsed.method == ExtractionMethod.TEXT

    def test_invalid_bytes_are_replaced(self):
        """Test that undecodable bytes do not fail the document."""
        parsed = parse_document(b"Hello \xff world", "list.csv")
        assert parsed.text == "Hello \ufffd world"


class TestSpreadsheets:
    """Tests for workbook rendering."""

    def test_reads_every_sheet_as_csv(self):
        """Test per-sheet CSV with empty cells as empty strings."""
        sheets = read_sheets(_workbook_bytes())

        assert [name for name, _ in sheets] == ["Bids", "Notes"]
        assert sheets[0][1] == "Company,Contact,Phone\nAcme Electric LLC,,555-123-4567\n"
        assert sheets[1][1] == '"Includes, commas"\n'

    def test_document_text_concatenates_sheets(self):
        """Test that each sheet's CSV is followed by a newline."""
        parsed = parse_document(_workbook_bytes(), "bids.xlsx")

        assert parsed.method == ExtractionMethod.SPREADSHEET
        assert parsed.text == sheets_to_text(read_sheets(_workbook_bytes()))
        assert parsed.text.endswith('"Includes, commas"\n\n')

    def test_unreadable_workbook_raises_parse_failure(self):
        """Test that reader errors surface as ParseFailure."""
        with pytest.raises(ParseFailure) as exc_info:
            parse_document(b"not a workbook", "bids.xlsx")

        assert exc_info.value.error_code == "PARSE_FAILURE"
        assert exc_info.value.__cause__ is not None

    def test_legacy_xls_raises_parse_failure(self):
        """Test that binary .xls files openpyxl cannot read fail cleanly."""
        with pytest.raises(ParseFailure):
            parse_document(b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1" + b"\x00" * 64, "old.xls")


class TestPdf:
    """Tests for choosing between the text layer and the fallback parser."""

    def test_uses_native_text_when_sufficient(self, monkeypatch):
        """Test that a rich text layer is used as-is."""
        monkeypatch.setattr(documents, "extract_native_pdf_text", lambda data: LONG_TEXT)

        parsed = parse_pdf(b"%PDF-1.4", "bid.pdf")

        assert parsed.method == ExtractionMethod.NATIVE
        assert parsed.text == LONG_TEXT

    def test_sparse_text_uses_fallback(self, monkeypatch, pdf_builder):
        """Test that the fallback parser runs when the text layer is sparse."""
        monkeypatch.setattr(documents, "extract_native_pdf_text", lambda data: "  ")
        content = b"(" + LONG_TEXT.replace("\n", " ").encode("ascii") + b") Tj"

        parsed = parse_pdf(pdf_builder(content), "scan.pdf")

        assert parsed.method == ExtractionMethod.FALLBACK
        assert parsed.text.startswith("Acme Electric LLC Electrical installation")

    def test_nothing_recoverable_returns_empty(self, monkeypatch, pdf_builder):
        """Test that unusable fallback output becomes empty text."""
        monkeypatch.setattr(documents, "extract_native_pdf_text", lambda data: "")

        parsed = parse_pdf(pdf_builder(b"(tiny) Tj"), "scan.pdf")

        assert parsed.method == ExtractionMethod.FALLBACK
        assert parsed.text == ""

    def test_reader_error_raises_parse_failure(self, monkeypatch):
        """Test that a PDF reader exception becomes ParseFailure."""

        def _broken(data):
            raise ValueError("No /Root object")

        monkeypatch.setattr(documents, "extract_native_pdf_text", _broken)

        with pytest.raises(ParseFailure) as exc_info:
            parse_pdf(b"garbage", "broken.pdf")

        assert exc_info.value.message == "Failed to parse broken.pdf: No /Root object"
        assert isinstance(exc_info.value.__cause__, ValueError)


class TestParseFile:
    """Tests for statistics recording."""

    def test_records_stats(self):
        """Test that the accumulator sees each parsed file."""
        stats = ExtractionStats()

        text = parse_file(b"hello world", "notes.txt", stats=stats)

        assert text == "hello world"
        assert stats.total_files_processed == 1
        assert stats.total_characters_extracted == 11
        assert stats.file_details[0].method == "text"

    def test_stats_are_optional(self):
        """Test parsing without an accumulator."""
        assert parse_file(b"hi", "a.txt") == "hi"
