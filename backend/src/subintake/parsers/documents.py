"""Document text extraction.

Chooses a reader by file extension: PDFs go through pdfplumber and, when
the text layer is sparse, the fallback parser; spreadsheets are rendered
as CSV; plain text is decoded as UTF-8.
"""

import io
import logging
from dataclasses import dataclass
from pathlib import PurePath

import pdfplumber

from ..config import get_settings
from ..errors import ParseFailure, UnsupportedFileType
from ..logging import log_document_parsed
from ..models import ExtractionMethod, ExtractionStats
from .pdf_fallback import recover_pdf_text
from .spreadsheet import read_sheets, sheets_to_text

logger = logging.getLogger(__name__)

PDF_EXTENSIONS = {"pdf"}
SPREADSHEET_EXTENSIONS = {"xlsx", "xlsm", "xls"}
TEXT_EXTENSIONS = {"txt", "csv"}

SUPPORTED_EXTENSIONS = PDF_EXTENSIONS | SPREADSHEET_EXTENSIONS | TEXT_EXTENSIONS


@dataclass
class ParsedDocument:
    """Text recovered from a document and how it was obtained."""

    filename: str
    text: str
    method: ExtractionMethod


def get_extension(filename: str) -> str | None:
    """Get the lower-cased extension of a filename, without the dot."""
    suffix = PurePath(filename).suffix
    return suffix[1:].lower() if suffix else None


def is_supported(filename: str) -> bool:
    """Check if a file can be read by extension."""
    return get_extension(filename) in SUPPORTED_EXTENSIONS


def extract_native_pdf_text(data: bytes) -> str:
    """Extract the PDF text layer, pages joined with newlines."""
    pages: list[str] = []
    with pdfplumber.open(io.BytesIO(data)) as pdf:
        for page in pdf.pages:
            page_text = page.extract_text()
            if page_text:
                pages.append(page_text)
    return "\n".join(pages)


def parse_pdf(data: bytes, filename: str = "unknown.pdf") -> ParsedDocument:
    """Parse a PDF, falling back to raw stream recovery for sparse text.

    Raises:
        ParseFailure: If the PDF reader cannot open the document
    """
    min_chars = get_settings().min_native_text_chars

    try:
        text = extract_native_pdf_text(data)
    except Exception as e:
        logger.error(f"PDF parsing error [{filename}]: {e}")
        raise ParseFailure(filename, str(e)) from e

    if len(text.strip()) > min_chars:
        logger.debug(f"[{filename}] PDF has native text")
        return ParsedDocument(filename=filename, text=text, method=ExtractionMethod.NATIVE)

    logger.info(f"[{filename}] Low text content detected, trying fallback parser")
    recovered = recover_pdf_text(data, min_chars=min_chars)
    if not recovered:
        logger.warning(f"[{filename}] No recoverable text in PDF")

    return ParsedDocument(filename=filename, text=recovered, method=ExtractionMethod.FALLBACK)


def parse_spreadsheet(data: bytes, filename: str = "unknown.xlsx") -> ParsedDocument:
    """Parse a workbook into concatenated CSV text.

    Raises:
        ParseFailure: If the workbook cannot be read
    """
    try:
        sheets = read_sheets(data)
    except Exception as e:
        logger.error(f"Spreadsheet parsing error [{filename}]: {e}")
        raise ParseFailure(filename, str(e)) from e

    return ParsedDocument(
        filename=filename,
        text=sheets_to_text(sheets),
        method=ExtractionMethod.SPREADSHEET,
    )


def parse_document(data: bytes, filename: str) -> ParsedDocument:
    """Parse a document based on its extension.

    Raises:
        UnsupportedFileType: If the extension is not recognized
        ParseFailure: If the document reader fails
    """
    ext = get_extension(filename)

    if ext in PDF_EXTENSIONS:
        return parse_pdf(data, filename)
    if ext in SPREADSHEET_EXTENSIONS:
        return parse_spreadsheet(data, filename)
    if ext in TEXT_EXTENSIONS:
        return ParsedDocument(
            filename=filename,
            text=data.decode("utf-8", errors="replace"),
            method=ExtractionMethod.TEXT,
        )

    raise UnsupportedFileType(filename, ext)


def parse_file(
    data: bytes, filename: str, stats: ExtractionStats | None = None
) -> str:
    """Parse a document to plain text, recording statistics if requested.

    Args:
        data: Raw file bytes
        filename: Original filename (extension selects the reader)
        stats: Optional accumulator to record the extraction in

    Returns:
        The document text, possibly empty
    """
    parsed = parse_document(data, filename)

    if stats is not None:
        stats.record_file(filename, parsed.method, len(parsed.text))
    log_document_parsed(filename, parsed.method.value, len(parsed.text))

    return parsed.text
