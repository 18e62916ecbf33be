"""Document parsers.

Turns uploaded documents into plain text for field extraction.

Components:
- parse_file / parse_document: Dispatch by extension
- pdf_fallback: Raw stream recovery for PDFs without a usable text layer
- read_sheets: Workbook to CSV rendering
"""

from .documents import (
    ParsedDocument,
    SUPPORTED_EXTENSIONS,
    get_extension,
    is_supported,
    parse_document,
    parse_file,
    parse_pdf,
    parse_spreadsheet,
)
from .pdf_fallback import (
    decode_pdf_string,
    extract_pdf_text_fallback,
    is_binary_garbage,
    recover_pdf_text,
)
from .spreadsheet import read_sheets, sheets_to_text

__all__ = [
    "ParsedDocument",
    "SUPPORTED_EXTENSIONS",
    "get_extension",
    "is_supported",
    "parse_document",
    "parse_file",
    "parse_pdf",
    "parse_spreadsheet",
    "decode_pdf_string",
    "extract_pdf_text_fallback",
    "is_binary_garbage",
    "recover_pdf_text",
    "read_sheets",
    "sheets_to_text",
]
