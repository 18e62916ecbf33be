"""Spreadsheet reading.

Renders every worksheet of a workbook as CSV text so the field
extractors can treat spreadsheets like any other document.
"""

import csv
import io
import logging

from openpyxl import load_workbook

logger = logging.getLogger(__name__)


def read_sheets(data: bytes) -> list[tuple[str, str]]:
    """Read all worksheets as CSV text.

    Args:
        data: Raw workbook bytes

    Returns:
        List of (sheet name, CSV text) in workbook order
    """
    wb = load_workbook(filename=io.BytesIO(data), read_only=True, data_only=True)
    sheets: list[tuple[str, str]] = []

    try:
        for ws in wb.worksheets:
            buffer = io.StringIO()
            writer = csv.writer(buffer, lineterminator="\n")
            for row in ws.iter_rows(values_only=True):
                writer.writerow(["" if cell is None else cell for cell in row])
            sheets.append((ws.title, buffer.getvalue()))
    finally:
        wb.close()

    logger.debug(f"Read {len(sheets)} worksheets")
    return sheets


def sheets_to_text(sheets: list[tuple[str, str]]) -> str:
    """Concatenate sheet CSV text, each followed by a newline."""
    return "".join(csv_text + "\n" for _, csv_text in sheets)
