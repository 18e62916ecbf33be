"""Company name extraction.

Rules, first hit wins:
1. Capitalized text ending in a company suffix within the first 40 lines (0.92)
2. A short, mostly-uppercase line among the first 10 lines (0.88)
3. Text after a "From:" / "Submitted by:" label (0.85)
4. The line before an early "PROPOSAL" heading (0.80)
5. The filename, when it ends in a company suffix (0.92)
6. The cleaned filename (0.60)
"""

import re

from ..models import FieldValue
from .patterns import (
    ADDRESS_HINT_PATTERN,
    COMPANY_LEADING_LABEL_PATTERN,
    COMPANY_LINE_BLACKLIST,
    COMPANY_SUFFIX_END_PATTERN,
    COMPANY_SUFFIX_PATTERN,
    DATE_LINE_PATTERNS,
    EMAIL_PATTERN,
    FILENAME_BOILERPLATE_PATTERN,
    FILENAME_EXTENSION_PATTERN,
    FROM_LABEL_PATTERN,
    HEADER_LABEL_PATTERN,
    PROPOSAL_WORD_PATTERN,
    ZIP_PATTERN,
)
from .rules import Rule, first_match

SUFFIX_LINE_WINDOW = 40
HEADER_LINE_WINDOW = 10
PROPOSAL_HEADING_WINDOW = 500
MAX_COMPANY_LENGTH = 80
UPPERCASE_RATIO = 0.8


def _split_lines(text: str) -> list[str]:
    """Non-empty stripped lines."""
    return [line.strip() for line in text.split("\n") if line.strip()]


def is_address_like(line: str) -> bool:
    """Check for a street address (street word plus digits) or a ZIP code."""
    if ZIP_PATTERN.search(line):
        return True
    digit_count = sum(ch.isdigit() for ch in line)
    return bool(ADDRESS_HINT_PATTERN.search(line)) and digit_count >= 3


def is_likely_non_company_line(line: str) -> bool:
    """Check for labels, emails and addresses that are never company names."""
    lower = line.lower()
    if any(term in lower for term in COMPANY_LINE_BLACKLIST):
        return True
    if EMAIL_PATTERN.search(line):
        return True
    return is_address_like(line)


def is_date_like(line: str) -> bool:
    """Check if a line starts with a date."""
    return any(pattern.search(line) for pattern in DATE_LINE_PATTERNS)


def clean_filename(filename: str) -> str:
    """Strip extension, separators and proposal boilerplate from a filename."""
    name = FILENAME_EXTENSION_PATTERN.sub("", filename)
    name = re.sub(r"[-_]", " ", name)
    name = FILENAME_BOILERPLATE_PATTERN.sub("", name)
    return re.sub(r"\s+", " ", name).strip()


def _source_line(window: str, match: re.Match) -> str:
    start = window.rfind("\n", 0, match.start()) + 1
    end = window.find("\n", match.end())
    return window[start:] if end == -1 else window[start:end]


def _from_suffix(text: str, filename: str) -> str | None:
    window = "\n".join(_split_lines(text)[:SUFFIX_LINE_WINDOW])
    for match in COMPANY_SUFFIX_PATTERN.finditer(window):
        candidate = match.group(1).strip()
        if not 5 < len(candidate) < MAX_COMPANY_LENGTH:
            continue
        if COMPANY_LEADING_LABEL_PATTERN.search(candidate):
            continue
        if is_likely_non_company_line(candidate):
            continue
        # "Denver, CO 80202": the state code reads as a suffix, the ZIP is past the match
        if is_address_like(_source_line(window, match)):
            continue
        return candidate
    return None


def _from_uppercase_header(text: str, filename: str) -> str | None:
    for line in _split_lines(text)[:HEADER_LINE_WINDOW]:
        if not 5 <= len(line) <= MAX_COMPANY_LENGTH:
            continue
        if line[0].isdigit() or HEADER_LABEL_PATTERN.search(line):
            continue
        if is_date_like(line) or is_likely_non_company_line(line):
            continue

        letters = [ch for ch in line if ch.isascii() and ch.isalpha()]
        if len(letters) <= 3:
            continue
        uppercase = sum(1 for ch in letters if ch.isupper())
        if uppercase / len(letters) > UPPERCASE_RATIO:
            return line
    return None


def _from_label(text: str, filename: str) -> str | None:
    match = FROM_LABEL_PATTERN.search(text)
    if not match:
        return None
    candidate = match.group(1).strip()
    if not 3 < len(candidate) < MAX_COMPANY_LENGTH:
        return None
    if is_likely_non_company_line(candidate):
        return None
    return candidate


def _before_proposal(text: str, filename: str) -> str | None:
    match = PROPOSAL_WORD_PATTERN.search(text)
    if not match or match.start() >= PROPOSAL_HEADING_WINDOW:
        return None
    lines = [
        line.strip()
        for line in text[:match.start()].split("\n")
        if len(line.strip()) > 3
    ]
    if not lines:
        return None
    candidate = lines[-1]
    if len(candidate) >= MAX_COMPANY_LENGTH or candidate[0].isdigit():
        return None
    if is_likely_non_company_line(candidate):
        return None
    return candidate


def _from_filename_with_suffix(text: str, filename: str) -> str | None:
    name = clean_filename(filename)
    if len(name) > 3 and COMPANY_SUFFIX_END_PATTERN.search(name):
        return name
    return None


def _from_filename(text: str, filename: str) -> str | None:
    name = clean_filename(filename)
    return name if len(name) > 3 else None


COMPANY_RULES = [
    Rule("suffix", _from_suffix, 0.92),
    Rule("uppercase_header", _from_uppercase_header, 0.88),
    Rule("from_label", _from_label, 0.85),
    Rule("before_proposal", _before_proposal, 0.80),
    Rule("filename_suffix", _from_filename_with_suffix, 0.92),
    Rule("filename", _from_filename, 0.60),
]


def extract_company_name(text: str, filename: str) -> FieldValue | None:
    """Extract the submitting company's name.

    Args:
        text: Document text
        filename: Original filename, used as a last resort

    Returns:
        The company name and its confidence, or None
    """
    return first_match(COMPANY_RULES, text, filename)
