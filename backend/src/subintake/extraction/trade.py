"""Trade (scope category) classification."""

import re
from collections.abc import Iterable

from ..models import FieldValue
from .patterns import (
    PROPOSAL_FOR_PATTERN,
    SCOPE_OF_WORK_PATTERN,
    SUBJECT_LINE_PATTERN,
    TRADE_MAPPINGS,
)
from .rules import Rule, first_match

FREQUENCY_BASE_CONFIDENCE = 0.60
FREQUENCY_STEP = 0.05
FREQUENCY_MAX_CONFIDENCE = 0.85


def match_trade(segment: str) -> str | None:
    """Return the first trade (in mapping order) with a keyword in ``segment``."""
    lower = segment.lower()
    for trade, keywords in TRADE_MAPPINGS:
        if any(keyword in lower for keyword in keywords):
            return trade
    return None


def _first_trade(segments: Iterable[str]) -> str | None:
    for segment in segments:
        trade = match_trade(segment)
        if trade:
            return trade
    return None


def _from_subject(text: str, filename: str) -> str | None:
    subjects = (match.group(0) for match in SUBJECT_LINE_PATTERN.finditer(text))
    proposals = (match.group(0) for match in PROPOSAL_FOR_PATTERN.finditer(text))
    return _first_trade(subjects) or _first_trade(proposals)


def _from_scope_of_work(text: str, filename: str) -> str | None:
    match = SCOPE_OF_WORK_PATTERN.search(text)
    return match_trade(match.group(1)) if match else None


def _from_keyword_frequency(text: str, filename: str) -> FieldValue | None:
    lower = text.lower()
    best_trade, best_count = None, 0
    for trade, keywords in TRADE_MAPPINGS:
        count = sum(1 for keyword in keywords if keyword in lower)
        # strict comparison keeps the earlier trade on ties
        if count > best_count:
            best_trade, best_count = trade, count

    if best_trade is None:
        return None
    confidence = min(
        FREQUENCY_MAX_CONFIDENCE,
        FREQUENCY_BASE_CONFIDENCE + FREQUENCY_STEP * best_count,
    )
    return FieldValue(value=best_trade, confidence=round(confidence, 2))


def _from_filename(text: str, filename: str) -> str | None:
    lower = filename.lower()
    for trade, keywords in TRADE_MAPPINGS:
        for keyword in keywords:
            word = keyword.split(" ")[0]
            if re.search(rf"(?<![a-z]){re.escape(word)}", lower):
                return trade
    return None


TRADE_RULES = [
    Rule("subject_line", _from_subject, 0.95),
    Rule("scope_of_work", _from_scope_of_work, 0.90),
    Rule("keyword_frequency", _from_keyword_frequency, FREQUENCY_BASE_CONFIDENCE),
    Rule("filename", _from_filename, 0.70),
]


def extract_trade(text: str, filename: str) -> FieldValue | None:
    """Classify the document's trade.

    Args:
        text: Document text
        filename: Original filename, used as a last resort

    Returns:
        The trade label and its confidence, or None
    """
    return first_match(TRADE_RULES, text, filename)
