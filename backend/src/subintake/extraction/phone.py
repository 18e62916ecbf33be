"""Phone number extraction and normalization."""

import re

from ..models import FieldValue
from .patterns import PHONE_PATTERNS

PHONE_CONFIDENCE = 0.90

_NON_DIGITS = re.compile(r"\D")


def normalize_phone(phone: str | None) -> str | None:
    """Normalize a phone number to ``(NNN) NNN-NNNN``.

    Only 10 or 11 digit numbers are accepted; the last 10 digits are kept
    (dropping a leading country code). Already-normalized input is
    returned unchanged.
    """
    if not phone:
        return None
    digits = _NON_DIGITS.sub("", phone)
    if len(digits) < 10 or len(digits) > 11:
        return None
    last10 = digits[-10:]
    return f"({last10[:3]}) {last10[3:6]}-{last10[6:]}"


def phone_key(phone: str) -> str:
    """Identity key for a phone number: its last 10 digits."""
    return _NON_DIGITS.sub("", phone)[-10:]


def extract_phones(text: str) -> list[FieldValue]:
    """Extract distinct phone numbers from text.

    Matches from every phone pattern are pooled (pattern order, then text
    order) and de-duplicated by their last 10 digits.
    """
    matches: dict[str, None] = {}
    for pattern in PHONE_PATTERNS:
        for match in pattern.findall(text):
            matches.setdefault(match, None)

    normalized: dict[str, str] = {}
    for match in matches:
        formatted = normalize_phone(match)
        if formatted is None:
            continue
        normalized.setdefault(phone_key(formatted), formatted)

    return [
        FieldValue(value=phone, confidence=PHONE_CONFIDENCE)
        for phone in normalized.values()
    ]
