"""Contact person name extraction.

Every rule's candidate must pass ``is_valid_name`` before it counts.
"""

import re
from collections.abc import Sequence

from ..models import FieldValue
from .patterns import (
    BY_NAME_PATTERN,
    CLOSING_NAME_PATTERN,
    CONTACT_FIELD_PATTERN,
    FROM_HEADER_PATTERN,
    LABELED_NAME_PATTERNS,
    MIDDLE_INITIAL_PATTERN,
    NAME_AT_END_PATTERN,
    NAME_BEFORE_TITLE_PATTERN,
    NAME_BLACKLIST,
    NAME_TITLE_PATTERN,
)
from .rules import Rule, first_match

EMAIL_CONTEXT_WINDOW = 300


def is_valid_name(name: str | None) -> bool:
    """Check that a candidate looks like a person's name.

    2-3 tokens (a middle token must be an initial), 3-50 characters,
    starting uppercase, and free of business words like "project".
    """
    if not name or not 3 <= len(name) <= 50:
        return False

    parts = name.split()
    if not 2 <= len(parts) <= 3:
        return False
    if len(parts) == 3 and not MIDDLE_INITIAL_PATTERN.match(parts[1]):
        return False

    lower = name.lower()
    if any(word in lower for word in NAME_BLACKLIST):
        return False

    return name[0].isupper()


def format_name_case(name: str) -> str:
    """Title-case each word of an all-caps name."""
    return " ".join(word[:1].upper() + word[1:] for word in name.lower().split())


def name_from_email(local_part: str) -> str | None:
    """Build "First Last" from an email local part like ``first.last``."""
    cleaned = re.sub(r"[0-9]+", "", local_part)
    parts = [part for part in re.split(r"[._-]+", cleaned) if part]

    if len(parts) < 2:
        return None
    if not all(part.isascii() and part.isalpha() for part in parts):
        return None
    if any(len(part) < 2 for part in parts):
        return None

    return " ".join(part[:1].upper() + part[1:].lower() for part in parts)


def _valid(name: str | None) -> str | None:
    if name is None:
        return None
    name = name.strip()
    return name if is_valid_name(name) else None


def _search(pattern: re.Pattern, text: str) -> str | None:
    match = pattern.search(text)
    return _valid(match.group(1)) if match else None


def _from_signature(text: str, emails: Sequence[FieldValue]) -> str | None:
    return _search(CLOSING_NAME_PATTERN, text) or _search(BY_NAME_PATTERN, text)


def _before_title_line(text: str, emails: Sequence[FieldValue]) -> str | None:
    return _search(NAME_BEFORE_TITLE_PATTERN, text)


def _from_labeled_field(text: str, emails: Sequence[FieldValue]) -> str | None:
    for pattern in LABELED_NAME_PATTERNS:
        name = _search(pattern, text)
        if name:
            return name
    return None


def _from_caps_from_header(text: str, emails: Sequence[FieldValue]) -> str | None:
    match = FROM_HEADER_PATTERN.search(text)
    if not match:
        return None
    return _valid(format_name_case(match.group(1).strip()))


def _from_caps_contact_field(text: str, emails: Sequence[FieldValue]) -> str | None:
    match = CONTACT_FIELD_PATTERN.search(text)
    if not match:
        return None
    return _valid(format_name_case(match.group(1).strip()))


def _before_email(text: str, emails: Sequence[FieldValue]) -> str | None:
    lowered = text.lower()
    for email in emails:
        index = lowered.find(email.value)
        if index == -1:
            continue
        before = text[max(0, index - EMAIL_CONTEXT_WINDOW):index]
        name = _search(NAME_AT_END_PATTERN, before)
        if name:
            return name
    return None


def _last_name_with_title(text: str, emails: Sequence[FieldValue]) -> str | None:
    matches = list(NAME_TITLE_PATTERN.finditer(text))
    if not matches:
        return None
    return _valid(matches[-1].group(1))


def _from_email_address(text: str, emails: Sequence[FieldValue]) -> str | None:
    if not emails:
        return None
    local_part = emails[0].value.split("@")[0]
    return _valid(name_from_email(local_part))


CONTACT_RULES = [
    Rule("signature", _from_signature, 0.90),
    Rule("title_line", _before_title_line, 0.90),
    Rule("labeled_field", _from_labeled_field, 0.88),
    Rule("from_header", _from_caps_from_header, 0.85),
    Rule("contact_field", _from_caps_contact_field, 0.82),
    Rule("before_email", _before_email, 0.78),
    Rule("name_with_title", _last_name_with_title, 0.85),
    Rule("email_local_part", _from_email_address, 0.55),
]


def extract_contact_name(
    text: str, emails: Sequence[FieldValue] = ()
) -> FieldValue | None:
    """Extract the contact person's name.

    Args:
        text: Document text
        emails: Emails already extracted from the text, best first

    Returns:
        The name and its confidence, or None
    """
    return first_match(CONTACT_RULES, text, emails)
