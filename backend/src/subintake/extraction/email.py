"""Email address extraction."""

from ..models import FieldValue
from .patterns import EMAIL_PATTERN, GENERIC_MAILBOXES

EMAIL_CONFIDENCE = 0.95


def is_generic_mailbox(email: str) -> bool:
    """Check for shared role mailboxes (info@, support@, ...)."""
    lowered = email.lower()
    return any(mailbox in lowered for mailbox in GENERIC_MAILBOXES)


def extract_emails(text: str) -> list[FieldValue]:
    """Extract distinct personal email addresses in order of appearance.

    Addresses are lower-cased; generic role mailboxes are dropped.
    """
    seen: dict[str, None] = {}
    for match in EMAIL_PATTERN.findall(text):
        seen.setdefault(match.lower(), None)

    return [
        FieldValue(value=email, confidence=EMAIL_CONFIDENCE)
        for email in seen
        if not is_generic_mailbox(email)
    ]


def normalize_email(email: str | None) -> str | None:
    """Validate an email from an external source.

    Returns the trimmed, lower-cased address, or None if it is not
    email-shaped.
    """
    if not email:
        return None
    trimmed = email.strip()
    if not trimmed or not EMAIL_PATTERN.fullmatch(trimmed):
        return None
    return trimmed.lower()
