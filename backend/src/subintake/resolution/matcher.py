"""Duplicate detection and record merging for contact records.

Matching rules, any one is enough:
1. Exact email match
2. Exact phone match
3. Similar company name (> 0.85) plus a similar contact name or
   email local part (> 0.8)

Similarity is a character-set Jaccard index, so it is symmetric and
insensitive to word order.
"""

from ..logging import get_context_logger
from ..models import ContactField, ContactRecord, FieldConfidence

logger = get_context_logger(__name__)

COMPANY_SIMILARITY_THRESHOLD = 0.85
PERSON_SIMILARITY_THRESHOLD = 0.8
CONTAINMENT_SCORE = 0.8


def similarity_score(first: str | None, second: str | None) -> float:
    """Score how alike two strings are, from 0.0 to 1.0.

    Equal strings (ignoring case and surrounding whitespace) score 1.0,
    a string containing the other scores 0.8, anything else scores the
    Jaccard index of their character sets.
    """
    if not first or not second:
        return 0.0

    a = first.lower().strip()
    b = second.lower().strip()
    if a == b:
        return 1.0
    if a in b or b in a:
        return CONTAINMENT_SCORE

    chars_a, chars_b = set(a), set(b)
    return len(chars_a & chars_b) / len(chars_a | chars_b)


def _email_local_part(email: str) -> str:
    return email.split("@")[0]


def are_duplicates(first: ContactRecord, second: ContactRecord) -> bool:
    """Check if two records describe the same subcontractor contact."""
    if first.email and second.email and first.email == second.email:
        return True
    if first.phone and second.phone and first.phone == second.phone:
        return True

    if not (first.company_name and second.company_name):
        return False
    if similarity_score(first.company_name, second.company_name) <= COMPANY_SIMILARITY_THRESHOLD:
        return False

    if first.contact_name and second.contact_name:
        name_similarity = similarity_score(first.contact_name, second.contact_name)
        if name_similarity > PERSON_SIMILARITY_THRESHOLD:
            return True

    if first.email and second.email:
        local_similarity = similarity_score(
            _email_local_part(first.email), _email_local_part(second.email)
        )
        if local_similarity > PERSON_SIMILARITY_THRESHOLD:
            return True

    return False


def merge_contacts(first: ContactRecord, second: ContactRecord) -> ContactRecord:
    """Merge two duplicate records into a new record.

    Each field takes the value from whichever record is more confident
    about it (``first`` on ties); each field confidence is the higher of
    the two. The merged record keeps ``first``'s id and raw text.
    """
    values: dict[str, str | None] = {}
    confidences: dict[str, float] = {}
    for field in ContactField:
        a = first.get_field(field)
        b = second.get_field(field)
        values[field.value] = a.value if a.confidence >= b.confidence else b.value
        confidences[field.value] = max(a.confidence, b.confidence)

    merged = ContactRecord(
        id=first.id,
        confidence=FieldConfidence(**confidences),
        source=f"{first.source}, {second.source}",
        raw_text=first.raw_text,
        **values,
    )
    logger.debug(f"Merged {second.source} into {first.source}")
    return merged
