"""Confidence model: thresholds, low-confidence detection and merging."""

from typing import NamedTuple

from ..models import ContactField, ContactInfo, ContactRecord, FieldConfidence
from .email import normalize_email
from .phone import normalize_phone

# Minimum confidence for a field to be trusted without augmentation
FIELD_THRESHOLDS: dict[ContactField, float] = {
    ContactField.COMPANY_NAME: 0.6,
    ContactField.CONTACT_NAME: 0.6,
    ContactField.EMAIL: 0.7,
    ContactField.PHONE: 0.7,
    ContactField.TRADE: 0.6,
}


class FieldMerge(NamedTuple):
    """Outcome of merging one field."""

    value: str | None
    confidence: float
    changed: bool


def compute_overall_confidence(confidence: FieldConfidence) -> float:
    """Mean of the five field confidences."""
    return confidence.overall


def is_low_confidence(record: ContactRecord, field: ContactField) -> bool:
    """Check if a field is missing or below its threshold."""
    current = record.get_field(field)
    return not current.value or current.confidence < FIELD_THRESHOLDS[field]


def get_low_confidence_fields(record: ContactRecord) -> list[ContactField]:
    """Fields that are missing or below threshold, in field order."""
    return [field for field in ContactField if is_low_confidence(record, field)]


def merge_field_value(
    current: str | None,
    current_confidence: float,
    candidate: str | None,
    candidate_confidence: float,
) -> FieldMerge:
    """Merge a candidate value into a field.

    An absent candidate never changes the field. A present candidate wins
    when the field is empty or its confidence is at least as high.
    """
    if not candidate:
        return FieldMerge(current, current_confidence, False)
    if not current or candidate_confidence >= current_confidence:
        return FieldMerge(candidate, candidate_confidence, True)
    return FieldMerge(current, current_confidence, False)


def _clean_text(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def sanitize_contact_info(info: ContactInfo) -> ContactInfo:
    """Clean provider-supplied values before they are merged.

    Strings are trimmed (blank becomes absent), emails must be
    email-shaped and phones must normalize to ``(NNN) NNN-NNNN``.
    """
    return ContactInfo(
        company_name=_clean_text(info.company_name),
        contact_name=_clean_text(info.contact_name),
        email=normalize_email(info.email),
        phone=normalize_phone(info.phone),
        trade=_clean_text(info.trade),
    )


def merge_contact_info(
    record: ContactRecord,
    info: ContactInfo,
    confidence: float,
    fields: list[ContactField] | None = None,
) -> list[ContactField]:
    """Merge provider values into a record in place.

    Args:
        record: Record to update
        info: Sanitized provider values
        confidence: Confidence the provider assigned to its values
        fields: Restrict the merge to these fields (default: all)

    Returns:
        Fields that took the provider value
    """
    changed: list[ContactField] = []
    for field in fields or list(ContactField):
        current = record.get_field(field)
        merge = merge_field_value(
            current.value, current.confidence, info.get(field), confidence
        )
        if merge.changed:
            record.set_field(field, merge.value, merge.confidence)
            changed.append(field)
    return changed
