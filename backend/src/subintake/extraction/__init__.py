"""Contact field extraction.

Turns document text into a ContactRecord with per-field confidence.

Components:
- extract_company_name / extract_contact_name / extract_emails /
  extract_phones / extract_trade: Rule-based field extractors
- AugmentationProvider: Optional model-backed field extraction
- ExtractionPipeline: Orchestrates extractors (rules first, augmentation optional)
"""

from .company import extract_company_name
from .confidence import (
    FIELD_THRESHOLDS,
    get_low_confidence_fields,
    merge_field_value,
    sanitize_contact_info,
)
from .contact import extract_contact_name, is_valid_name
from .email import extract_emails, normalize_email
from .llm import (
    AnthropicAugmentationProvider,
    AugmentationProvider,
    get_augmentation_provider,
)
from .phone import extract_phones, normalize_phone
from .pipeline import ExtractionConfig, ExtractionPipeline, get_extraction_pipeline
from .trade import extract_trade

__all__ = [
    "extract_company_name",
    "FIELD_THRESHOLDS",
    "get_low_confidence_fields",
    "merge_field_value",
    "sanitize_contact_info",
    "extract_contact_name",
    "is_valid_name",
    "extract_emails",
    "normalize_email",
    "AnthropicAugmentationProvider",
    "AugmentationProvider",
    "get_augmentation_provider",
    "extract_phones",
    "normalize_phone",
    "ExtractionConfig",
    "ExtractionPipeline",
    "get_extraction_pipeline",
    "extract_trade",
]
