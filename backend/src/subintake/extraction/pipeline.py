"""Contact extraction pipeline.

Orchestrates the rule-based field extractors and the optional
augmentation provider, merging provider values field by field.
"""

import asyncio
import logging
from dataclasses import dataclass

from ..config import get_settings
from ..errors import AugmentationFailure
from ..logging import log_augmentation_event
from ..models import (
    AugmentationMeta,
    AugmentationResult,
    AugmentationStrategy,
    ContactField,
    ContactRecord,
    FieldValue,
)
from .company import extract_company_name
from .confidence import get_low_confidence_fields, merge_contact_info, sanitize_contact_info
from .contact import extract_contact_name
from .email import extract_emails
from .llm import SUPPLEMENT_CONFIDENCE, AugmentationProvider, get_augmentation_provider
from .phone import extract_phones
from .trade import extract_trade

logger = logging.getLogger(__name__)

# Text shorter than this (stripped) is treated as unreadable
MIN_USABLE_TEXT_CHARS = 100
FULL_AUGMENTATION_OVERALL = 0.55
FULL_AUGMENTATION_LOW_FIELDS = 3


@dataclass
class ExtractionConfig:
    """Configuration for the extraction pipeline."""

    enable_augmentation: bool = True
    timeout_seconds: float = 60.0
    raw_text_limit: int = 500


class ExtractionPipeline:
    """Extracts one contact record per document.

    Flow:
    1. Run the five rule-based extractors (always)
    2. Stop if augmentation is disabled or every field is confident
    3. Pick a strategy (document, full text or supplement) and call the provider
    4. Merge provider values per field, keeping the more confident value
    """

    def __init__(
        self,
        config: ExtractionConfig | None = None,
        provider: AugmentationProvider | None = None,
    ):
        """Initialize the pipeline.

        Args:
            config: Pipeline configuration
            provider: Augmentation provider (default: resolved from settings)
        """
        self.config = config or ExtractionConfig()
        self._provider = provider
        self._provider_resolved = provider is not None

    @property
    def provider(self) -> AugmentationProvider | None:
        """Get the augmentation provider, or None if none is configured."""
        if not self._provider_resolved:
            self._provider = get_augmentation_provider()
            self._provider_resolved = True
        return self._provider

    def extract_fields(self, text: str, filename: str, record_id: str) -> ContactRecord:
        """Run the rule-based extractors only.

        Args:
            text: Document text
            filename: Original filename
            record_id: Identifier for the record

        Returns:
            ContactRecord with the first email and phone found
        """
        emails = extract_emails(text)
        phones = extract_phones(text)
        found: dict[ContactField, FieldValue | None] = {
            ContactField.COMPANY_NAME: extract_company_name(text, filename),
            ContactField.CONTACT_NAME: extract_contact_name(text, emails),
            ContactField.EMAIL: emails[0] if emails else None,
            ContactField.PHONE: phones[0] if phones else None,
            ContactField.TRADE: extract_trade(text, filename),
        }

        record = ContactRecord(
            id=record_id,
            source=filename,
            raw_text=text[: self.config.raw_text_limit],
        )
        for field, value in found.items():
            if value is not None:
                record.set_field(field, value.value, value.confidence)
        return record

    def choose_strategy(
        self,
        text: str,
        record: ContactRecord,
        low_fields: list[ContactField],
        document: bytes | None,
    ) -> AugmentationStrategy:
        """Decide how to ask the provider for help."""
        if len(text.strip()) < MIN_USABLE_TEXT_CHARS and document is not None:
            return AugmentationStrategy.DOCUMENT
        if (
            record.confidence.overall < FULL_AUGMENTATION_OVERALL
            or len(low_fields) >= FULL_AUGMENTATION_LOW_FIELDS
        ):
            return AugmentationStrategy.FULL
        return AugmentationStrategy.SUPPLEMENT

    async def _call_provider(
        self,
        provider: AugmentationProvider,
        strategy: AugmentationStrategy,
        text: str,
        filename: str,
        low_fields: list[ContactField],
        document: bytes | None,
    ) -> AugmentationResult:
        if strategy == AugmentationStrategy.DOCUMENT:
            call = provider.extract_from_document(document, filename)
        elif strategy == AugmentationStrategy.FULL:
            call = provider.extract_from_text(text, filename)
        else:
            call = provider.supplement_fields(text, filename, low_fields)
        return await asyncio.wait_for(call, timeout=self.config.timeout_seconds)

    async def extract(
        self,
        text: str,
        filename: str,
        record_id: str,
        document: bytes | None = None,
        enable_augmentation: bool | None = None,
    ) -> ContactRecord:
        """Extract a contact record, augmenting low-confidence fields.

        Provider failures never propagate; they are recorded as warnings on
        the record's augmentation metadata.

        Args:
            text: Document text
            filename: Original filename
            record_id: Identifier for the record
            document: Raw document bytes, for document-level augmentation
            enable_augmentation: Override the configured augmentation switch

        Returns:
            ContactRecord
        """
        record = self.extract_fields(text, filename, record_id)
        low_fields = get_low_confidence_fields(record)

        if enable_augmentation is None:
            enable_augmentation = self.config.enable_augmentation
        if not enable_augmentation or not low_fields:
            return record

        provider = self.provider
        if provider is None:
            logger.warning(
                f"Low-confidence extraction for {filename} but no augmentation "
                "provider is configured"
            )
            return record

        strategy = self.choose_strategy(text, record, low_fields, document)
        changed: list[ContactField] = []
        warnings: list[str] = []
        confidence: float | None = None

        try:
            result = await self._call_provider(
                provider, strategy, text, filename, low_fields, document
            )
            info = sanitize_contact_info(result.contact_info)
            confidence = result.confidence
            has_values = any(info.get(field) for field in ContactField)
            if strategy == AugmentationStrategy.SUPPLEMENT and not confidence and has_values:
                confidence = SUPPLEMENT_CONFIDENCE
            changed = merge_contact_info(record, info, confidence)
            warnings.extend(result.warnings)
        except asyncio.TimeoutError:
            warnings.append(
                f"Augmentation timed out after {self.config.timeout_seconds:g}s"
            )
            logger.error(f"Augmentation timed out for {filename}")
        except AugmentationFailure as e:
            warnings.append(e.message)
            logger.error(f"Augmentation failed for {filename}: {e.message}")
        except Exception as e:
            warnings.append(str(e) or type(e).__name__)
            logger.error(f"Augmentation failed for {filename}: {e}", exc_info=True)

        record.augmentation = AugmentationMeta(
            attempted=True,
            used=bool(changed),
            strategy=strategy,
            confidence=confidence,
            supplemented_fields=[field.value for field in changed] or None,
            warnings=warnings or None,
        )
        log_augmentation_event(
            filename,
            strategy.value,
            used=bool(changed),
            fields=[field.value for field in changed],
            warnings=warnings,
        )
        return record


def get_extraction_pipeline(
    enable_augmentation: bool | None = None,
    provider: AugmentationProvider | None = None,
) -> ExtractionPipeline:
    """Get an extraction pipeline configured from settings.

    Args:
        enable_augmentation: Override the configured augmentation default
        provider: Augmentation provider (default: resolved from settings)

    Returns:
        ExtractionPipeline instance
    """
    settings = get_settings()
    if enable_augmentation is None:
        enable_augmentation = settings.augmentation_enabled

    config = ExtractionConfig(
        enable_augmentation=enable_augmentation,
        timeout_seconds=settings.augmentation_timeout_seconds,
        raw_text_limit=settings.raw_text_limit,
    )
    return ExtractionPipeline(config, provider=provider)
