"""Pydantic models for subcontractor document intake.

This module defines the extracted contact records, their per-field
confidence, subcontractor groups produced by deduplication, and the
batch-level result and statistics models.
"""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field


# =============================================================================
# Enumerations
# =============================================================================


class ContactField(str, Enum):
    """The five semantic fields of a contact record."""

    COMPANY_NAME = "company_name"
    CONTACT_NAME = "contact_name"
    EMAIL = "email"
    PHONE = "phone"
    TRADE = "trade"


class AugmentationStrategy(str, Enum):
    """How the augmentation provider was asked for help."""

    DOCUMENT = "document"  # Provider reads the raw document
    FULL = "full"  # Provider derives all fields from extracted text
    SUPPLEMENT = "supplement"  # Provider fills only low-confidence fields


class ExtractionMethod(str, Enum):
    """Which reader produced a document's text."""

    NATIVE = "native"
    FALLBACK = "fallback"
    SPREADSHEET = "spreadsheet"
    TEXT = "text"


# =============================================================================
# Field Models
# =============================================================================


class FieldValue(BaseModel):
    """A single extracted value with its confidence."""

    value: str | None = None
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)


class FieldConfidence(BaseModel):
    """Per-field confidence scores for a contact record.

    ``overall`` is derived, never stored: a missing field scores 0 and
    still counts toward the mean.
    """

    company_name: float = Field(default=0.0, ge=0.0, le=1.0)
    contact_name: float = Field(default=0.0, ge=0.0, le=1.0)
    email: float = Field(default=0.0, ge=0.0, le=1.0)
    phone: float = Field(default=0.0, ge=0.0, le=1.0)
    trade: float = Field(default=0.0, ge=0.0, le=1.0)

    model_config = ConfigDict(validate_assignment=True)

    @computed_field
    @property
    def overall(self) -> float:
        """Arithmetic mean of the five field confidences."""
        values = [getattr(self, field.value) for field in ContactField]
        return sum(values) / len(values)


class AugmentationMeta(BaseModel):
    """What happened when the augmentation provider was consulted."""

    attempted: bool = False
    used: bool = False
    strategy: AugmentationStrategy | None = None
    confidence: float | None = Field(default=None, ge=0.0, le=1.0)
    supplemented_fields: list[str] | None = None
    warnings: list[str] | None = None

    model_config = ConfigDict(use_enum_values=True)


# =============================================================================
# Core Records
# =============================================================================


class ContactRecord(BaseModel):
    """Structured contact information extracted from one document."""

    id: str = Field(..., description="Caller-supplied identifier, unique per run")
    company_name: str | None = None
    contact_name: str | None = None
    email: str | None = None
    phone: str | None = None
    trade: str | None = None
    confidence: FieldConfidence = Field(default_factory=FieldConfidence)
    source: str = Field(..., description="Originating filename(s), comma-joined after a merge")
    raw_text: str | None = Field(default=None, description="Prefix of the source text")
    augmentation: AugmentationMeta | None = None

    model_config = ConfigDict(validate_assignment=True)

    def get_field(self, field: ContactField | str) -> FieldValue:
        """Get a field's value and confidence."""
        name = ContactField(field).value
        return FieldValue(
            value=getattr(self, name),
            confidence=getattr(self.confidence, name),
        )

    def set_field(
        self, field: ContactField | str, value: str | None, confidence: float
    ) -> None:
        """Overwrite a field's value and confidence together."""
        name = ContactField(field).value
        setattr(self, name, value)
        setattr(self.confidence, name, confidence)


class SubcontractorGroup(BaseModel):
    """Contacts consolidated under one company."""

    company_name: str
    trade: str | None = None
    contacts: list[ContactRecord] = Field(..., min_length=1)
    is_duplicate: bool = False
    merged_from: list[str] | None = Field(
        default=None, description="Source files absorbed, present only for duplicates"
    )


# =============================================================================
# Augmentation Provider Payloads
# =============================================================================


class ContactInfo(BaseModel):
    """Field values proposed by an augmentation provider (any may be absent)."""

    company_name: str | None = None
    contact_name: str | None = None
    email: str | None = None
    phone: str | None = None
    trade: str | None = None

    def get(self, field: ContactField | str) -> str | None:
        """Get a proposed value by field."""
        return getattr(self, ContactField(field).value)


class AugmentationResult(BaseModel):
    """Response from one augmentation provider call."""

    contact_info: ContactInfo = Field(default_factory=ContactInfo)
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    warnings: list[str] = Field(default_factory=list)


# =============================================================================
# Batch Models
# =============================================================================


class ProcessOptions(BaseModel):
    """Per-document processing options."""

    enable_augmentation: bool = True


class ProcessedFile(BaseModel):
    """Outcome of processing one document in a batch."""

    filename: str
    status: Literal["success", "error"]
    contacts: list[ContactRecord] = Field(default_factory=list)
    error: str | None = None
    error_code: str | None = None


class BatchResult(BaseModel):
    """Outcome of processing a batch, one entry per input document."""

    processed_files: list[ProcessedFile] = Field(default_factory=list)

    @property
    def contacts(self) -> list[ContactRecord]:
        """All contacts from successfully processed files, in input order."""
        return [
            contact
            for processed in self.processed_files
            if processed.status == "success"
            for contact in processed.contacts
        ]

    @property
    def failed(self) -> list[ProcessedFile]:
        """Files that could not be processed."""
        return [f for f in self.processed_files if f.status == "error"]


class FileExtractionDetail(BaseModel):
    """How text was obtained for one file."""

    filename: str
    method: ExtractionMethod
    characters: int = Field(default=0, ge=0)

    model_config = ConfigDict(use_enum_values=True)


class ExtractionStats(BaseModel):
    """Caller-owned accumulator of extraction statistics for a batch."""

    total_files_processed: int = 0
    augmented_files_count: int = 0
    total_characters_extracted: int = 0
    file_details: list[FileExtractionDetail] = Field(default_factory=list)

    def record_file(
        self, filename: str, method: ExtractionMethod, characters: int
    ) -> None:
        """Record that a file's text was extracted."""
        self.total_files_processed += 1
        self.total_characters_extracted += characters
        self.file_details.append(
            FileExtractionDetail(filename=filename, method=method, characters=characters)
        )

    def record_augmentation(self) -> None:
        """Record that a file went through an augmentation pass."""
        self.augmented_files_count += 1

    def summary(self) -> dict[str, Any]:
        """Summarize the accumulated statistics."""
        total = self.total_files_processed
        return {
            "total_files_processed": total,
            "augmented_files_count": self.augmented_files_count,
            "augmented_percent": (
                round(self.augmented_files_count / total * 100, 1) if total else 0.0
            ),
            "total_characters_extracted": self.total_characters_extracted,
        }

    def reset(self) -> None:
        """Clear all accumulated statistics."""
        self.total_files_processed = 0
        self.augmented_files_count = 0
        self.total_characters_extracted = 0
        self.file_details = []
