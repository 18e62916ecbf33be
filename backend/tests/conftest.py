"""Shared pytest fixtures for subintake tests."""

import asyncio
import zlib
from collections.abc import Sequence

import pytest

from subintake.config import get_settings
from subintake.extraction.llm import AugmentationProvider
from subintake.models import (
    AugmentationResult,
    ContactField,
    ContactInfo,
    ContactRecord,
    FieldConfidence,
)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Run every test with default settings and no provider configured."""
    monkeypatch.setenv("ANTHROPIC_API_KEY", "")
    monkeypatch.setenv("AUGMENTATION_ENABLED", "true")
    monkeypatch.setenv("MIN_NATIVE_TEXT_CHARS", "100")
    monkeypatch.setenv("RAW_TEXT_LIMIT", "500")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# =========================
# Documents
# =========================


SCENARIO_TEXT = (
    "Contact: John Smith, john.smith@acme.com, (555) 123-4567, "
    "Scope of Work: electrical installation"
)
SCENARIO_FILENAME = "Acme Electric LLC Proposal.pdf"


@pytest.fixture
def scenario_text() -> str:
    """A one-line proposal excerpt where every field is found."""
    return SCENARIO_TEXT


@pytest.fixture
def scenario_filename() -> str:
    return SCENARIO_FILENAME


def build_pdf(*contents: bytes, compress: bool = True) -> bytes:
    """Build a minimal PDF whose content streams hold ``contents``."""
    parts = [b"%PDF-1.4\n"]
    for number, content in enumerate(contents, start=1):
        payload = zlib.compress(content) if compress else content
        parts.append(
            b"%d 0 obj\n<< /Length %d /Filter /FlateDecode >>\nstream\n"
            % (number, len(payload))
        )
        parts.append(payload)
        parts.append(b"endstream\nendobj\n")
    parts.append(b"trailer\n<< /Size 1 >>\n%EOF\n")
    return b"".join(parts)


@pytest.fixture
def pdf_builder():
    """Factory for in-memory PDFs with the given content streams."""
    return build_pdf


# =========================
# Records
# =========================


def make_record(
    record_id: str = "rec-1",
    source: str = "a.pdf",
    **fields: tuple[str | None, float],
) -> ContactRecord:
    """Build a record from ``field=(value, confidence)`` pairs."""
    record = ContactRecord(id=record_id, source=source, raw_text=f"text of {source}")
    for name, (value, confidence) in fields.items():
        record.set_field(name, value, confidence)
    return record


@pytest.fixture
def record_factory():
    """Factory for contact records."""
    return make_record


@pytest.fixture
def acme_record() -> ContactRecord:
    """A fully extracted record for Acme Electric."""
    return ContactRecord(
        id="acme-1",
        company_name="Acme Electric LLC",
        contact_name="John Smith",
        email="john.smith@acme.com",
        phone="(555) 123-4567",
        trade="Electrical",
        confidence=FieldConfidence(
            company_name=0.92,
            contact_name=0.88,
            email=0.95,
            phone=0.90,
            trade=0.90,
        ),
        source="acme.pdf",
    )


# =========================
# Augmentation
# =========================


class FakeProvider(AugmentationProvider):
    """In-memory augmentation provider that records its calls."""

    def __init__(
        self,
        result: AugmentationResult | None = None,
        error: Exception | None = None,
        delay: float = 0.0,
    ):
        self.result = result or AugmentationResult()
        self.error = error
        self.delay = delay
        self.calls: list[tuple] = []

    async def _respond(self, call: tuple) -> AugmentationResult:
        self.calls.append(call)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.result

    async def extract_from_document(self, data: bytes, filename: str) -> AugmentationResult:
        return await self._respond(("document", filename))

    async def extract_from_text(self, text: str, filename: str) -> AugmentationResult:
        return await self._respond(("full", filename))

    async def supplement_fields(
        self, text: str, filename: str, fields: Sequence[ContactField]
    ) -> AugmentationResult:
        return await self._respond(("supplement", filename, tuple(fields)))


@pytest.fixture
def fake_provider():
    """Factory for fake providers returning the given fields."""

    def _make(
        confidence: float = 0.9,
        warnings: list[str] | None = None,
        error: Exception | None = None,
        delay: float = 0.0,
        **fields: str,
    ) -> FakeProvider:
        result = AugmentationResult(
            contact_info=ContactInfo(**fields),
            confidence=confidence,
            warnings=warnings or [],
        )
        return FakeProvider(result=result, error=error, delay=delay)

    return _make
