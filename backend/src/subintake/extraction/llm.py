"""LLM-based contact augmentation.

Optional augmentation for documents where the rule-based extractors
come back missing or low-confidence. The provider interface is
abstract so tests and alternative backends can stand in for the
hosted model.
"""

import base64
import json
import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

import anthropic

from ..config import get_settings
from ..errors import AugmentationFailure
from ..models import AugmentationResult, ContactField, ContactInfo

logger = logging.getLogger(__name__)

DOCUMENT_CONFIDENCE = 0.90
FULL_TEXT_CONFIDENCE = 0.88
SUPPLEMENT_CONFIDENCE = 0.80

_JSON_BLOCK = re.compile(r"\{[\s\S]*\}")

FIELD_DESCRIPTIONS = {
    ContactField.COMPANY_NAME: "the subcontractor company name (with LLC, Inc, etc.)",
    ContactField.CONTACT_NAME: "the full name of the contact person",
    ContactField.EMAIL: "the email address",
    ContactField.PHONE: "the phone number in format (XXX) XXX-XXXX",
    ContactField.TRADE: "the construction trade/specialty (Electrical, Plumbing, HVAC, etc.)",
}


def extract_json_block(response: str) -> str | None:
    """Return the outermost ``{...}`` span of a model reply."""
    match = _JSON_BLOCK.search(response)
    return match.group(0) if match else None


def normalize_contact_info(raw: dict[str, Any]) -> ContactInfo:
    """Keep only non-blank string values for the five known fields."""
    values: dict[str, str] = {}
    for field in ContactField:
        value = raw.get(field.value)
        if isinstance(value, str) and value.strip():
            values[field.value] = value.strip()
    return ContactInfo(**values)


def parse_contact_json(response: str) -> ContactInfo:
    """Parse a model reply into contact fields.

    Raises:
        AugmentationFailure: If the reply holds no JSON object or it is invalid
    """
    block = extract_json_block(response)
    if block is None:
        raise AugmentationFailure("No JSON found in LLM response")
    try:
        data = json.loads(block)
    except json.JSONDecodeError as e:
        logger.warning(f"Failed to parse LLM JSON: {block[:300]}")
        raise AugmentationFailure(f"Invalid JSON in LLM response: {e}") from e
    if not isinstance(data, dict):
        raise AugmentationFailure("LLM response is not a JSON object")
    return normalize_contact_info(data)


class AugmentationProvider(ABC):
    """Source of field values beyond the rule-based extractors."""

    @abstractmethod
    async def extract_from_document(
        self, data: bytes, filename: str
    ) -> AugmentationResult:
        """Derive all five fields from the raw document."""
        ...

    @abstractmethod
    async def extract_from_text(self, text: str, filename: str) -> AugmentationResult:
        """Derive all five fields from extracted text."""
        ...

    @abstractmethod
    async def supplement_fields(
        self, text: str, filename: str, fields: Sequence[ContactField]
    ) -> AugmentationResult:
        """Derive only the named fields from extracted text.

        Problems are reported as warnings on the result rather than raised.
        """
        ...


class AnthropicAugmentationProvider(AugmentationProvider):
    """Augmentation backed by the Anthropic Messages API."""

    DOCUMENT_PROMPT = """Extract the following information in JSON format:

{
  "company_name": "Company name (with LLC, Inc, etc. if present)",
  "contact_name": "Full name of the contact person",
  "email": "Email address",
  "phone": "Phone number in format (XXX) XXX-XXXX",
  "trade": "Trade/scope (e.g., Electrical, Plumbing, HVAC, Concrete, Sitework, Low Voltage, etc.)"
}

Rules:
- Only include fields if you find them with high confidence
- For trade, identify the primary construction trade/specialty
- For phone, format as (XXX) XXX-XXXX
- If a field is not found or unclear, set it to null
- Return ONLY the JSON object, no extra text"""

    TEXT_PROMPT = """Extract contact information from this construction proposal/bid document. Return JSON with these fields:

{{
  "company_name": "string or null",
  "contact_name": "string or null",
  "email": "string or null",
  "phone": "string or null",
  "trade": "string or null"
}}

Instructions:
- company_name: Look in the letterhead, footer, "FROM:", or filename. Include suffixes like LLC, Inc, Corp if present. Do NOT include personal names.
- contact_name: Look for "Contact:", "Attn:", "From:", "Prepared by:", or signature blocks. Full first and last name only.
- email: Any email address found (exclude generic ones like info@, support@)
- phone: Format as (XXX) XXX-XXXX
- trade: The primary construction trade, e.g. Electrical, Plumbing, HVAC, Concrete, Sitework, Low Voltage, Roofing, Fire Protection

Make your best guess for each field even if confidence is medium. Only use null if no relevant information exists.

Return ONLY valid JSON, no markdown, no explanations.

Filename: {filename}

Document:
---
{text}
---"""

    SUPPLEMENT_PROMPT = """Find the following information in this construction proposal/bid document. Make your best guess even if confidence is medium; only use null if nothing relevant exists.

Extract these fields:
{field_list}

Return ONLY valid JSON, no markdown:
{{
  {json_keys}
}}

Document:
---
{text}
---"""

    def __init__(self, api_key: str | None = None, model: str | None = None):
        """Initialize the provider.

        Args:
            api_key: Anthropic API key (default: from settings)
            model: Model name (default: from settings)
        """
        settings = get_settings()
        self.api_key = api_key or settings.anthropic_api_key
        self.model = model or settings.anthropic_model
        self._client: Any = None

    def _get_client(self) -> Any:
        """Get or create the Anthropic client."""
        if self._client is None:
            self._client = anthropic.AsyncAnthropic(api_key=self.api_key)
        return self._client

    async def _create_message(self, content: Any, max_tokens: int) -> str:
        """Send one user message and join the text blocks of the reply."""
        try:
            response = await self._get_client().messages.create(
                model=self.model,
                max_tokens=max_tokens,
                messages=[{"role": "user", "content": content}],
            )
        except anthropic.APIError as e:
            raise AugmentationFailure(f"LLM request failed: {e}") from e

        text = "\n".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
        if not text.strip():
            raise AugmentationFailure("Empty LLM response")
        return text

    async def extract_from_document(
        self, data: bytes, filename: str
    ) -> AugmentationResult:
        logger.info(f"Requesting document-level extraction for {filename}")
        content = [
            {
                "type": "document",
                "source": {
                    "type": "base64",
                    "media_type": "application/pdf",
                    "data": base64.standard_b64encode(data).decode("ascii"),
                },
            },
            {"type": "text", "text": self.DOCUMENT_PROMPT},
        ]
        response = await self._create_message(content, max_tokens=1024)
        return AugmentationResult(
            contact_info=parse_contact_json(response),
            confidence=DOCUMENT_CONFIDENCE,
        )

    async def extract_from_text(self, text: str, filename: str) -> AugmentationResult:
        logger.info(f"Requesting full-text extraction for {filename}")
        limit = get_settings().augmentation_text_limit
        prompt = self.TEXT_PROMPT.format(filename=filename, text=text[:limit])
        response = await self._create_message(prompt, max_tokens=1024)
        return AugmentationResult(
            contact_info=parse_contact_json(response),
            confidence=FULL_TEXT_CONFIDENCE,
        )

    async def supplement_fields(
        self, text: str, filename: str, fields: Sequence[ContactField]
    ) -> AugmentationResult:
        names = [ContactField(field) for field in fields]
        logger.info(
            f"Requesting supplementation of {', '.join(f.value for f in names)} for {filename}"
        )
        limit = get_settings().supplement_text_limit
        prompt = self.SUPPLEMENT_PROMPT.format(
            field_list="\n".join(f"- {f.value}: {FIELD_DESCRIPTIONS[f]}" for f in names),
            json_keys=",\n  ".join(f'"{f.value}": "value or null"' for f in names),
            text=text[:limit],
        )

        try:
            response = await self._create_message(prompt, max_tokens=512)
            info = parse_contact_json(response)
        except AugmentationFailure as e:
            logger.warning(f"Supplementation failed for {filename}: {e.message}")
            return AugmentationResult(confidence=0.0, warnings=[e.message])

        return AugmentationResult(contact_info=info, confidence=SUPPLEMENT_CONFIDENCE)


def get_augmentation_provider() -> AugmentationProvider | None:
    """Get the configured augmentation provider.

    Returns:
        A provider instance, or None when no API key is configured
    """
    settings = get_settings()
    if not settings.is_augmentation_configured:
        return None
    return AnthropicAugmentationProvider()
