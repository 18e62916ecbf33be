"""Batch entry points.

Runs each document through parse, extract and optional augmentation,
then groups the resulting records. Documents are independent; only
grouping needs the full batch.
"""

import logging
import uuid
from collections.abc import Callable, Sequence

from .errors import IntakeError
from .extraction.pipeline import ExtractionPipeline, get_extraction_pipeline
from .logging import log_extraction_summary
from .models import (
    BatchResult,
    ContactRecord,
    ExtractionStats,
    ProcessedFile,
    ProcessOptions,
    SubcontractorGroup,
)
from .parsers.documents import PDF_EXTENSIONS, get_extension, parse_file
from .resolution.grouping import (
    deduplicate_and_group,
    group_by_company,
    merge_grouping_strategies,
)

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return str(uuid.uuid4())


async def process_document(
    data: bytes,
    filename: str,
    record_id: str,
    options: ProcessOptions | None = None,
    stats: ExtractionStats | None = None,
    pipeline: ExtractionPipeline | None = None,
) -> ContactRecord:
    """Turn one document into a contact record.

    Args:
        data: Raw file bytes
        filename: Original filename (extension selects the reader)
        record_id: Identifier for the record
        options: Processing options (default: configured from settings)
        stats: Optional accumulator for extraction statistics
        pipeline: Extraction pipeline (default: configured from settings)

    Returns:
        ContactRecord

    Raises:
        UnsupportedFileType: If the extension is not recognized
        ParseFailure: If the document reader fails
    """
    text = parse_file(data, filename, stats=stats)
    pipeline = pipeline or get_extraction_pipeline()

    # Only PDFs can be handed to the provider as a document
    document = data if get_extension(filename) in PDF_EXTENSIONS else None
    record = await pipeline.extract(
        text,
        filename,
        record_id,
        document=document,
        enable_augmentation=options.enable_augmentation if options else None,
    )

    if stats is not None and record.augmentation and record.augmentation.attempted:
        stats.record_augmentation()
    return record


async def process_batch(
    files: Sequence[tuple[str, bytes]],
    options: ProcessOptions | None = None,
    stats: ExtractionStats | None = None,
    id_factory: Callable[[], str] = _new_id,
    pipeline: ExtractionPipeline | None = None,
) -> BatchResult:
    """Process a batch of documents, one result entry per input.

    A failing document is reported as an error entry and never aborts
    the rest of the batch.

    Args:
        files: (filename, bytes) pairs
        options: Processing options applied to every document
        stats: Optional accumulator for extraction statistics
        id_factory: Produces a record id per document
        pipeline: Extraction pipeline shared by the batch

    Returns:
        BatchResult in input order
    """
    pipeline = pipeline or get_extraction_pipeline()

    result = BatchResult()
    for filename, data in files:
        try:
            record = await process_document(
                data, filename, id_factory(), options=options, stats=stats, pipeline=pipeline
            )
        except IntakeError as e:
            logger.error(f"Failed to process {filename}: {e.message}")
            result.processed_files.append(
                ProcessedFile(
                    filename=filename,
                    status="error",
                    error=e.message,
                    error_code=e.error_code,
                )
            )
            continue
        except Exception as e:
            logger.error(f"Failed to process {filename}: {e}", exc_info=True)
            result.processed_files.append(
                ProcessedFile(filename=filename, status="error", error=str(e))
            )
            continue

        result.processed_files.append(
            ProcessedFile(filename=filename, status="success", contacts=[record])
        )

    if stats is not None:
        log_extraction_summary(stats)
    return result


def group_batch(records: Sequence[ContactRecord]) -> list[SubcontractorGroup]:
    """Group a full batch of records by subcontractor.

    Runs both grouping passes over the same records and reconciles them.
    """
    deduplicated = deduplicate_and_group(records)
    grouped = group_by_company(records)
    return merge_grouping_strategies(deduplicated, grouped)
