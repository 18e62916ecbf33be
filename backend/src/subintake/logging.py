"""Structured logging configuration for subintake.

Provides JSON-formatted logs for production and human-readable
logs for development.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, TextIO

from .config import get_settings

if TYPE_CHECKING:
    from .models import ExtractionStats

# Attributes every LogRecord carries; anything else arrived through ``extra``.
_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as JSON."""
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Add extra fields
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                log_data[key] = value

        # Add common fields from record
        if record.funcName:
            log_data["function"] = record.funcName
        if record.lineno:
            log_data["line"] = record.lineno

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable log formatter for development."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


def setup_logging(stream: TextIO | None = None) -> None:
    """Configure logging based on settings.

    Args:
        stream: Output stream for log records (default: stdout)
    """
    settings = get_settings()

    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    handler = logging.StreamHandler(stream or sys.stdout)

    if settings.log_format == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(TextFormatter())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = [handler]

    # Suppress noisy loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("anthropic").setLevel(logging.WARNING)
    logging.getLogger("pdfminer").setLevel(logging.WARNING)
    logging.getLogger("pdfplumber").setLevel(logging.WARNING)

    logger = get_logger(__name__)
    logger.debug(
        "Logging initialized",
        extra={
            "environment": settings.environment,
            "log_level": settings.log_level,
            "log_format": settings.log_format,
        },
    )


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)


class LoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that adds context to all log messages."""

    def process(
        self, msg: str, kwargs: dict[str, Any]
    ) -> tuple[str, dict[str, Any]]:
        """Process the logging message and add extra context."""
        extra = kwargs.get("extra", {})
        extra.update(self.extra)
        kwargs["extra"] = extra
        return msg, kwargs


def get_context_logger(name: str, **context: Any) -> LoggerAdapter:
    """Get a logger with additional context.

    Args:
        name: Logger name
        **context: Context fields to add to all log messages

    Returns:
        Logger adapter with context

    Usage:
        logger = get_context_logger(__name__, filename="bid.pdf")
        logger.info("Parsing document")  # Includes filename
    """
    return LoggerAdapter(get_logger(name), context)


# =========================
# Convenience functions
# =========================


def log_document_parsed(filename: str, method: str, characters: int) -> None:
    """Log which text source was used for a document."""
    logger = get_logger("subintake.parsers")
    logger.info(
        f"Parsed {filename} using {method} extraction ({characters} chars)",
        extra={
            "source_file": filename,
            "method": method,
            "characters": characters,
            "event": "document_parsed",
        },
    )


def log_augmentation_event(
    filename: str,
    strategy: str,
    used: bool,
    fields: list[str] | None = None,
    warnings: list[str] | None = None,
) -> None:
    """Log the outcome of one augmentation pass.

    Args:
        filename: Source document
        strategy: Augmentation strategy used (document, full, supplement)
        used: Whether the pass changed any field
        fields: Fields that were changed
        warnings: Warnings raised during the pass
    """
    logger = get_logger("subintake.augmentation")
    level = logging.WARNING if warnings else logging.INFO
    logger.log(
        level,
        f"Augmentation {strategy} for {filename}: "
        f"{'updated ' + ', '.join(fields) if fields else 'no changes'}",
        extra={
            "source_file": filename,
            "strategy": strategy,
            "used": used,
            "fields": fields or [],
            "warnings": warnings or [],
            "event": "augmentation",
        },
    )


def log_grouping_result(
    strategy: str,
    input_count: int,
    group_count: int,
    duplicate_groups: int,
) -> None:
    """Log the size of a grouping pass."""
    logger = get_logger("subintake.resolution")
    logger.debug(
        f"Grouping {strategy}: {input_count} records -> {group_count} groups",
        extra={
            "strategy": strategy,
            "input_count": input_count,
            "group_count": group_count,
            "duplicate_groups": duplicate_groups,
            "event": "grouping",
        },
    )


def log_extraction_summary(stats: "ExtractionStats") -> None:
    """Log a per-batch extraction summary."""
    logger = get_logger("subintake.batch")
    summary = stats.summary()
    logger.info(
        f"Processed {summary['total_files_processed']} files, "
        f"{summary['augmented_files_count']} augmented, "
        f"{summary['total_characters_extracted']} characters extracted",
        extra={**summary, "event": "extraction_summary"},
    )
    for detail in stats.file_details:
        logger.debug(
            f"  {detail.filename}: {detail.characters} chars [{detail.method}]",
            extra={
                "source_file": detail.filename,
                "method": detail.method,
                "characters": detail.characters,
                "event": "file_summary",
            },
        )
