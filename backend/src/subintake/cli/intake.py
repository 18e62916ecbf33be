"""CLI commands for document intake and grouping.

Usage:
    subintake process FILE... [--no-augmentation] [--group] [--json] [--stats]
    subintake group RECORDS_JSON [--json]
"""

import asyncio
import json
import sys
from pathlib import Path
from typing import Any

import click
from pydantic import ValidationError

from ..batch import group_batch, process_batch
from ..models import (
    ContactField,
    ContactRecord,
    ExtractionStats,
    ProcessOptions,
    SubcontractorGroup,
)

FIELD_LABELS = {
    ContactField.COMPANY_NAME: "Company",
    ContactField.CONTACT_NAME: "Contact",
    ContactField.EMAIL: "Email",
    ContactField.PHONE: "Phone",
    ContactField.TRADE: "Trade",
}


def _confidence_color(confidence: float) -> str:
    if confidence >= 0.8:
        return "green"
    if confidence >= 0.6:
        return "yellow"
    return "red"


def _echo_record(record: ContactRecord, indent: str = "  ") -> None:
    for field, label in FIELD_LABELS.items():
        current = record.get_field(field)
        click.echo(f"{indent}{label + ':':<9} {current.value or '-'} ", nl=False)
        click.secho(f"({current.confidence:.2f})", fg=_confidence_color(current.confidence))
    click.echo(f"{indent}{'Overall:':<9} {record.confidence.overall:.2f}")

    meta = record.augmentation
    if meta is None:
        return
    if meta.used:
        click.echo(
            f"{indent}Augmented ({meta.strategy}): {', '.join(meta.supplemented_fields or [])}"
        )
    for warning in meta.warnings or []:
        click.secho(f"{indent}Warning: {warning}", fg="yellow")


def _echo_groups(groups: list[SubcontractorGroup]) -> None:
    click.echo(f"\nSubcontractors ({len(groups)} groups)")
    click.echo("=" * 60)
    for group in groups:
        click.echo(f"\n{group.company_name}", nl=False)
        if group.trade:
            click.echo(f" [{group.trade}]", nl=False)
        if group.is_duplicate:
            click.secho(" (duplicate)", fg="yellow", nl=False)
        click.echo()
        if group.merged_from:
            click.echo(f"  Merged from: {', '.join(group.merged_from)}")
        for record in group.contacts:
            click.echo(f"  - {record.contact_name or '-'} <{record.email or '-'}> {record.phone or ''}")


def _dump(groups: list[SubcontractorGroup]) -> list[dict[str, Any]]:
    return [group.model_dump(mode="json") for group in groups]


@click.command(name="process")
@click.argument(
    "files",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--no-augmentation",
    is_flag=True,
    help="Use rule-based extraction only",
)
@click.option(
    "--group",
    "group_results",
    is_flag=True,
    help="Group the extracted contacts by subcontractor",
)
@click.option(
    "--json",
    "output_json",
    is_flag=True,
    help="Output as JSON",
)
@click.option(
    "--stats",
    "show_stats",
    is_flag=True,
    help="Show extraction statistics",
)
def process_command(
    files: tuple[Path, ...],
    no_augmentation: bool,
    group_results: bool,
    output_json: bool,
    show_stats: bool,
):
    """Extract contact records from documents.

    Supports PDF, Excel (xlsx, xlsm, xls), text and CSV files.

    Examples:

        # Extract contacts from two proposals
        subintake process acme.pdf bolt.xlsx

        # Rule-based only, grouped, as JSON
        subintake process *.pdf --no-augmentation --group --json
    """
    options = ProcessOptions(enable_augmentation=not no_augmentation)
    stats = ExtractionStats()
    inputs = [(path.name, path.read_bytes()) for path in files]

    result = asyncio.run(process_batch(inputs, options=options, stats=stats))
    groups = group_batch(result.contacts) if group_results else None

    if output_json:
        output: dict[str, Any] = {
            "processed_files": [f.model_dump(mode="json") for f in result.processed_files],
            "contacts": [c.model_dump(mode="json") for c in result.contacts],
        }
        if groups is not None:
            output["groups"] = _dump(groups)
        if show_stats:
            output["stats"] = stats.summary()
        click.echo(json.dumps(output, indent=2))
    else:
        for processed in result.processed_files:
            click.echo(f"\n{processed.filename}")
            if processed.status == "error":
                click.secho(f"  Error: {processed.error}", fg="red")
                continue
            for record in processed.contacts:
                _echo_record(record)

        if groups is not None:
            _echo_groups(groups)

        if show_stats:
            summary = stats.summary()
            click.echo("\nExtraction Statistics")
            click.echo("=" * 60)
            click.echo(f"  Files processed:      {summary['total_files_processed']}")
            click.echo(
                f"  Augmented:            {summary['augmented_files_count']} "
                f"({summary['augmented_percent']}%)"
            )
            click.echo(f"  Characters extracted: {summary['total_characters_extracted']}")

    if result.failed:
        sys.exit(1)


def load_records(data: Any) -> list[ContactRecord]:
    """Load contact records from parsed JSON.

    Accepts a list of records or the object written by ``process --json``.
    """
    if isinstance(data, dict):
        data = data.get("contacts", [])
    if not isinstance(data, list):
        raise click.ClickException("Expected a JSON array of contact records")
    try:
        return [ContactRecord.model_validate(item) for item in data]
    except ValidationError as e:
        raise click.ClickException(f"Invalid contact record: {e}") from e


@click.command(name="group")
@click.argument(
    "records_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--json",
    "output_json",
    is_flag=True,
    help="Output as JSON",
)
def group_command(records_file: Path, output_json: bool):
    """Group previously extracted contact records by subcontractor.

    RECORDS_FILE holds the JSON written by ``subintake process --json``
    or a plain array of contact records.
    """
    try:
        data = json.loads(records_file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise click.ClickException(f"Invalid JSON in {records_file}: {e}") from e

    groups = group_batch(load_records(data))

    if output_json:
        click.echo(json.dumps(_dump(groups), indent=2))
    else:
        _echo_groups(groups)
