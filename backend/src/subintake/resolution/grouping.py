"""Grouping of contact records into subcontractor groups.

Two passes run over the same batch:
- deduplicate_and_group folds fuzzy duplicates into one merged contact
  per group, catching spelling variants of a company but collapsing
  distinct people at that company.
- group_by_company buckets by exact company key and only drops
  exact-field duplicates, preserving distinct people.

merge_grouping_strategies keeps, per company, whichever pass retained
more contacts.
"""

from collections.abc import Sequence

from ..logging import get_context_logger, log_grouping_result
from ..models import ContactRecord, SubcontractorGroup
from .matcher import are_duplicates, merge_contacts

logger = get_context_logger(__name__)

UNKNOWN_COMPANY = "Unknown Company"


def _duplicate_count(groups: Sequence[SubcontractorGroup]) -> int:
    return sum(1 for group in groups if group.is_duplicate)


def deduplicate_and_group(records: Sequence[ContactRecord]) -> list[SubcontractorGroup]:
    """Group records, merging each into the first group holding a duplicate.

    Args:
        records: Contact records in batch order

    Returns:
        Groups in order of first appearance, one contact each
    """
    groups: list[SubcontractorGroup] = []

    for record in records:
        target: tuple[SubcontractorGroup, int] | None = None
        for group in groups:
            for index, existing in enumerate(group.contacts):
                if are_duplicates(record, existing):
                    target = (group, index)
                    break
            if target:
                break

        if target is None:
            groups.append(
                SubcontractorGroup(
                    company_name=record.company_name or UNKNOWN_COMPANY,
                    trade=record.trade,
                    contacts=[record],
                )
            )
            continue

        group, index = target
        group.contacts = [merge_contacts(group.contacts[index], record)]
        group.merged_from = [*(group.merged_from or []), record.source]
        group.is_duplicate = True

    log_grouping_result(
        "deduplicate", len(records), len(groups), _duplicate_count(groups)
    )
    return groups


def _same_person(first: ContactRecord, second: ContactRecord) -> bool:
    """Exact-field match on email, phone or contact name (absent never matches)."""
    for field in ("email", "phone", "contact_name"):
        a, b = getattr(first, field), getattr(second, field)
        if a and b and a == b:
            return True
    return False


def group_by_company(records: Sequence[ContactRecord]) -> list[SubcontractorGroup]:
    """Group records by exact company key, dropping exact duplicates.

    The key is the lower-cased company name, falling back to the email
    and then the record id when no company was extracted.

    Args:
        records: Contact records in batch order

    Returns:
        Groups in order of first appearance
    """
    buckets: dict[str, list[ContactRecord]] = {}
    for record in records:
        key = (record.company_name or record.email or record.id).lower()
        buckets.setdefault(key, []).append(record)

    groups: list[SubcontractorGroup] = []
    for bucket in buckets.values():
        unique: list[ContactRecord] = []
        for record in bucket:
            if not any(_same_person(existing, record) for existing in unique):
                unique.append(record)

        dropped = len(unique) < len(bucket)
        first = bucket[0]
        groups.append(
            SubcontractorGroup(
                company_name=first.company_name or UNKNOWN_COMPANY,
                trade=first.trade,
                contacts=unique,
                is_duplicate=dropped,
                merged_from=[record.source for record in bucket] if dropped else None,
            )
        )

    log_grouping_result("company", len(records), len(groups), _duplicate_count(groups))
    return groups


def merge_grouping_strategies(
    deduplicated: Sequence[SubcontractorGroup],
    grouped: Sequence[SubcontractorGroup],
) -> list[SubcontractorGroup]:
    """Reconcile the two grouping passes.

    For each deduplicated group, the company-key group with the same
    (case-insensitive) company name replaces it when it holds strictly
    more contacts. A company-key group is emitted at most once: when
    several deduplicated groups share its company, the first takes its
    place and the rest are dropped rather than repeating it. The output
    is therefore not one group per deduplicated group. Order follows
    ``deduplicated``.
    """
    by_company: dict[str, SubcontractorGroup] = {}
    for group in grouped:
        # Unlabelled groups share a name but not a key
        if group.company_name == UNKNOWN_COMPANY:
            continue
        by_company.setdefault(group.company_name.lower(), group)

    result: list[SubcontractorGroup] = []
    emitted: set[int] = set()
    for group in deduplicated:
        match = by_company.get(group.company_name.lower())
        if match is not None and len(match.contacts) > len(group.contacts):
            if id(match) in emitted:
                continue
            emitted.add(id(match))
            logger.debug(
                f"Keeping {len(match.contacts)} distinct contacts for {group.company_name}"
            )
            result.append(match)
        else:
            result.append(group)

    log_grouping_result("reconciled", len(deduplicated), len(result), _duplicate_count(result))
    return result
