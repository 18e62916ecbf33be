"""Contact resolution: duplicate detection and company grouping."""

from .grouping import (
    UNKNOWN_COMPANY,
    deduplicate_and_group,
    group_by_company,
    merge_grouping_strategies,
)
from .matcher import are_duplicates, merge_contacts, similarity_score

__all__ = [
    "UNKNOWN_COMPANY",
    "deduplicate_and_group",
    "group_by_company",
    "merge_grouping_strategies",
    "are_duplicates",
    "merge_contacts",
    "similarity_score",
]
