"""Ordered rule chains for field extraction.

Each extractor is a list of rules tried in order; the first rule that
produces a value wins and the value takes that rule's confidence.
"""

import logging
from collections.abc import Callable, Sequence
from typing import Any, NamedTuple

from ..models import FieldValue

logger = logging.getLogger(__name__)


class Rule(NamedTuple):
    """A named extraction rule.

    ``find`` returns a string (scored with ``confidence``), a FieldValue
    carrying its own score, or None when the rule does not fire.
    """

    name: str
    find: Callable[..., "str | FieldValue | None"]
    confidence: float


def first_match(rules: Sequence[Rule], *args: Any) -> FieldValue | None:
    """Evaluate rules in order and return the first hit."""
    for rule in rules:
        result = rule.find(*args)
        if not result:
            continue
        if isinstance(result, FieldValue):
            if not result.value:
                continue
            hit = result
        else:
            hit = FieldValue(value=result, confidence=rule.confidence)
        logger.debug(f"Rule {rule.name} matched {hit.value!r} ({hit.confidence:.2f})")
        return hit
    return None
