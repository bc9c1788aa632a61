"""Cardinality checks over normalized candidates."""

import logging
from typing import Iterable, Optional

from meadowlark.errors import InsufficientOpportunities
from meadowlark.models.opportunity import (
    MAX_OPPORTUNITIES,
    MIN_OPPORTUNITIES,
    CanonicalOpportunity,
    ValidatedCollection,
)

logger = logging.getLogger(__name__)


def validate_candidates(
    candidates: Iterable[Optional[CanonicalOpportunity]],
) -> ValidatedCollection:
    """
    Drop rejected (None) candidates, require at least MIN_OPPORTUNITIES,
    and keep the first MAX_OPPORTUNITIES in their original order.
    Raises InsufficientOpportunities when too few survive.
    """
    items = list(candidates)
    valid = [c for c in items if c is not None]
    rejected = len(items) - len(valid)

    if len(valid) < MIN_OPPORTUNITIES:
        logger.warning(
            "Only %d valid opportunities of %d candidates, need at least %d",
            len(valid), len(items), MIN_OPPORTUNITIES,
        )
        raise InsufficientOpportunities(found=len(valid), required=MIN_OPPORTUNITIES)

    truncated = max(0, len(valid) - MAX_OPPORTUNITIES)
    if truncated:
        logger.info("Capping %d valid opportunities at %d", len(valid), MAX_OPPORTUNITIES)

    logger.info("Validation passed: %d opportunities (%d rejected)", len(valid) - truncated, rejected)
    return ValidatedCollection(
        opportunities=valid[:MAX_OPPORTUNITIES],
        rejected=rejected,
        truncated=truncated,
    )
