"""Conservation score from a biodiversity occurrence payload (GBIF occurrence search)."""

import json
from dataclasses import dataclass
from typing import Any

from meadowlark.errors import MalformedPayload

from .metrics import round_half_up

# IUCN Red List categories counted as threatened (codes and GBIF enum names)
THREATENED_CATEGORIES = frozenset({
    "CR", "EN", "VU",
    "CRITICALLY_ENDANGERED", "ENDANGERED", "VULNERABLE",
})


@dataclass(frozen=True)
class ConservationReading:
    """Live conservation lookup result."""

    score: int  # 0-100
    species_count: int
    threatened_count: int
    source: str = "gbif"


def conservation_score(species_count: float, threatened_count: float) -> int:
    """50 + count/10 capped at 100, +10 when any threatened species is recorded, capped at 100."""
    base = min(100.0, 50 + species_count / 10)
    bonus = 10 if threatened_count > 0 else 0
    return min(100, round_half_up(base + bonus))


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _threatened_from_facets(payload: dict) -> int:
    """Sum threatened-category counts from an iucnRedListCategory facet, if present."""
    total = 0
    for facet in payload.get("facets") or []:
        if not isinstance(facet, dict):
            continue
        if "iucn" not in str(facet.get("field", "")).lower():
            continue
        for bucket in facet.get("counts") or []:
            if not isinstance(bucket, dict):
                continue
            name = str(bucket.get("name", "")).upper()
            if name in THREATENED_CATEGORIES and _is_number(bucket.get("count")):
                total += int(bucket["count"])
    return total


def parse_conservation_payload(text: str | bytes) -> ConservationReading:
    """
    Parse collaborator text into a ConservationReading.
    Expects an object with `count` (or a `results` list) and optionally `threatened`.
    Raises MalformedPayload otherwise.
    """
    try:
        payload = json.loads(text)
    except (TypeError, ValueError) as e:
        raise MalformedPayload(f"Conservation payload is not JSON: {e}") from e
    if not isinstance(payload, dict):
        raise MalformedPayload("Conservation payload is not an object")

    count = payload.get("count")
    if count is None and isinstance(payload.get("results"), list):
        count = len(payload["results"])
    if not _is_number(count) or count < 0:
        raise MalformedPayload(f"Conservation payload has no usable count: {count!r}")

    threatened = payload.get("threatened")
    if threatened is None:
        threatened = _threatened_from_facets(payload)
    elif not _is_number(threatened):
        raise MalformedPayload(f"Conservation payload has invalid threatened count: {threatened!r}")

    return ConservationReading(
        score=conservation_score(count, threatened),
        species_count=int(count),
        threatened_count=int(threatened),
    )
