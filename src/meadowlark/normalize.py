"""Map loosely-keyed candidate records onto CanonicalOpportunity."""

import logging
from typing import Any, Optional, Union

from pydantic import ValidationError

from meadowlark.models.opportunity import (
    DEFAULT_DESCRIPTION,
    NOT_SPECIFIED,
    CanonicalOpportunity,
)
from meadowlark.models.raw import RawCandidate
from meadowlark.urls import is_http_url, repair_url

logger = logging.getLogger(__name__)

# Ordered: the first present, non-blank alias wins.
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "title": (
        "title", "name", "projectName", "project_name",
        "opportunityName", "opportunity_name", "project",
    ),
    "url": (
        "url", "link", "website", "verification_source", "verificationSource",
        "source", "investmentUrl", "investment_url", "href", "web",
    ),
    "location": (
        "location", "region", "area", "country",
        "geographic_location", "geographicLocation",
    ),
    "description": (
        "description", "relevance", "reason", "summary",
        "details", "overview", "about", "info",
    ),
    "region": ("region", "location", "area", "country"),
    "registry": ("registry", "certification", "verifier", "certifier"),
    "sdg_alignment": ("sdg_alignment", "sdgAlignment", "sdgs"),
    "estimated_return": ("estimated_return", "estimatedReturn", "return"),
    "verification_source": ("verification_source", "verificationSource"),
}

REQUIRED_FIELDS = ("title", "url", "location")


def _as_text(value: Any) -> Optional[str]:
    """Stringify scalar values; join lists of scalars. Blank or structured values are absent."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, str):
        text = value.strip()
    elif isinstance(value, (int, float)):
        text = str(value)
    elif isinstance(value, list):
        parts = [_as_text(v) for v in value if not isinstance(v, (dict, list))]
        text = ", ".join(p for p in parts if p)
    else:
        return None
    return text or None


def resolve_field(data: dict[str, Any], field: str) -> Optional[str]:
    """Walk the alias list for field and return the first present, non-blank value."""
    for alias in FIELD_ALIASES[field]:
        if alias in data:
            text = _as_text(data[alias])
            if text:
                return text
    return None


def normalize_candidate(raw: Union[RawCandidate, dict[str, Any]]) -> Optional[CanonicalOpportunity]:
    """
    Resolve aliases, repair the URL and build a CanonicalOpportunity.
    Returns None when title, a usable URL or location is missing.
    """
    data, source = (raw.data, raw.source) if isinstance(raw, RawCandidate) else (raw, "")
    if not isinstance(data, dict):
        logger.warning("Invalid candidate (not an object): %r", data)
        return None

    values = {field: resolve_field(data, field) for field in FIELD_ALIASES}
    title = values["title"]
    if not title:
        logger.warning("Rejected candidate without title in %s: keys=%s", source or "list", sorted(data)[:10])
        return None

    raw_url = values["url"]
    url = repair_url(raw_url)
    if not url:
        logger.warning("Rejected %r: missing or invalid URL %r", title, raw_url)
        return None

    location = values["location"]
    if not location:
        logger.warning("Rejected %r: missing location", title)
        return None

    registry = values["registry"] or ""
    verified = data.get("verified")
    if not isinstance(verified, bool):
        verified = bool(registry)

    verification_source = values["verification_source"] or url

    try:
        return CanonicalOpportunity(
            title=title,
            url=url,
            location=location,
            description=values["description"] or DEFAULT_DESCRIPTION,
            region=values["region"] or location,
            registry=registry,
            verified=verified,
            sdg_alignment=values["sdg_alignment"] or NOT_SPECIFIED,
            estimated_return=values["estimated_return"] or NOT_SPECIFIED,
            verification_source=verification_source,
        )
    except ValidationError as e:
        logger.warning("Rejected %r: %s", title, e)
        return None


__all__ = [
    "FIELD_ALIASES",
    "is_http_url",
    "normalize_candidate",
    "repair_url",
    "resolve_field",
]
