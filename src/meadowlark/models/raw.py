"""Candidate records as lifted out of a generation response, before normalization."""

from typing import Any

from pydantic import BaseModel, Field


class RawCandidate(BaseModel):
    """
    One loosely-shaped record. Key names vary from response to response
    (title/name/projectName/...); normalize_candidate resolves them.
    """

    data: dict[str, Any] = Field(default_factory=dict)
    source: str = Field(default="", description="Envelope field the record was found under; empty for a top-level list")
