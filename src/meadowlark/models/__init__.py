"""Data models for preferences, raw candidates and opportunities."""

from meadowlark.models.opportunity import (
    CanonicalOpportunity,
    EnrichedOpportunity,
    EnvironmentalMetrics,
    FinancialMetrics,
    PipelineResult,
    ValidatedCollection,
)
from meadowlark.models.preferences import InvestmentPreferences
from meadowlark.models.raw import RawCandidate

__all__ = [
    "CanonicalOpportunity",
    "EnrichedOpportunity",
    "EnvironmentalMetrics",
    "FinancialMetrics",
    "InvestmentPreferences",
    "PipelineResult",
    "RawCandidate",
    "ValidatedCollection",
]
