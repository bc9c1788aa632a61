"""Canonical, validated and enriched opportunity models."""

from typing import Optional

from pydantic import AliasGenerator, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from meadowlark.urls import is_http_url

MIN_OPPORTUNITIES = 2
MAX_OPPORTUNITIES = 6

DEFAULT_DESCRIPTION = (
    "Conservation investment opportunity aligned with your sustainability goals."
)
NOT_SPECIFIED = "Not specified"

# Output keys are camelCase (usedFallback, conservationScore, ...); fields validate by name.
_CAMEL_OUTPUT = AliasGenerator(serialization_alias=to_camel)


class CanonicalOpportunity(BaseModel):
    """Alias-resolved opportunity. title, url and location are always present and url is http(s)."""

    model_config = ConfigDict(alias_generator=_CAMEL_OUTPUT)

    title: str
    url: str
    location: str
    description: str = DEFAULT_DESCRIPTION
    region: str = ""
    registry: str = ""
    verified: bool = False
    sdg_alignment: str = NOT_SPECIFIED
    estimated_return: str = NOT_SPECIFIED
    verification_source: str = ""

    @field_validator("title", "location")
    @classmethod
    def _non_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("url")
    @classmethod
    def _http_url(cls, value: str) -> str:
        if not is_http_url(value):
            raise ValueError(f"not an absolute http(s) URL: {value!r}")
        return value


class ValidatedCollection(BaseModel):
    """Ordered 2..6 canonical opportunities, in order of first appearance in the response."""

    opportunities: list[CanonicalOpportunity] = Field(
        ..., min_length=MIN_OPPORTUNITIES, max_length=MAX_OPPORTUNITIES
    )
    rejected: int = Field(default=0, description="Candidates dropped by normalization")
    truncated: int = Field(default=0, description="Valid candidates cut by the cap")

    def __len__(self) -> int:
        return len(self.opportunities)


class EnvironmentalMetrics(BaseModel):
    """Display-only environmental figures."""

    model_config = ConfigDict(alias_generator=_CAMEL_OUTPUT, frozen=True)

    biodiversity_score: float
    climate: float
    water_quality_index: Optional[float] = None
    carbon_sequestration_tons: Optional[int] = None
    climate_resilience_score: Optional[float] = None


class FinancialMetrics(BaseModel):
    """Display-only financial figures."""

    model_config = ConfigDict(alias_generator=_CAMEL_OUTPUT, frozen=True)

    project_roi: float
    risk_level: str
    investment_yield_percent: float


class EnrichedOpportunity(CanonicalOpportunity):
    """Terminal record returned to the caller. Frozen once built."""

    model_config = ConfigDict(alias_generator=_CAMEL_OUTPUT, frozen=True)

    id: str
    conservation_score: int = Field(..., ge=0, le=100)
    economic_score: int = Field(..., ge=0, le=100)
    species_count: int = Field(..., ge=0)
    climate_stability: float = Field(..., ge=0.0, le=1.0)
    conservation_source: str = "baseline"  # gbif | baseline | synthesized
    economic_source: str = "baseline"  # open-meteo | baseline | synthesized

    # Presentation sugar, not validated beyond type
    investment_amount: float = 0.0
    projected_return: float = 0.0
    biodiversity_index: float = 0.0
    climate_score: float = 0.0
    carbon_offset: int = 0
    species_protected: int = 0
    land_restored: int = 0
    sdg_goals: list[int] = Field(default_factory=list)
    risk_level: str = "medium"
    timeline: str = "medium"
    highlights: list[str] = Field(default_factory=list)
    environmental_metrics: Optional[EnvironmentalMetrics] = None
    financial_metrics: Optional[FinancialMetrics] = None


class PipelineResult(BaseModel):
    """Caller-facing output of one ingestion attempt."""

    model_config = ConfigDict(alias_generator=_CAMEL_OUTPUT)

    opportunities: list[EnrichedOpportunity] = Field(
        ..., min_length=MIN_OPPORTUNITIES, max_length=MAX_OPPORTUNITIES
    )
    used_fallback: bool = False
    error_detail: Optional[str] = None
    state: str
    run_id: int
