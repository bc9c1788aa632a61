"""Deterministic, network-free substitute opportunities built from preferences alone."""

from dataclasses import dataclass

from meadowlark.models.opportunity import (
    NOT_SPECIFIED,
    EnrichedOpportunity,
    EnvironmentalMetrics,
    FinancialMetrics,
)
from meadowlark.models.preferences import InvestmentPreferences, region_display_name
from meadowlark.scoring.metrics import format_count, round_half_up, round_one_decimal


@dataclass(frozen=True)
class RegionBaseline:
    """Static biodiversity and climate baselines (0-1) for a region."""

    name: str
    biodiversity: float
    climate: float


REGION_BASELINES: dict[str, RegionBaseline] = {
    "north-america": RegionBaseline("North America", 0.72, 0.68),
    "south-america": RegionBaseline("South America", 0.89, 0.85),
    "europe": RegionBaseline("Europe", 0.65, 0.62),
    "africa": RegionBaseline("Africa", 0.91, 0.78),
    "asia": RegionBaseline("Asia", 0.83, 0.76),
    "oceania": RegionBaseline("Oceania", 0.88, 0.81),
}

# Used for region keys outside the table
NEUTRAL_BIODIVERSITY = 0.8
NEUTRAL_CLIMATE = 0.75


@dataclass(frozen=True)
class Archetype:
    """One fallback project template. Weights and caps are fixed per archetype."""

    key: str
    name_suffix: str
    link: str
    registry: str
    description: str  # formatted with {region}
    conservation_weights: tuple[float, float]  # (biodiversity, climate)
    conservation_cap: int
    economic_base: float
    economic_slope: float  # per point of minimum return
    economic_cap: int
    return_factor: float
    biodiversity_factor: float
    climate_factor: float
    carbon_factor: float
    species_factor: float
    land_factor: float
    water_quality_index: float
    climate_resilience_score: float
    highlights: tuple[str, ...]  # formatted with {species}, {carbon}, {land}


ARCHETYPES: tuple[Archetype, ...] = (
    Archetype(
        key="reforestation",
        name_suffix="Reforestation Initiative",
        link="https://registry.verra.org/",
        registry="Verra",
        description=(
            "A comprehensive reforestation project in {region} focused on restoring native "
            "ecosystems while generating sustainable returns through carbon credits and eco-tourism."
        ),
        conservation_weights=(85, 15),
        conservation_cap=95,
        economic_base=70,
        economic_slope=2.0,
        economic_cap=92,
        return_factor=1.2,
        biodiversity_factor=1.0,
        climate_factor=1.0,
        carbon_factor=0.8,
        species_factor=45,
        land_factor=0.002,
        water_quality_index=75,
        climate_resilience_score=82,
        highlights=(
            "{species} species protected",
            "{carbon} tons CO₂ offset annually",
            "{land} hectares restored",
            "Community-led conservation model",
        ),
    ),
    Archetype(
        key="sustainable-agriculture",
        name_suffix="Sustainable Agriculture Fund",
        link="https://www.goldstandard.org/",
        registry="Gold Standard",
        description=(
            "Innovative sustainable agriculture initiative combining regenerative farming "
            "practices with biodiversity conservation in {region}."
        ),
        conservation_weights=(70, 30),
        conservation_cap=88,
        economic_base=75,
        economic_slope=2.2,
        economic_cap=95,
        return_factor=1.4,
        biodiversity_factor=0.85,
        climate_factor=0.95,
        carbon_factor=0.6,
        species_factor=32,
        land_factor=0.0025,
        water_quality_index=80,
        climate_resilience_score=78,
        highlights=(
            "{species} species protected",
            "{carbon} tons CO₂ offset annually",
            "Regenerative farming practices",
            "Local farmer partnerships",
        ),
    ),
    Archetype(
        key="marine-conservation",
        name_suffix="Marine Conservation Project",
        link="https://www.conservation.org/",
        registry="Verra",
        description=(
            "Coastal and marine ecosystem restoration project in {region} protecting critical "
            "ocean habitats and supporting sustainable fisheries."
        ),
        conservation_weights=(90, 10),
        conservation_cap=93,
        economic_base=68,
        economic_slope=1.8,
        economic_cap=87,
        return_factor=1.1,
        biodiversity_factor=0.95,
        climate_factor=0.7,
        carbon_factor=0.5,
        species_factor=58,
        land_factor=0.0015,
        water_quality_index=88,
        climate_resilience_score=85,
        highlights=(
            "{species} marine species protected",
            "Coral reef restoration",
            "Sustainable fisheries support",
            "Blue carbon sequestration",
        ),
    ),
)


def region_baseline(region: str) -> RegionBaseline:
    """Baseline for a region key; unknown keys get neutral values under their display name."""
    baseline = REGION_BASELINES.get(region)
    if baseline is None:
        baseline = RegionBaseline(
            region_display_name(region) or "Global", NEUTRAL_BIODIVERSITY, NEUTRAL_CLIMATE
        )
    return baseline


def _synthesize_one(
    index: int,
    archetype: Archetype,
    baseline: RegionBaseline,
    preferences: InvestmentPreferences,
) -> EnrichedOpportunity:
    risk = preferences.risk_multiplier
    horizon = preferences.horizon_multiplier
    amount = preferences.investment_amount
    min_return = preferences.minimum_return
    bio, clim = baseline.biodiversity, baseline.climate
    w_bio, w_clim = archetype.conservation_weights

    conservation = min(archetype.conservation_cap, round_half_up((bio * w_bio + clim * w_clim) * risk))
    economic = min(
        archetype.economic_cap,
        round_half_up((archetype.economic_base + min_return * archetype.economic_slope) * risk * horizon),
    )
    projected_return = round_one_decimal(min_return * archetype.return_factor * risk * horizon)
    biodiversity_index = bio * archetype.biodiversity_factor
    climate_score = clim * archetype.climate_factor
    carbon_offset = round_half_up(amount * archetype.carbon_factor * clim)
    species = round_half_up(bio * archetype.species_factor)
    land_restored = round_half_up(amount * archetype.land_factor * clim)

    figures = {
        "species": format_count(species),
        "carbon": format_count(carbon_offset),
        "land": format_count(land_restored),
    }
    return EnrichedOpportunity(
        id=str(index + 1),
        title=f"{baseline.name} {archetype.name_suffix}",
        url=archetype.link,
        location=baseline.name,
        description=archetype.description.format(region=baseline.name),
        region=baseline.name,
        registry=archetype.registry,
        verified=True,
        sdg_alignment=", ".join(str(s) for s in preferences.sdgs) or NOT_SPECIFIED,
        estimated_return=f"{projected_return}%",
        verification_source=archetype.link,
        conservation_score=conservation,
        economic_score=economic,
        species_count=species,
        climate_stability=climate_score,
        conservation_source="synthesized",
        economic_source="synthesized",
        investment_amount=amount,
        projected_return=projected_return,
        biodiversity_index=biodiversity_index,
        climate_score=climate_score,
        carbon_offset=carbon_offset,
        species_protected=species,
        land_restored=land_restored,
        sdg_goals=list(preferences.sdgs),
        risk_level=preferences.risk_tolerance,
        timeline=preferences.investment_horizon,
        highlights=[h.format(**figures) for h in archetype.highlights],
        environmental_metrics=EnvironmentalMetrics(
            biodiversity_score=biodiversity_index * 100,
            climate=climate_score * 100,
            water_quality_index=archetype.water_quality_index,
            carbon_sequestration_tons=carbon_offset,
            climate_resilience_score=archetype.climate_resilience_score,
        ),
        financial_metrics=FinancialMetrics(
            project_roi=projected_return,
            risk_level=preferences.risk_tolerance,
            investment_yield_percent=projected_return,
        ),
    )


def synthesize(preferences: InvestmentPreferences) -> list[EnrichedOpportunity]:
    """Three archetype opportunities (reforestation, agriculture, marine). Pure; never fails."""
    baseline = region_baseline(preferences.region)
    return [
        _synthesize_one(i, archetype, baseline, preferences)
        for i, archetype in enumerate(ARCHETYPES)
    ]
