"""Score baselines and presentation metrics derived from investor preferences."""

import math
import random
from typing import Any

from meadowlark.models.opportunity import EnvironmentalMetrics, FinancialMetrics
from meadowlark.models.preferences import InvestmentPreferences


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (2.5 -> 3), unlike round()."""
    return int(math.floor(value + 0.5))


def round_one_decimal(value: float) -> float:
    return math.floor(value * 10 + 0.5) / 10


def baseline_scores(preferences: InvestmentPreferences, rng: random.Random) -> tuple[int, int]:
    """
    Local (conservation, economic) scores used when a lookup fails.
    Base in [70, 90) scaled by risk (and horizon for economic); capped at 95 / 92.
    """
    base = 70 + rng.random() * 20
    risk = preferences.risk_multiplier
    horizon = preferences.horizon_multiplier
    conservation = min(95, round_half_up(base * risk))
    economic = min(92, round_half_up((base + 5) * risk * horizon))
    return conservation, economic


def format_count(value: int) -> str:
    """Thousands-separated integer for highlight text."""
    return f"{value:,}"


def build_display_metrics(
    preferences: InvestmentPreferences,
    *,
    species_count: int,
    climate_stability: float,
    verified: bool,
    rng: random.Random,
) -> dict[str, Any]:
    """
    Presentation-only figures for one enriched opportunity.
    Each figure is drawn once so highlights always quote the record's own values.
    """
    risk = preferences.risk_multiplier
    horizon = preferences.horizon_multiplier
    amount = preferences.investment_amount

    projected_return = round_one_decimal(
        preferences.minimum_return * (1.1 + rng.random() * 0.3) * risk * horizon
    )
    if species_count > 0:
        biodiversity_index = min(1.0, species_count / 100)
        species_protected = species_count
    else:
        biodiversity_index = 0.7 + rng.random() * 0.25
        species_protected = round_half_up(30 + rng.random() * 40)
    climate_score = 0.65 + rng.random() * 0.25
    carbon_offset = round_half_up(amount * (0.5 + rng.random() * 0.4))
    land_restored = round_half_up(amount * 0.002 * (0.8 + rng.random() * 0.4))
    resilience = climate_stability * 100 if climate_stability > 0 else 75 + rng.random() * 15

    return {
        "investment_amount": amount,
        "projected_return": projected_return,
        "biodiversity_index": biodiversity_index,
        "climate_score": climate_score,
        "carbon_offset": carbon_offset,
        "species_protected": species_protected,
        "land_restored": land_restored,
        "sdg_goals": list(preferences.sdgs),
        "risk_level": preferences.risk_tolerance,
        "timeline": preferences.investment_horizon,
        "highlights": [
            f"{format_count(species_protected)} species protected",
            f"{format_count(carbon_offset)} tons CO₂ offset annually",
            f"{format_count(land_restored)} hectares restored",
            "Verified by independent auditors" if verified else "Pending verification",
        ],
        "environmental_metrics": EnvironmentalMetrics(
            biodiversity_score=biodiversity_index * 100,
            climate=climate_score * 100,
            water_quality_index=70 + rng.random() * 20,
            carbon_sequestration_tons=carbon_offset,
            climate_resilience_score=resilience,
        ),
        "financial_metrics": FinancialMetrics(
            project_roi=projected_return,
            risk_level=preferences.risk_tolerance,
            investment_yield_percent=projected_return,
        ),
    }
