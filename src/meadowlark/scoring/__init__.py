"""Score enrichment: conservation and economic lookups plus display metrics."""

from .conservation import ConservationReading, conservation_score, parse_conservation_payload
from .economic import EconomicReading, economic_score, parse_economic_payload
from .enricher import ScoreEnricher
from .metrics import baseline_scores, build_display_metrics, round_half_up

__all__ = [
    "ConservationReading",
    "EconomicReading",
    "ScoreEnricher",
    "baseline_scores",
    "build_display_metrics",
    "conservation_score",
    "economic_score",
    "parse_conservation_payload",
    "parse_economic_payload",
    "round_half_up",
]
