"""Unit tests for score formulas, payload parsing and display metrics."""

import json

import pytest

from meadowlark.errors import MalformedPayload
from meadowlark.models.preferences import InvestmentPreferences
from meadowlark.scoring import (
    baseline_scores,
    build_display_metrics,
    conservation_score,
    economic_score,
    parse_conservation_payload,
    parse_economic_payload,
    round_half_up,
)


def _prefs(risk: str = "medium", horizon: str = "medium") -> InvestmentPreferences:
    return InvestmentPreferences(
        region="africa",
        investment_amount=50000,
        risk_tolerance=risk,
        investment_horizon=horizon,
    )


class TestRounding:
    """Tests for half-up rounding."""

    @pytest.mark.parametrize("value,expected", [(2.5, 3), (0.5, 1), (1.49, 1), (88.4, 88), (0, 0)])
    def test_round_half_up(self, value: float, expected: int) -> None:
        assert round_half_up(value) == expected


class TestConservationScore:
    """Tests for conservation_score and parse_conservation_payload."""

    @pytest.mark.parametrize(
        "count,threatened,expected",
        [(0, 0, 50), (200, 0, 70), (200, 3, 80), (10000, 0, 100), (10000, 5, 100)],
    )
    def test_formula(self, count: int, threatened: int, expected: int) -> None:
        assert conservation_score(count, threatened) == expected

    def test_gbif_payload_with_facets(self) -> None:
        """Threatened counts come from IUCN facet buckets."""
        payload = json.dumps({
            "count": 200,
            "facets": [{
                "field": "IUCN_RED_LIST_CATEGORY",
                "counts": [
                    {"name": "ENDANGERED", "count": 2},
                    {"name": "VULNERABLE", "count": 1},
                    {"name": "LEAST_CONCERN", "count": 90},
                ],
            }],
        })
        reading = parse_conservation_payload(payload)
        assert reading.species_count == 200
        assert reading.threatened_count == 3
        assert reading.score == 80
        assert reading.source == "gbif"

    def test_explicit_threatened_field(self) -> None:
        reading = parse_conservation_payload('{"count": 0, "threatened": 1}')
        assert reading.score == 60

    def test_results_length_used_without_count(self) -> None:
        reading = parse_conservation_payload(json.dumps({"results": [{}] * 100}))
        assert reading.species_count == 100
        assert reading.score == 60

    @pytest.mark.parametrize(
        "text", ["not json", "[]", '{"foo": 1}', '{"count": -1}', '{"count": "many"}', '{"count": 5, "threatened": "x"}']
    )
    def test_malformed(self, text: str) -> None:
        with pytest.raises(MalformedPayload):
            parse_conservation_payload(text)


class TestEconomicScore:
    """Tests for economic_score and parse_economic_payload."""

    @pytest.mark.parametrize(
        "temperature,precipitation,expected",
        [(17.5, 60, 100), (37.5, 60, 64), (17.5, 0, 64), (100, 500, 0)],
    )
    def test_formula(self, temperature: float, precipitation: float, expected: int) -> None:
        assert economic_score(temperature, precipitation) == expected

    def test_open_meteo_current_block(self) -> None:
        reading = parse_economic_payload('{"current": {"temperature_2m": 17.5, "precipitation": 60}}')
        assert reading.score == 100
        assert reading.temperature == 17.5
        assert reading.source == "open-meteo"

    def test_top_level_fields(self) -> None:
        reading = parse_economic_payload('{"temperature": 37.5, "precipitation": 60}')
        assert reading.score == 64

    @pytest.mark.parametrize(
        "text", ["", "null", '{"current": {"temperature_2m": 20}}', '{"temperature": "hot", "precipitation": 1}']
    )
    def test_malformed(self, text: str) -> None:
        with pytest.raises(MalformedPayload):
            parse_economic_payload(text)


class TestBaselineScores:
    """Tests for the preference-derived baseline used when a lookup fails."""

    def test_medium(self, fixed_random) -> None:
        assert baseline_scores(_prefs(), fixed_random(0.5)) == (80, 85)

    def test_low_risk_short_horizon(self, fixed_random) -> None:
        assert baseline_scores(_prefs("low", "short"), fixed_random(0.5)) == (64, 61)

    def test_caps(self, fixed_random) -> None:
        """High risk and long horizon are capped at 95 and 92."""
        assert baseline_scores(_prefs("high", "long"), fixed_random(0.99)) == (95, 92)

    @pytest.mark.parametrize("risk", ["low", "medium", "high"])
    @pytest.mark.parametrize("horizon", ["short", "medium", "long"])
    @pytest.mark.parametrize("draw", [0.0, 0.5, 0.999])
    def test_always_in_range(self, risk: str, horizon: str, draw: float, fixed_random) -> None:
        conservation, economic = baseline_scores(_prefs(risk, horizon), fixed_random(draw))
        assert 0 <= conservation <= 100
        assert 0 <= economic <= 100


class TestDisplayMetrics:
    """Tests for build_display_metrics."""

    def test_highlights_quote_fields(self, fixed_random) -> None:
        metrics = build_display_metrics(
            _prefs(), species_count=1234, climate_stability=0.8, verified=True, rng=fixed_random(0.5)
        )
        assert metrics["species_protected"] == 1234
        assert metrics["highlights"][0] == "1,234 species protected"
        assert metrics["highlights"][1] == f"{metrics['carbon_offset']:,} tons CO₂ offset annually"
        assert metrics["highlights"][2] == f"{metrics['land_restored']:,} hectares restored"
        assert metrics["highlights"][3] == "Verified by independent auditors"
        assert metrics["environmental_metrics"].climate_resilience_score == pytest.approx(80)

    def test_unverified_without_species(self, fixed_random) -> None:
        metrics = build_display_metrics(
            _prefs(), species_count=0, climate_stability=0.0, verified=False, rng=fixed_random(0.5)
        )
        assert metrics["species_protected"] == 50
        assert metrics["highlights"][-1] == "Pending verification"
        assert 0.7 <= metrics["biodiversity_index"] <= 0.95

    def test_projected_return_one_decimal(self, fixed_random) -> None:
        metrics = build_display_metrics(
            _prefs(), species_count=0, climate_stability=0.5, verified=False, rng=fixed_random(0.5)
        )
        # 5.0 * (1.1 + 0.15) = 6.25 -> 6.3
        assert metrics["projected_return"] == 6.3
        assert metrics["financial_metrics"].project_roi == 6.3
