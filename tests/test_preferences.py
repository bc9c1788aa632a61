"""Unit tests for InvestmentPreferences."""

import pytest
from pydantic import ValidationError

from meadowlark.models.preferences import InvestmentPreferences


class TestInvestmentPreferences:
    """Tests for InvestmentPreferences model."""

    def test_defaults(self) -> None:
        prefs = InvestmentPreferences(region="europe", investment_amount=5000)
        assert prefs.risk_tolerance == "medium"
        assert prefs.investment_horizon == "medium"
        assert prefs.minimum_return == 5.0
        assert prefs.sdgs == []

    @pytest.mark.parametrize(
        "risk,horizon,expected",
        [("low", "short", (0.8, 0.9)), ("medium", "medium", (1.0, 1.0)), ("high", "long", (1.3, 1.15))],
    )
    def test_multipliers(self, risk: str, horizon: str, expected: tuple) -> None:
        prefs = InvestmentPreferences(
            region="asia", investment_amount=1, risk_tolerance=risk, investment_horizon=horizon
        )
        assert (prefs.risk_multiplier, prefs.horizon_multiplier) == expected

    def test_region_name(self) -> None:
        assert InvestmentPreferences(region="north-america", investment_amount=1).region_name == "North America"
        assert InvestmentPreferences(region="arctic", investment_amount=1).region_name == "arctic"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"investment_amount": 0},
            {"risk_tolerance": "reckless"},
            {"investment_horizon": "forever"},
            {"minimum_return": -1},
        ],
    )
    def test_invalid_values_rejected(self, overrides: dict) -> None:
        values = {"region": "africa", "investment_amount": 1000}
        values.update(overrides)
        with pytest.raises(ValidationError):
            InvestmentPreferences(**values)

    def test_from_yaml_nested_camel_case(self, tmp_path) -> None:
        """from_yaml loads the form's nested, camelCase structure."""
        path = tmp_path / "prefs.yaml"
        path.write_text(
            """
preferences:
  region: oceania
  investmentAmount: 250000
  sdgs: [14, 13]
  riskTolerance: high
  investmentHorizon: long
  minimumReturn: 7.5
"""
        )
        prefs = InvestmentPreferences.from_yaml(path)
        assert prefs.region == "oceania"
        assert prefs.investment_amount == 250000
        assert prefs.sdgs == [14, 13]
        assert prefs.risk_tolerance == "high"
        assert prefs.investment_horizon == "long"
        assert prefs.minimum_return == 7.5

    def test_from_yaml_flat_snake_case(self, tmp_path) -> None:
        path = tmp_path / "prefs.yaml"
        path.write_text("region: africa\ninvestment_amount: 1000\nrisk_tolerance: low\n")
        prefs = InvestmentPreferences.from_yaml(path)
        assert prefs.risk_tolerance == "low"
        assert prefs.minimum_return == 5.0

    def test_from_json_file(self, tmp_path) -> None:
        """JSON is valid YAML, so the same loader reads form submissions."""
        path = tmp_path / "prefs.json"
        path.write_text('{"region": "asia", "investmentAmount": 20000, "sdgs": [6]}')
        assert InvestmentPreferences.from_yaml(path).sdgs == [6]

    def test_from_yaml_missing_amount(self, tmp_path) -> None:
        path = tmp_path / "prefs.yaml"
        path.write_text("region: africa\n")
        with pytest.raises(ValidationError):
            InvestmentPreferences.from_yaml(path)

    @pytest.mark.parametrize(
        "overrides",
        [
            {"investmentAmount": float("inf")},
            {"investmentAmount": float("nan")},
            {"minimumReturn": float("nan")},
        ],
    )
    def test_non_finite_numbers_rejected(self, overrides: dict) -> None:
        """Infinite or NaN amounts never reach synthesis or scoring."""
        data = {"region": "europe", "investmentAmount": 1000}
        data.update(overrides)
        with pytest.raises(ValidationError):
            InvestmentPreferences.from_mapping(data)

    def test_yaml_infinity_rejected(self, tmp_path) -> None:
        path = tmp_path / "prefs.yaml"
        path.write_text("region: europe\ninvestmentAmount: .inf\n")
        with pytest.raises(ValidationError):
            InvestmentPreferences.from_yaml(path)

    def test_from_mapping_rejects_non_mapping(self) -> None:
        with pytest.raises(ValueError, match="mapping"):
            InvestmentPreferences.from_mapping(["region", "africa"])
