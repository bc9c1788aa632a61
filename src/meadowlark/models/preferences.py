"""Investor preferences collected by the form wizard."""

from pathlib import Path
from typing import Literal

try:
    import yaml
except ModuleNotFoundError as e:
    raise ModuleNotFoundError(
        "PyYAML is required for preferences loading. Run: poetry install"
    ) from e
from pydantic import BaseModel, Field

RiskTolerance = Literal["low", "medium", "high"]
InvestmentHorizon = Literal["short", "medium", "long"]

REGION_NAMES: dict[str, str] = {
    "north-america": "North America",
    "south-america": "South America",
    "europe": "Europe",
    "africa": "Africa",
    "asia": "Asia",
    "oceania": "Oceania",
}

RISK_MULTIPLIERS: dict[str, float] = {"low": 0.8, "medium": 1.0, "high": 1.3}
HORIZON_MULTIPLIERS: dict[str, float] = {"short": 0.9, "medium": 1.0, "long": 1.15}


def region_display_name(region: str) -> str:
    """Map a region key (e.g. 'south-america') to its display name; unknown keys pass through."""
    return REGION_NAMES.get(region, region)


class InvestmentPreferences(BaseModel):
    """What the investor asked for. Drives the prompt, score baselines and fallback synthesis."""

    region: str = Field(..., description="Region key, e.g. 'south-america'")
    investment_amount: float = Field(..., gt=0, allow_inf_nan=False, description="Amount in USD")
    sdgs: list[int] = Field(default_factory=list, description="Priority SDG numbers")
    risk_tolerance: RiskTolerance = "medium"
    investment_horizon: InvestmentHorizon = "medium"
    minimum_return: float = Field(default=5.0, ge=0, le=100, allow_inf_nan=False, description="Target annual return, percent")

    @property
    def region_name(self) -> str:
        return region_display_name(self.region)

    @property
    def risk_multiplier(self) -> float:
        return RISK_MULTIPLIERS[self.risk_tolerance]

    @property
    def horizon_multiplier(self) -> float:
        return HORIZON_MULTIPLIERS[self.investment_horizon]

    @classmethod
    def from_yaml(cls, path: str | Path) -> "InvestmentPreferences":
        """Load preferences from YAML (or JSON). Supports nested (preferences:) or flat structure, snake or camel case."""
        data = yaml.safe_load(Path(path).read_text()) or {}
        return cls.from_mapping(data)

    @classmethod
    def from_mapping(cls, data: dict) -> "InvestmentPreferences":
        """Build preferences from a loosely-keyed mapping, as submitted by the form."""
        if not isinstance(data, dict):
            raise ValueError(f"Preferences must be a mapping, got {type(data).__name__}")
        nested = data.get("preferences") or {}

        def _get(*keys: str, default=None):
            for key in keys:
                if key in nested:
                    return nested[key]
                if key in data:
                    return data[key]
            return default

        flat: dict = {
            "region": _get("region", default=""),
            "investment_amount": _get("investment_amount", "investmentAmount"),
            "sdgs": _get("sdgs", "sdg_goals", default=[]) or [],
            "risk_tolerance": _get("risk_tolerance", "riskTolerance", default="medium"),
            "investment_horizon": _get("investment_horizon", "investmentHorizon", default="medium"),
            "minimum_return": _get("minimum_return", "minimumReturn", default=5.0),
        }
        return cls.model_validate(flat)
