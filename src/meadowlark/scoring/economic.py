"""Economic score from current climate conditions (Open-Meteo forecast payload)."""

import json
from dataclasses import dataclass
from typing import Any, Optional

from meadowlark.errors import MalformedPayload

from .metrics import round_half_up

# Optimal growing conditions: ~17.5 C, ~60 mm precipitation
OPTIMAL_TEMPERATURE = 17.5
OPTIMAL_PRECIPITATION = 60.0


@dataclass(frozen=True)
class EconomicReading:
    """Live economic lookup result."""

    score: int  # 0-100
    temperature: float
    precipitation: float
    source: str = "open-meteo"


def economic_score(temperature: float, precipitation: float) -> int:
    """Weighted distance from optimal temperature (60%) and precipitation (40%), clamped to 0-100."""
    temp_score = max(0.0, 100 - abs(temperature - OPTIMAL_TEMPERATURE) * 3)
    precip_score = max(0.0, 100 - abs(precipitation - OPTIMAL_PRECIPITATION) * 1.5)
    score = round_half_up(temp_score * 0.6 + precip_score * 0.4)
    return min(100, max(0, score))


def _number(*candidates: Any) -> Optional[float]:
    for value in candidates:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
    return None


def parse_economic_payload(text: str | bytes) -> EconomicReading:
    """
    Parse collaborator text into an EconomicReading.
    Reads current.temperature_2m / current.precipitation, or top-level temperature / precipitation.
    Raises MalformedPayload when either value is missing.
    """
    try:
        payload = json.loads(text)
    except (TypeError, ValueError) as e:
        raise MalformedPayload(f"Economic payload is not JSON: {e}") from e
    if not isinstance(payload, dict):
        raise MalformedPayload("Economic payload is not an object")

    current = payload.get("current") if isinstance(payload.get("current"), dict) else {}
    temperature = _number(current.get("temperature_2m"), payload.get("temperature"))
    precipitation = _number(current.get("precipitation"), payload.get("precipitation"))
    if temperature is None or precipitation is None:
        raise MalformedPayload(
            f"Economic payload missing temperature/precipitation: keys={sorted(payload)[:10]}"
        )

    return EconomicReading(
        score=economic_score(temperature, precipitation),
        temperature=temperature,
        precipitation=precipitation,
    )
