"""Open-Meteo current conditions as the economic-score collaborator.

Flow per location:
1. Geocode: GET geocoding-api.open-meteo.com/v1/search?name=<location>&count=1
2. Forecast: GET api.open-meteo.com/v1/forecast?latitude=..&longitude=..&current=temperature_2m,precipitation
Free-text locations like "Amazon Rainforest, Brazil" are geocoded by their
first comma-separated part, then by the last part if that finds nothing.
"""

import logging
import os
from typing import Optional

import httpx

from meadowlark.connectors.base import BaseScoreSource
from meadowlark.errors import MalformedPayload

logger = logging.getLogger(__name__)


class OpenMeteoEconomicSource(BaseScoreSource):
    """Current temperature and precipitation for a location."""

    source_id = "open-meteo"

    FORECAST_URL = "https://api.open-meteo.com/v1/forecast"
    GEOCODING_URL = "https://geocoding-api.open-meteo.com/v1/search"

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        forecast_url: Optional[str] = None,
        geocoding_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        super().__init__(client=client, timeout=timeout)
        self._forecast_url = (
            forecast_url or os.environ.get("MEADOWLARK_OPEN_METEO_URL") or self.FORECAST_URL
        )
        self._geocoding_url = (
            geocoding_url or os.environ.get("MEADOWLARK_GEOCODING_URL") or self.GEOCODING_URL
        )

    @staticmethod
    def _geocode_queries(location: str) -> list[str]:
        parts = [p.strip() for p in location.split(",") if p.strip()]
        queries = [parts[0]] if parts else [location.strip()]
        if len(parts) > 1 and parts[-1] not in queries:
            queries.append(parts[-1])
        return queries

    async def _geocode(self, location: str) -> tuple[float, float]:
        """Return (latitude, longitude) of the best geocoding match."""
        for query in self._geocode_queries(location):
            response = await self._get(
                self._geocoding_url,
                {"name": query, "count": 1, "language": "en", "format": "json"},
            )
            data = self._json(response, "Geocoding")
            for result in data.get("results") or []:
                lat, lon = result.get("latitude"), result.get("longitude")
                if isinstance(lat, (int, float)) and isinstance(lon, (int, float)):
                    return float(lat), float(lon)
            logger.debug("No geocoding match for %r", query)
        raise MalformedPayload(f"Could not geocode location {location!r}")

    async def fetch(self, location: str) -> str:
        """Return the forecast JSON text (with a `current` block) for location."""
        logger.info("Fetching Open-Meteo climate data for %r", location)
        latitude, longitude = await self._geocode(location)
        params = {
            "latitude": latitude,
            "longitude": longitude,
            "current": "temperature_2m,precipitation",
        }
        response = await self._get(self._forecast_url, params)
        return response.text
