"""GBIF occurrence search as the conservation-score collaborator."""

import logging
import os
from typing import Optional

import httpx

from meadowlark.connectors.base import BaseScoreSource

logger = logging.getLogger(__name__)


class GbifConservationSource(BaseScoreSource):
    """
    Counts recorded occurrences matching a location via the GBIF occurrence API.
    limit=0 returns only the total `count`; the iucnRedListCategory facet carries
    threatened-species counts.
    """

    source_id = "gbif"

    BASE_URL = "https://api.gbif.org/v1"
    SEARCH_PATH = "/occurrence/search"

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        super().__init__(client=client, timeout=timeout)
        base_url = base_url or os.environ.get("MEADOWLARK_GBIF_URL") or self.BASE_URL
        self._base_url = base_url.rstrip("/")

    async def fetch(self, location: str) -> str:
        """Return the occurrence-search JSON text for location."""
        logger.info("Fetching GBIF occurrence data for %r", location)
        params = {"q": location, "limit": 0, "facet": "iucnRedListCategory"}
        response = await self._get(self._base_url + self.SEARCH_PATH, params)
        return response.text
