"""Concurrent score enrichment with per-lookup failure isolation."""

import asyncio
import logging
import random
from typing import Optional

from meadowlark.connectors.base import BaseScoreSource
from meadowlark.models.opportunity import (
    CanonicalOpportunity,
    EnrichedOpportunity,
    ValidatedCollection,
)
from meadowlark.models.preferences import InvestmentPreferences

from .conservation import ConservationReading, parse_conservation_payload
from .economic import EconomicReading, parse_economic_payload
from .metrics import baseline_scores, build_display_metrics

logger = logging.getLogger(__name__)


class ScoreEnricher:
    """
    Attaches a conservation score and an economic score to every validated record.
    All lookups (2 per record) run concurrently; each one that fails falls back
    to a preference-derived baseline without affecting any other lookup.
    """

    def __init__(
        self,
        conservation_source: BaseScoreSource,
        economic_source: BaseScoreSource,
        *,
        rng: Optional[random.Random] = None,
    ):
        self._conservation = conservation_source
        self._economic = economic_source
        self._rng = rng or random.Random()

    async def enrich(
        self,
        collection: ValidatedCollection,
        preferences: InvestmentPreferences,
    ) -> list[EnrichedOpportunity]:
        """Enrich all records; waits for every lookup and returns records in input order."""
        tasks = [
            self._enrich_one(index, opp, preferences)
            for index, opp in enumerate(collection.opportunities)
        ]
        return list(await asyncio.gather(*tasks))

    async def _lookup_conservation(self, location: str) -> Optional[ConservationReading]:
        try:
            text = await self._conservation.fetch(location)
            return parse_conservation_payload(text)
        except Exception as e:
            logger.warning("Conservation lookup failed for %r, using baseline: %s", location, e)
            return None

    async def _lookup_economic(self, location: str) -> Optional[EconomicReading]:
        try:
            text = await self._economic.fetch(location)
            return parse_economic_payload(text)
        except Exception as e:
            logger.warning("Economic lookup failed for %r, using baseline: %s", location, e)
            return None

    async def _enrich_one(
        self,
        index: int,
        opp: CanonicalOpportunity,
        preferences: InvestmentPreferences,
    ) -> EnrichedOpportunity:
        conservation, economic = await asyncio.gather(
            self._lookup_conservation(opp.location),
            self._lookup_economic(opp.location),
        )
        conservation_score, economic_score = baseline_scores(preferences, self._rng)

        species_count = 0
        conservation_source = "baseline"
        if conservation is not None:
            conservation_score = conservation.score
            species_count = conservation.species_count
            conservation_source = conservation.source

        economic_source = "baseline"
        if economic is not None:
            economic_score = economic.score
            economic_source = economic.source

        climate_stability = economic_score / 100
        logger.info(
            "Opportunity %d %r: conservation=%d (%s), economic=%d (%s)",
            index + 1, opp.title, conservation_score, conservation_source,
            economic_score, economic_source,
        )
        return EnrichedOpportunity(
            **opp.model_dump(),
            id=f"ai-{index + 1}",
            conservation_score=conservation_score,
            economic_score=economic_score,
            species_count=species_count,
            climate_stability=climate_stability,
            conservation_source=conservation_source,
            economic_source=economic_source,
            **build_display_metrics(
                preferences,
                species_count=species_count,
                climate_stability=climate_stability,
                verified=opp.verified,
                rng=self._rng,
            ),
        )
