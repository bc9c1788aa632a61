"""Tests for ScoreEnricher: concurrency, ordering and per-lookup failure isolation."""

import asyncio

import pytest

from meadowlark.connectors.base import BaseScoreSource
from meadowlark.errors import MalformedPayload
from meadowlark.models.opportunity import ValidatedCollection
from meadowlark.normalize import normalize_candidate
from meadowlark.scoring import ScoreEnricher


def _collection(n: int) -> ValidatedCollection:
    return ValidatedCollection(opportunities=[
        normalize_candidate({
            "title": f"Project {i}",
            "url": f"https://p{i}.org",
            "location": f"Site {i}",
            "registry": "Verra" if i % 2 else "",
        })
        for i in range(1, n + 1)
    ])


class GatedSource(BaseScoreSource):
    """Blocks every fetch until `expected` fetches are in flight at once."""

    source_id = "gated"

    def __init__(self, expected: int, payload: str):
        super().__init__()
        self.expected = expected
        self.payload = payload
        self.in_flight = 0
        self.released = asyncio.Event()

    async def fetch(self, location: str) -> str:
        self.in_flight += 1
        if self.in_flight >= self.expected:
            self.released.set()
        await self.released.wait()
        return self.payload


class TestScoreEnricher:
    """Tests for ScoreEnricher.enrich."""

    @pytest.mark.asyncio
    async def test_live_scores(self, live_sources, preferences, fixed_random) -> None:
        """Successful lookups set scores, species count and climate stability."""
        enricher = ScoreEnricher(*live_sources, rng=fixed_random(0.5))
        enriched = await enricher.enrich(_collection(2), preferences)
        first = enriched[0]
        assert first.conservation_score == 80
        assert first.economic_score == 100
        assert first.species_count == 200
        assert first.climate_stability == 1.0
        assert first.conservation_source == "gbif"
        assert first.economic_source == "open-meteo"

    @pytest.mark.asyncio
    async def test_order_and_ids_preserved(self, live_sources, preferences) -> None:
        enricher = ScoreEnricher(*live_sources)
        enriched = await enricher.enrich(_collection(5), preferences)
        assert [o.title for o in enriched] == [f"Project {i}" for i in range(1, 6)]
        assert [o.id for o in enriched] == [f"ai-{i}" for i in range(1, 6)]

    @pytest.mark.asyncio
    async def test_every_record_looked_up_twice(self, live_sources, preferences) -> None:
        conservation, economic = live_sources
        await ScoreEnricher(conservation, economic).enrich(_collection(3), preferences)
        assert sorted(conservation.calls) == ["Site 1", "Site 2", "Site 3"]
        assert sorted(economic.calls) == ["Site 1", "Site 2", "Site 3"]

    @pytest.mark.asyncio
    async def test_both_lookups_failing_keeps_record(self, failing_sources, preferences) -> None:
        """Failed lookups fall back to baseline scores in [0, 100]; the record is kept."""
        enricher = ScoreEnricher(*failing_sources)
        enriched = await enricher.enrich(_collection(3), preferences)
        assert len(enriched) == 3
        for opp in enriched:
            assert 0 <= opp.conservation_score <= 100
            assert 0 <= opp.economic_score <= 100
            assert opp.conservation_source == "baseline"
            assert opp.economic_source == "baseline"
            assert opp.species_count == 0

    @pytest.mark.asyncio
    async def test_failure_isolated_per_lookup(
        self, preferences, fake_score_source, open_meteo_payload, fixed_random
    ) -> None:
        """A failing conservation lookup does not affect the economic lookup."""
        conservation = fake_score_source(error=MalformedPayload("no count"))
        economic = fake_score_source(open_meteo_payload)
        enriched = await ScoreEnricher(conservation, economic, rng=fixed_random(0.5)).enrich(
            _collection(2), preferences
        )
        assert enriched[0].conservation_source == "baseline"
        assert enriched[0].conservation_score == 80
        assert enriched[0].economic_source == "open-meteo"
        assert enriched[0].economic_score == 100

    @pytest.mark.asyncio
    async def test_unexpected_payload_uses_baseline(self, preferences, fake_score_source) -> None:
        """A payload that parses but lacks the fields behaves like a failed lookup."""
        conservation = fake_score_source('{"unexpected": true}')
        economic = fake_score_source("<html>error</html>")
        enriched = await ScoreEnricher(conservation, economic).enrich(_collection(2), preferences)
        assert {o.conservation_source for o in enriched} == {"baseline"}
        assert {o.economic_source for o in enriched} == {"baseline"}

    @pytest.mark.asyncio
    async def test_lookups_run_concurrently(self, preferences, gbif_payload, open_meteo_payload) -> None:
        """All lookups for all records are in flight together."""
        records = 3
        conservation = GatedSource(records, gbif_payload)
        economic = GatedSource(records, open_meteo_payload)
        enricher = ScoreEnricher(conservation, economic)
        enriched = await asyncio.wait_for(enricher.enrich(_collection(records), preferences), timeout=2)
        assert len(enriched) == records

    @pytest.mark.asyncio
    async def test_canonical_fields_carried_over(self, live_sources, preferences) -> None:
        enriched = await ScoreEnricher(*live_sources).enrich(_collection(2), preferences)
        assert enriched[0].url == "https://p1.org"
        assert enriched[0].verified is True
        assert enriched[1].verified is False
        assert enriched[0].highlights[-1] == "Verified by independent auditors"
        assert enriched[0].sdg_goals == [13, 15]
