"""Pytest fixtures for meadowlark tests."""

import json
from typing import Callable, Optional

import pytest

from meadowlark.connectors.base import BaseGenerator, BaseScoreSource, GenerationRequest
from meadowlark.errors import TransportError
from meadowlark.models.preferences import InvestmentPreferences

GBIF_PAYLOAD = json.dumps({
    "count": 200,
    "results": [],
    "facets": [
        {
            "field": "IUCN_RED_LIST_CATEGORY",
            "counts": [{"name": "ENDANGERED", "count": 3}, {"name": "LEAST_CONCERN", "count": 150}],
        }
    ],
})
OPEN_METEO_PAYLOAD = json.dumps({"current": {"temperature_2m": 17.5, "precipitation": 60.0}})


class FixedRandom:
    """Stands in for random.Random: random() always returns the same value."""

    def __init__(self, value: float = 0.5):
        self.value = value

    def random(self) -> float:
        return self.value


class FakeGenerator(BaseGenerator):
    """Returns a canned response (or raises a canned error) and records requests."""

    provider_id = "fake"

    def __init__(self, response: Optional[str] = None, error: Optional[Exception] = None):
        self.response = response
        self.error = error
        self.requests: list[GenerationRequest] = []

    async def generate(self, request: GenerationRequest) -> str:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.response or ""


class FakeScoreSource(BaseScoreSource):
    """Returns a fixed payload for every location (or raises) and records lookups."""

    def __init__(self, payload: Optional[str] = None, error: Optional[Exception] = None, source_id: str = "fake"):
        super().__init__()
        self.payload = payload
        self.error = error
        self.source_id = source_id
        self.calls: list[str] = []

    async def fetch(self, location: str) -> str:
        self.calls.append(location)
        if self.error is not None:
            raise self.error
        return self.payload or ""


def _record(index: int, **overrides) -> dict:
    """One well-formed generated opportunity record."""
    record = {
        "title": f"Project {index}",
        "url": f"https://project{index}.org",
        "location": f"Site {index}, Brazil",
        "description": f"Description {index}",
        "sdg_alignment": "13, 15",
        "estimated_return": "8-12%",
        "region": "South America",
        "verification_source": "Verra Registry",
    }
    record.update(overrides)
    return record


@pytest.fixture
def preferences() -> InvestmentPreferences:
    """South America, medium risk and horizon, 8% minimum return."""
    return InvestmentPreferences(
        region="south-america",
        investment_amount=100000,
        sdgs=[13, 15],
        risk_tolerance="medium",
        investment_horizon="medium",
        minimum_return=8.0,
    )


@pytest.fixture
def records() -> Callable[[int], list[dict]]:
    """Factory for n well-formed records."""
    return lambda n: [_record(i) for i in range(1, n + 1)]


@pytest.fixture
def live_sources() -> tuple[FakeScoreSource, FakeScoreSource]:
    """Conservation and economic sources that always answer."""
    return (
        FakeScoreSource(GBIF_PAYLOAD, source_id="gbif"),
        FakeScoreSource(OPEN_METEO_PAYLOAD, source_id="open-meteo"),
    )


@pytest.fixture
def failing_sources() -> tuple[FakeScoreSource, FakeScoreSource]:
    """Conservation and economic sources that always fail."""
    return (
        FakeScoreSource(error=TransportError("gbif: HTTP 503")),
        FakeScoreSource(error=TransportError("open-meteo: HTTP 503")),
    )


@pytest.fixture
def make_record() -> Callable[..., dict]:
    """Factory for one well-formed record: make_record(index, **overrides)."""
    return _record


@pytest.fixture
def gbif_payload() -> str:
    """GBIF search payload: 200 occurrences, 3 endangered (conservation score 80)."""
    return GBIF_PAYLOAD


@pytest.fixture
def open_meteo_payload() -> str:
    """Open-Meteo forecast payload scoring 100 for economics."""
    return OPEN_METEO_PAYLOAD


@pytest.fixture
def fixed_random() -> type[FixedRandom]:
    return FixedRandom


@pytest.fixture
def fake_generator() -> type[FakeGenerator]:
    return FakeGenerator


@pytest.fixture
def fake_score_source() -> type[FakeScoreSource]:
    return FakeScoreSource
