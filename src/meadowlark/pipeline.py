"""Pipeline orchestration: request → parse → normalize → enrich, with fallback synthesis."""

import itertools
import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from meadowlark.connectors.base import BaseGenerator
from meadowlark.connectors.llm import build_generation_request
from meadowlark.connectors.registry import ConnectorRegistry
from meadowlark.errors import EnvelopeExhausted, TransportError, ValidationFailure
from meadowlark.fallback import synthesize
from meadowlark.models.opportunity import EnrichedOpportunity, PipelineResult
from meadowlark.models.preferences import InvestmentPreferences
from meadowlark.normalize import normalize_candidate
from meadowlark.parsing import parse_envelope
from meadowlark.scoring import ScoreEnricher
from meadowlark.validation import validate_candidates

logger = logging.getLogger(__name__)

PREVIEW_CHARS = 500


class PipelineState(str, Enum):
    IDLE = "IDLE"
    REQUESTING = "REQUESTING"
    PARSING = "PARSING"
    NORMALIZING = "NORMALIZING"
    ENRICHING = "ENRICHING"
    SUCCEEDED = "SUCCEEDED"
    FALLEN_BACK = "FALLEN_BACK"


ALLOWED_TRANSITIONS: dict[PipelineState, frozenset[PipelineState]] = {
    PipelineState.IDLE: frozenset({PipelineState.REQUESTING}),
    PipelineState.REQUESTING: frozenset({PipelineState.PARSING, PipelineState.FALLEN_BACK}),
    PipelineState.PARSING: frozenset({PipelineState.NORMALIZING, PipelineState.FALLEN_BACK}),
    PipelineState.NORMALIZING: frozenset({PipelineState.ENRICHING, PipelineState.FALLEN_BACK}),
    PipelineState.ENRICHING: frozenset({PipelineState.SUCCEEDED}),
    PipelineState.SUCCEEDED: frozenset(),
    PipelineState.FALLEN_BACK: frozenset(),
}


@dataclass
class PipelineRun:
    """State of a single ingestion attempt."""

    run_id: int
    state: PipelineState = PipelineState.IDLE
    history: list[PipelineState] = field(default_factory=lambda: [PipelineState.IDLE])

    def advance(self, new_state: PipelineState) -> None:
        if new_state not in ALLOWED_TRANSITIONS[self.state]:
            raise RuntimeError(
                f"Illegal pipeline transition {self.state.value} -> {new_state.value} (run {self.run_id})"
            )
        logger.info("Run %d: %s -> %s", self.run_id, self.state.value, new_state.value)
        self.state = new_state
        self.history.append(new_state)


class Orchestrator:
    """
    Drives one ingestion attempt at a time through the pipeline stages.

    Starting a new run (or calling reset) supersedes any run still in flight:
    the superseded run's call returns None and never replaces `result`.
    Nothing raised by the generator, parser or validator escapes `run`; those
    failures end in FALLEN_BACK with synthesized opportunities.
    """

    def __init__(self, generator: Optional[BaseGenerator], enricher: ScoreEnricher):
        self._generator = generator
        self._enricher = enricher
        self._run_ids = itertools.count(1)
        self._current = PipelineRun(run_id=0)
        self._result: Optional[PipelineResult] = None

    @property
    def state(self) -> PipelineState:
        return self._current.state

    @property
    def run_id(self) -> int:
        return self._current.run_id

    @property
    def history(self) -> list[PipelineState]:
        return list(self._current.history)

    @property
    def result(self) -> Optional[PipelineResult]:
        """Latest result of a run that was not superseded."""
        return self._result

    def reset(self) -> None:
        """Return to IDLE and clear the result; any in-flight run is discarded."""
        self._current = PipelineRun(run_id=next(self._run_ids))
        self._result = None

    def _begin(self) -> PipelineRun:
        self.reset()
        run = self._current
        run.advance(PipelineState.REQUESTING)
        return run

    def _is_current(self, run: PipelineRun) -> bool:
        if run is self._current:
            return True
        logger.info("Run %d superseded by run %d, discarding its result", run.run_id, self._current.run_id)
        return False

    async def run(self, preferences: InvestmentPreferences) -> Optional[PipelineResult]:
        """
        Request candidates from the generator and process them.
        Returns None when the run was superseded before it finished.
        """
        run = self._begin()
        try:
            if self._generator is None:
                raise TransportError(
                    "No generation provider configured (set MEADOWLARK_LLM_PROVIDER)",
                    reason="no_provider",
                )
            text = await self._generator.generate(build_generation_request(preferences))
        except Exception as e:
            if not self._is_current(run):
                return None
            logger.warning("Candidate generation failed: %s", e)
            return self._fall_back(run, preferences, e)
        if not self._is_current(run):
            return None
        return await self._process(run, text, preferences)

    async def run_from_text(self, text: str, preferences: InvestmentPreferences) -> Optional[PipelineResult]:
        """Process an already-obtained generation response."""
        run = self._begin()
        return await self._process(run, text, preferences)

    async def _process(
        self,
        run: PipelineRun,
        text: str,
        preferences: InvestmentPreferences,
    ) -> Optional[PipelineResult]:
        run.advance(PipelineState.PARSING)
        logger.debug("Response preview: %s", text[:PREVIEW_CHARS] if isinstance(text, str) else text)
        try:
            raws = parse_envelope(text)
        except EnvelopeExhausted as e:
            logger.warning("Could not parse generation response: %s", e)
            return self._fall_back(run, preferences, e)
        logger.info("Run %d: %d candidate records extracted", run.run_id, len(raws))

        run.advance(PipelineState.NORMALIZING)
        try:
            collection = validate_candidates(normalize_candidate(raw) for raw in raws)
        except ValidationFailure as e:
            logger.warning("Candidates failed validation: %s", e)
            return self._fall_back(run, preferences, e)

        run.advance(PipelineState.ENRICHING)
        enriched = await self._enricher.enrich(collection, preferences)
        if not self._is_current(run):
            return None
        run.advance(PipelineState.SUCCEEDED)
        return self._finish(run, enriched, used_fallback=False, error_detail=None)

    def _fall_back(
        self,
        run: PipelineRun,
        preferences: InvestmentPreferences,
        error: Exception,
    ) -> PipelineResult:
        run.advance(PipelineState.FALLEN_BACK)
        logger.warning("Run %d: using synthesized opportunities for region %r", run.run_id, preferences.region)
        return self._finish(run, synthesize(preferences), used_fallback=True, error_detail=str(error))

    def _finish(
        self,
        run: PipelineRun,
        opportunities: list[EnrichedOpportunity],
        *,
        used_fallback: bool,
        error_detail: Optional[str],
    ) -> PipelineResult:
        result = PipelineResult(
            opportunities=opportunities,
            used_fallback=used_fallback,
            error_detail=error_detail,
            state=run.state.value,
            run_id=run.run_id,
        )
        self._result = result
        return result


def build_orchestrator(
    provider: Optional[str] = None,
    *,
    rng: Optional[random.Random] = None,
) -> Orchestrator:
    """
    Build an Orchestrator from the environment (see ConnectorRegistry).
    With no provider configured, runs fall back with an explanatory error_detail.
    """
    generator = ConnectorRegistry.get_generator(provider)
    if generator is None:
        logger.warning("MEADOWLARK_LLM_PROVIDER not set; runs will use synthesized opportunities")
    enricher = ScoreEnricher(
        ConnectorRegistry.conservation_source(),
        ConnectorRegistry.economic_source(),
        rng=rng,
    )
    return Orchestrator(generator, enricher)
