"""Abstract base classes for remote collaborators."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import httpx

from meadowlark.errors import MalformedPayload, TransportError


@dataclass(frozen=True)
class GenerationRequest:
    """Structured prompt payload for the candidate-generation collaborator."""

    prompt: str
    max_tokens: int = 4096
    temperature: float = 0.7


class BaseGenerator(ABC):
    """
    Candidate-generation collaborator. One call per request, returning the raw
    response text (whatever envelope the provider wraps it in).
    """

    provider_id: str = ""

    @abstractmethod
    async def generate(self, request: GenerationRequest) -> str:
        """
        Send the prompt and return the response body as text.
        Raises TransportError when the provider cannot be reached or errors.
        """
        pass


class BaseScoreSource(ABC):
    """
    Scoring collaborator keyed by a location string. Returns text; the caller
    derives the score from it.
    """

    source_id: str = ""
    DEFAULT_TIMEOUT = 30.0

    def __init__(self, client: Optional[httpx.AsyncClient] = None, timeout: Optional[float] = None):
        self._client = client
        self._timeout = timeout if timeout is not None else self.DEFAULT_TIMEOUT

    @abstractmethod
    async def fetch(self, location: str) -> str:
        """
        Look up the location and return the payload text.
        Raises TransportError on network/HTTP failure, MalformedPayload on unusable answers.
        """
        pass

    async def _get(self, url: str, params: dict) -> httpx.Response:
        """Single GET attempt (no retries). HTTP failures become TransportError."""
        try:
            if self._client is not None:
                response = await self._client.get(url, params=params)
                response.raise_for_status()
                return response
            async with httpx.AsyncClient(timeout=self._timeout, follow_redirects=True) as client:
                response = await client.get(url, params=params)
                response.raise_for_status()
                return response
        except httpx.HTTPStatusError as e:
            raise TransportError(f"{self.source_id}: HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise TransportError(f"{self.source_id}: {e}") from e

    @staticmethod
    def _json(response: httpx.Response, what: str) -> dict:
        try:
            data = response.json()
        except ValueError as e:
            raise MalformedPayload(f"{what} returned non-JSON body") from e
        if not isinstance(data, dict):
            raise MalformedPayload(f"{what} returned {type(data).__name__}, expected object")
        return data
