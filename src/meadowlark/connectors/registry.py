"""Registry for discovering and instantiating collaborators."""

import os
from typing import Optional, Type

from meadowlark.connectors.base import BaseGenerator, BaseScoreSource
from meadowlark.connectors.gbif import GbifConservationSource
from meadowlark.connectors.llm import OllamaGenerator, OpenAIGenerator
from meadowlark.connectors.openmeteo import OpenMeteoEconomicSource


def _timeout_from_env() -> Optional[float]:
    raw = os.environ.get("MEADOWLARK_HTTP_TIMEOUT")
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"MEADOWLARK_HTTP_TIMEOUT must be a number of seconds, got {raw!r}")


class ConnectorRegistry:
    """Discovers and provides generation providers and score sources."""

    _generators: dict[str, Type[BaseGenerator]] = {
        "ollama": OllamaGenerator,
        "openai": OpenAIGenerator,
    }

    @classmethod
    def get_generator(cls, provider: Optional[str] = None, **kwargs) -> Optional[BaseGenerator]:
        """
        Get a generator for provider (default: MEADOWLARK_LLM_PROVIDER env).
        Returns None when no provider is configured. kwargs passed to the generator __init__.
        """
        provider = (provider or os.environ.get("MEADOWLARK_LLM_PROVIDER") or "").lower()
        if not provider:
            return None
        generator_cls = cls._generators.get(provider)
        if not generator_cls:
            raise ValueError(f"Unknown provider: {provider}. Available: {list(cls._generators.keys())}")
        return generator_cls(**kwargs)

    @classmethod
    def conservation_source(cls, **kwargs) -> BaseScoreSource:
        kwargs.setdefault("timeout", _timeout_from_env())
        return GbifConservationSource(**kwargs)

    @classmethod
    def economic_source(cls, **kwargs) -> BaseScoreSource:
        kwargs.setdefault("timeout", _timeout_from_env())
        return OpenMeteoEconomicSource(**kwargs)

    @classmethod
    def available_providers(cls) -> list[str]:
        """Return list of available generation provider identifiers."""
        return list(cls._generators.keys())
