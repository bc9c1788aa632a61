"""Remote collaborators: candidate generation and score lookups."""

from meadowlark.connectors.base import BaseGenerator, BaseScoreSource, GenerationRequest
from meadowlark.connectors.registry import ConnectorRegistry

__all__ = ["BaseGenerator", "BaseScoreSource", "ConnectorRegistry", "GenerationRequest"]
