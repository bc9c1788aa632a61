"""Error taxonomy for the ingestion pipeline."""

from typing import Optional


class PipelineError(Exception):
    """Base class for recoverable pipeline failures. `reason` is a short machine-readable code."""

    reason: str = "pipeline_error"

    def __init__(self, message: str, *, reason: Optional[str] = None):
        super().__init__(message)
        if reason is not None:
            self.reason = reason


class TransportError(PipelineError):
    """A remote collaborator (generation or scoring) could not be reached or answered with an error."""

    reason = "transport_error"


class MalformedPayload(PipelineError):
    """A collaborator answered, but the payload does not have the expected shape."""

    reason = "malformed_payload"


class EnvelopeExhausted(PipelineError):
    """No structured value could be extracted from the generation response."""

    reason = "envelope_exhausted"


class ValidationFailure(PipelineError):
    """The normalized candidates do not form an acceptable collection."""

    reason = "validation_failure"


class InsufficientOpportunities(ValidationFailure):
    """Fewer than the minimum number of well-formed candidates survived normalization."""

    reason = "insufficient_opportunities"

    def __init__(self, found: int, required: int):
        super().__init__(
            f"AI response contained {found} valid opportunities "
            f"with title, URL and location; need at least {required}"
        )
        self.found = found
        self.required = required
