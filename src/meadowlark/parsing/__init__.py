"""Response parsing: JSON extraction and envelope unwrapping."""

from .envelope import Envelope, EnvelopeKind, classify, parse_envelope, unwrap
from .extractor import extract_json, load_json_text

__all__ = [
    "Envelope",
    "EnvelopeKind",
    "classify",
    "extract_json",
    "load_json_text",
    "parse_envelope",
    "unwrap",
]
