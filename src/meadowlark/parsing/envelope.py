"""Locate the list of candidate records inside whatever wrapper the generation provider returned.

Known envelopes (checked in this order):
- [ {...}, ... ]                                  plain list
- {"opportunities" | "results" | "items": [...]}  collection field
- {"body": "<json>" | {...}}                      Lambda / API gateway wrapper
- {"content": [{"type": "text", "text": ...}]}     Anthropic messages
- {"output": {"message": {"content": [...]}}}      Bedrock Converse
- {"message": {"content": "..." | [...]}}          chat message
- {"choices": [{"message": {"content": ...}}]}     OpenAI-compatible completion
- {"completion" | "outputText" | "response" | "generated_text": "..."}
- {"projects" | "investments" | "data" | "list": [{...}]}
- {...}                                           single bare record
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from meadowlark.errors import EnvelopeExhausted
from meadowlark.models.raw import RawCandidate

from .extractor import load_json_text

logger = logging.getLogger(__name__)

# Text envelopes may wrap further envelopes (body -> content -> fenced JSON); bound the recursion.
MAX_ENVELOPE_DEPTH = 4

PRIMARY_COLLECTION_FIELDS = ("opportunities", "results", "items")
SECONDARY_COLLECTION_FIELDS = ("projects", "investments", "data", "list")
TEXT_FIELDS = ("completion", "outputText", "response", "generated_text")


class EnvelopeKind(str, Enum):
    """Closed set of wrapper shapes."""

    LIST = "list"
    COLLECTION = "collection"
    BODY = "body"
    EMBEDDED_TEXT = "embedded_text"
    SINGLE_OBJECT = "single_object"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Envelope:
    """A classified root value: its kind, the part that carries the records, and where it was found."""

    kind: EnvelopeKind
    payload: Any
    source: str = ""


def _text_from_blocks(blocks: Any) -> Optional[str]:
    """First text of a content-block list ([{"type": "text", "text": "..."}])."""
    if not isinstance(blocks, list):
        return None
    for block in blocks:
        if isinstance(block, dict) and isinstance(block.get("text"), str):
            return block["text"]
        if isinstance(block, str):
            return block
    return None


def _message_text(message: Any) -> Optional[str]:
    """Text of a chat message whose content is either a string or a block list."""
    if not isinstance(message, dict):
        return None
    content = message.get("content")
    if isinstance(content, str):
        return content
    return _text_from_blocks(content)


def _choices_text(choices: Any) -> Optional[str]:
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    text = _message_text(first.get("message"))
    if text is None and isinstance(first.get("text"), str):
        text = first["text"]
    return text


def _has_records(value: Any) -> bool:
    return isinstance(value, list) and any(isinstance(item, dict) for item in value)


def classify(root: Any) -> Envelope:
    """Classify a root value into one envelope kind. Specific shapes are checked before generic ones."""
    if isinstance(root, list):
        return Envelope(EnvelopeKind.LIST, root)
    if not isinstance(root, dict):
        return Envelope(EnvelopeKind.UNKNOWN, root)

    for field in PRIMARY_COLLECTION_FIELDS:
        if isinstance(root.get(field), list):
            return Envelope(EnvelopeKind.COLLECTION, root[field], field)

    body = root.get("body")
    if isinstance(body, (str, dict, list)) and body:
        return Envelope(EnvelopeKind.BODY, body, "body")

    text = _text_from_blocks(root.get("content"))
    if text is not None:
        return Envelope(EnvelopeKind.EMBEDDED_TEXT, text, "content")

    output = root.get("output")
    if isinstance(output, dict):
        text = _message_text(output.get("message"))
        if text is not None:
            return Envelope(EnvelopeKind.EMBEDDED_TEXT, text, "output.message.content")

    text = _message_text(root.get("message"))
    if text is not None:
        return Envelope(EnvelopeKind.EMBEDDED_TEXT, text, "message.content")

    text = _choices_text(root.get("choices"))
    if text is not None:
        return Envelope(EnvelopeKind.EMBEDDED_TEXT, text, "choices")

    for field in TEXT_FIELDS:
        if isinstance(root.get(field), str):
            return Envelope(EnvelopeKind.EMBEDDED_TEXT, root[field], field)

    for field in SECONDARY_COLLECTION_FIELDS:
        if _has_records(root.get(field)):
            return Envelope(EnvelopeKind.COLLECTION, root[field], field)

    return Envelope(EnvelopeKind.SINGLE_OBJECT, root)


def _records(items: list, source: str) -> list[RawCandidate]:
    candidates = [RawCandidate(data=item, source=source) for item in items if isinstance(item, dict)]
    skipped = len(items) - len(candidates)
    if skipped:
        logger.warning("Skipped %d non-object entries in %s", skipped, source or "list")
    return candidates


def _unwrap_list(envelope: Envelope, depth: int) -> list[RawCandidate]:
    return _records(envelope.payload, envelope.source)


def _unwrap_body(envelope: Envelope, depth: int) -> list[RawCandidate]:
    if isinstance(envelope.payload, str):
        return _unwrap_text(envelope.payload, envelope.source, depth)
    return unwrap(envelope.payload, _depth=depth + 1)


def _unwrap_embedded_text(envelope: Envelope, depth: int) -> list[RawCandidate]:
    return _unwrap_text(envelope.payload, envelope.source, depth)


def _unwrap_single(envelope: Envelope, depth: int) -> list[RawCandidate]:
    logger.info("Wrapping single object as a one-element list")
    return [RawCandidate(data=envelope.payload, source=envelope.source)]


def _unwrap_unknown(envelope: Envelope, depth: int) -> list[RawCandidate]:
    logger.warning("Unknown envelope shape: %s", type(envelope.payload).__name__)
    return []


def _unwrap_text(text: str, source: str, depth: int) -> list[RawCandidate]:
    """Re-extract structure from a text field and unwrap whatever it contains."""
    root = load_json_text(text)
    if root is None:
        logger.warning("No JSON found in %s text (length %d)", source, len(text))
        return []
    return unwrap(root, _depth=depth + 1)


_HANDLERS: dict[EnvelopeKind, Callable[[Envelope, int], list[RawCandidate]]] = {
    EnvelopeKind.LIST: _unwrap_list,
    EnvelopeKind.COLLECTION: _unwrap_list,
    EnvelopeKind.BODY: _unwrap_body,
    EnvelopeKind.EMBEDDED_TEXT: _unwrap_embedded_text,
    EnvelopeKind.SINGLE_OBJECT: _unwrap_single,
    EnvelopeKind.UNKNOWN: _unwrap_unknown,
}


def unwrap(root: Any, *, _depth: int = 0) -> list[RawCandidate]:
    """
    Return the candidate records inside root, whatever envelope wraps them.
    An unrecognized shape yields an empty list, not an error.
    """
    if _depth > MAX_ENVELOPE_DEPTH:
        logger.warning("Envelope nesting deeper than %d; giving up", MAX_ENVELOPE_DEPTH)
        return []
    envelope = classify(root)
    logger.debug("Envelope at depth %d: %s (%s)", _depth, envelope.kind.value, envelope.source or "-")
    return _HANDLERS[envelope.kind](envelope, _depth)


def parse_envelope(text: str) -> list[RawCandidate]:
    """
    Load the root value from a raw generation response and unwrap it.
    Raises EnvelopeExhausted only when no structured value can be found at all.
    """
    logger.debug("Raw response (%d chars): %s", len(text or ""), (text or "")[:500])
    root = load_json_text(text)
    if root is None:
        raise EnvelopeExhausted("Response does not contain valid JSON data")
    return unwrap(root)
