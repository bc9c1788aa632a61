"""Pull a JSON value out of free-form model output (markdown fences, prose wrappers, stray text)."""

import json
import logging
import re
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

# Fenced blocks whose interior starts with { or [; tagged json first, then untagged.
_FENCE_PATTERNS = (
    re.compile(r"```json\s*([\[{].*?[\]}])\s*```", re.IGNORECASE | re.DOTALL),
    re.compile(r"```\s*([\[{].*?[\]}])\s*```", re.DOTALL),
)

_PAIRS = {"{": "}", "[": "]"}

Predicate = Callable[[Any], bool]


def _loads(text: str) -> tuple[bool, Any]:
    """json.loads that reports failure instead of raising. Returns (ok, value)."""
    try:
        return True, json.loads(text)
    except (ValueError, RecursionError):
        return False, None


def _resolve_from(text: str, start: int, ends: dict[int, int]) -> None:
    """
    Scan from the opener at text[start] until it closes, recording in ends
    where every opener met along the way closes (-1 if unclosed or mismatched).
    String-aware: brackets inside JSON string literals are ignored.
    """
    stack: list[int] = []
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch in _PAIRS:
            stack.append(i)
        elif ch in "}]":
            opened = stack.pop()
            ends[opened] = i + 1 if _PAIRS[text[opened]] == ch else -1
            if not stack:
                return
    for opened in stack:
        ends[opened] = -1


def _balanced_spans(text: str) -> list[tuple[int, int]]:
    """
    (start, end) of every balanced value in text, ordered by start.
    An opener already resolved by an earlier scan is not scanned again, so
    runs of unclosed openers cost one pass rather than one pass each.
    """
    ends: dict[int, int] = {}
    for start, ch in enumerate(text):
        if ch in _PAIRS and start not in ends:
            _resolve_from(text, start, ends)
    return sorted((start, end) for start, end in ends.items() if end != -1)


def _object_with_key(key: str) -> Predicate:
    return lambda value: isinstance(value, dict) and key in value


def _array_of_objects_with_key(key: str) -> Predicate:
    return lambda value: isinstance(value, list) and any(
        isinstance(item, dict) and key in item for item in value
    )


def _anything(value: Any) -> bool:
    return True


# Ordered: envelopes with recognizable keys first, then any object, then any array.
_HEURISTICS: tuple[tuple[str, str, Predicate], ...] = (
    ("opportunities object", "{", _object_with_key("opportunities")),
    ("array with title", "[", _array_of_objects_with_key("title")),
    ("array with name", "[", _array_of_objects_with_key("name")),
    ("array with url", "[", _array_of_objects_with_key("url")),
    ("first object", "{", _anything),
    ("first array", "[", _anything),
)


def _from_fence(text: str) -> tuple[bool, Any]:
    for pattern in _FENCE_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue
        ok, value = _loads(match.group(1))
        if ok:
            return True, value
        logger.debug("Fenced block did not parse as JSON")
    return False, None


def _from_brackets(text: str) -> tuple[bool, Any]:
    spans = _balanced_spans(text)
    parsed: dict[int, tuple[bool, Any]] = {}
    for label, opener, predicate in _HEURISTICS:
        for start, end in spans:
            if text[start] != opener:
                continue
            if start not in parsed:
                parsed[start] = _loads(text[start:end])
            ok, value = parsed[start]
            if ok and predicate(value):
                logger.debug("Extracted JSON via heuristic: %s", label)
                return True, value
    return False, None


def _from_cleanup(text: str) -> tuple[bool, Any]:
    starts = [i for i in (text.find("{"), text.find("[")) if i != -1]
    if not starts:
        return False, None
    end = max(text.rfind("}"), text.rfind("]")) + 1
    cleaned = text[min(starts):end]
    cleaned = cleaned.replace("\r", "").replace("\n", " ").strip()
    if not cleaned.startswith(("{", "[")):
        return False, None
    return _loads(cleaned)


def extract_json(text: str) -> Optional[Any]:
    """
    Extract a JSON value from arbitrary text. Strategies, in order:
    1. First fenced code block (```json, then untagged ```)
    2. Balanced-bracket scan, preferring recognizable envelopes/records
    3. Trim to the outermost brackets, collapse line breaks, parse
    Returns None when nothing parses. Never raises.
    """
    if not isinstance(text, str) or not text.strip():
        return None
    for strategy in (_from_fence, _from_brackets, _from_cleanup):
        ok, value = strategy(text)
        if ok:
            return value
    return None


def load_json_text(text: str) -> Optional[Any]:
    """Parse text as JSON directly, falling back to extract_json for wrapped output."""
    if not isinstance(text, str):
        return None
    ok, value = _loads(text.strip())
    if ok:
        return value
    return extract_json(text)
