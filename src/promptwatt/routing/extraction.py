"""Pull a JSON object out of free-form model output.

Models asked for "raw JSON only" still wrap answers in prose or
markdown fences. Extraction runs three stages in order and stops at
the first one that yields a JSON object:

1. ``parse_direct``  - the whole reply is JSON
2. ``parse_fenced``  - a ```` ```json {...} ``` ```` block
3. ``parse_braces``  - the first ``{...}`` span anywhere in the text

Each stage returns None when it does not apply; ``extract_json``
raises ExtractionError when none do. There is no default.
"""

import json
import re
from typing import Any

FENCED_BLOCK = re.compile(r"```(?:[\w+-]+)?\s*(\{[\s\S]*?\})\s*```")


class ExtractionError(ValueError):
    """No JSON object could be recovered from the text."""

    def __init__(self, message: str, fragment: str = ""):
        super().__init__(message)
        self.fragment = fragment


def _loads_object(candidate: str) -> dict[str, Any] | None:
    try:
        value = json.loads(candidate)
    except (TypeError, ValueError):
        return None
    return value if isinstance(value, dict) else None


def parse_direct(text: str) -> dict[str, Any] | None:
    """Stage 1: the text is itself a JSON object."""
    return _loads_object(text.strip())


def parse_fenced(text: str) -> dict[str, Any] | None:
    """Stage 2: a fenced code block (optionally tagged) holding an object."""
    match = FENCED_BLOCK.search(text)
    if not match:
        return None
    return _loads_object(match.group(1))


def parse_braces(text: str) -> dict[str, Any] | None:
    """Stage 3: the first brace-delimited span.

    Tries the shortest span first, then widens to later closing braces
    so nested objects still parse.
    """
    start = text.find("{")
    if start < 0:
        return None
    for end in range(start + 1, len(text)):
        if text[end] != "}":
            continue
        obj = _loads_object(text[start:end + 1])
        if obj is not None:
            return obj
    return None


STAGES = (parse_direct, parse_fenced, parse_braces)


def extract_json(text: str) -> dict[str, Any]:
    """Run the stages in order and return the first object found.

    Raises:
        ExtractionError: if no stage yields a JSON object.
    """
    if not text or not text.strip():
        raise ExtractionError("Empty response", fragment="")

    for stage in STAGES:
        result = stage(text)
        if result is not None:
            return result

    fragment = text.strip()[:200]
    if "{" in text:
        raise ExtractionError("Failed to parse JSON from response", fragment=fragment)
    raise ExtractionError("No valid JSON found in response", fragment=fragment)
