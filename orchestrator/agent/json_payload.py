"""
Decode the JSON object a model was asked to reply with.

Contract: extract_json_object() returns a dict or raises PayloadParseError.
The text is trimmed and an optional ```/```json fence removed, then decoded
strictly. Prose around the object is not salvaged.
"""

import json
import re
from typing import Any

from orchestrator.core.errors import PayloadParseError

_FENCE_OPEN = re.compile(r"^```[a-zA-Z]*\s*")
_FENCE_CLOSE = re.compile(r"\s*```$")


def strip_code_fence(text: str) -> str:
    """Remove a surrounding markdown code fence (```json ... ```) and outer whitespace."""
    out = (text or "").strip()
    out = _FENCE_OPEN.sub("", out, count=1)
    out = _FENCE_CLOSE.sub("", out, count=1)
    return out.strip()


def extract_json_object(text: str) -> dict[str, Any]:
    cleaned = strip_code_fence(text)
    if not cleaned:
        raise PayloadParseError("empty model response")
    try:
        value = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise PayloadParseError(f"model response is not JSON: {cleaned[:80]!r}") from e
    if not isinstance(value, dict):
        raise PayloadParseError(f"model response is not a JSON object: {cleaned[:80]!r}")
    return value
