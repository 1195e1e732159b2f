"""
Loading CV payloads from untrusted extractor output.

The parsing step is an AI model. Its reply is meant to be a CV object, or the
``{"cvData": {...}}`` envelope the parse endpoint returns, but in practice it
may be fenced in markdown, preceded by a sentence of prose, or carry single
quotes and trailing commas. json-repair handles the malformed cases.
"""

import json
import re
from typing import Any, Dict

from json_repair import repair_json

ENVELOPE_KEY = "cvData"

_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL | re.IGNORECASE)


def load_cv_payload(text: str) -> Dict[str, Any]:
    """
    Return the CV mapping contained in ``text``.

    Raises:
        ValueError: If the text holds no JSON object, even after repair

    Example:
        >>> load_cv_payload('```json\\n{"cvData": {"summary": "Engineer"}}\\n```')
        {'summary': 'Engineer'}
    """
    if not text or not text.strip():
        raise ValueError("Empty input: no CV payload to parse")

    candidate = _object_span(_unfence(text))
    payload = _decode(candidate)

    envelope = payload.get(ENVELOPE_KEY)
    if isinstance(envelope, dict):
        return envelope
    return payload


def _unfence(text: str) -> str:
    """Body of the first markdown code block, or the stripped text if none."""
    match = _FENCE_RE.search(text)
    if match:
        return match.group(1)
    return text.strip()


def _object_span(text: str) -> str:
    """Slice from the first ``{`` to the last ``}``, dropping prose around it."""
    start, end = text.find("{"), text.rfind("}")
    if start == -1 or end < start:
        raise ValueError(f"No JSON object found in text: {text[:200]}")
    return text[start:end + 1]


def _decode(candidate: str) -> Dict[str, Any]:
    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError:
        parsed = repair_json(candidate, return_objects=True)

    if isinstance(parsed, list) and len(parsed) == 1:
        parsed = parsed[0]
    if not isinstance(parsed, dict):
        raise ValueError(
            f"Could not recover a CV object (got {type(parsed).__name__}) "
            f"from: {candidate[:200]}"
        )
    return parsed
