"""Strict extraction of the candidate segment from free-form model output."""

from __future__ import annotations

import json
from typing import Any

from pydantic import ValidationError

from segment_sql.errors import UpstreamParseError
from segment_sql.models.generation import CandidateSegment

_DECODER = json.JSONDecoder()


def extract_json_object(text: str) -> dict[str, Any]:
    """Decode the first top-level JSON object embedded in ``text``.

    The object may be surrounded by commentary or markdown code fences.
    Raises UpstreamParseError when no object starts anywhere in the text, or
    when the object that starts at the first ``{`` is not valid JSON.
    """
    start = text.find("{")
    if start == -1:
        raise UpstreamParseError(
            "Failed to extract JSON from generation response: no JSON object found."
        )

    try:
        payload, _end = _DECODER.raw_decode(text, start)
    except json.JSONDecodeError as exc:
        raise UpstreamParseError(
            f"Generation response contained malformed JSON: {exc}"
        ) from exc
    return payload


def parse_candidate(text: str) -> CandidateSegment:
    payload = extract_json_object(text)
    try:
        return CandidateSegment.model_validate(payload)
    except ValidationError as exc:
        raise UpstreamParseError(
            f"Generation response violated output contract: {exc}"
        ) from exc
