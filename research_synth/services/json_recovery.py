from __future__ import annotations

import json
import re
from collections.abc import Iterator
from typing import Any, Final

from research_synth.core.exceptions import UnparseableResponse

RAW_PREVIEW_CHARS: Final[int] = 500

_FENCED_BLOCK_RE = re.compile(r"```(?:json)?\s*([\s\S]+?)```", re.IGNORECASE)


def _candidates(text: str) -> Iterator[str]:
    # Whole string first
    yield text

    fenced = _FENCED_BLOCK_RE.search(text)
    if fenced:
        yield fenced.group(1)

    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end > start:
        yield text[start : end + 1]


def recover_json_object(raw: str) -> dict[str, Any]:
    """
    Pull a JSON object out of free-form model output.

    Tries, in order: the whole string, the first fenced code block, and the
    span from the first '{' to the last '}'. The first candidate that parses
    to a JSON object wins.
    """
    text = raw or ""

    for candidate in _candidates(text):
        try:
            parsed = json.loads(candidate)
        except ValueError:
            continue
        if isinstance(parsed, dict):
            return parsed

    raise UnparseableResponse(
        "Could not extract JSON from LLM response",
        raw=text[:RAW_PREVIEW_CHARS],
    )
