from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from research_synth.schemas.synthesis import MAX_SOURCES, MIN_CONTENT_CHARS, MIN_SOURCES

INVALID_JSON = "Request body must be valid JSON"
NOT_AN_OBJECT = "Request body must be a JSON object"

_SOURCE_FIELD_MESSAGES = {
    "type": 'sources[{i}].type must be "url" or "text"',
    "content": f"sources[{{i}}].content is required and must be at least {MIN_CONTENT_CHARS} chars",
    "label": "sources[{i}].label must be a string",
}


def _field_path(loc: Sequence[Any]) -> tuple[Any, ...]:
    # FastAPI prefixes body errors with "body"
    if loc and loc[0] == "body":
        return tuple(loc[1:])
    return tuple(loc)


def _sort_key(error: Mapping[str, Any]) -> int:
    # A bad sources list outranks anything wrong inside it
    return 0 if _field_path(error.get("loc", ())) == ("sources",) else 1


def describe_error(error: Mapping[str, Any]) -> str:
    error_type = error.get("type", "")
    path = _field_path(error.get("loc", ()))

    if error_type == "json_invalid":
        return INVALID_JSON

    if not path:
        return NOT_AN_OBJECT

    field = path[0]
    if field == "sources":
        if len(path) == 1:
            if error_type == "too_long":
                return f"Maximum {MAX_SOURCES} sources allowed per request"
            return f"sources must be an array of at least {MIN_SOURCES} items"

        index = path[1]
        if len(path) == 2:
            return f"sources[{index}] must be an object"

        template = _SOURCE_FIELD_MESSAGES.get(path[2])
        if template is not None:
            return template.format(i=index)

    if field == "topic":
        return "topic must be a string"
    if field == "depth":
        return 'depth must be "brief" or "detailed"'

    return str(error.get("msg", "Invalid request"))


def describe_request_errors(errors: Sequence[Mapping[str, Any]]) -> str:
    """
    Collapse pydantic/FastAPI validation errors into one client-facing message.

    Only the first failure is reported, in body order, and it names the
    offending source index and field the way /schema documents them.
    """
    if not errors:
        return "Invalid request"
    return describe_error(sorted(errors, key=_sort_key)[0])
