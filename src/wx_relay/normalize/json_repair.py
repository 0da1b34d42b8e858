"""Tolerant JSON repair for model output.

Models asked for JSON routinely return Python-style literals, unquoted keys,
trailing commas or a markdown code fence around the payload. The helpers here
rewrite those mistakes with a fixed sequence of regular-expression passes so the
result has a chance to go through ``json.loads``.

Object repair runs, in order:

1. quote bare or single-quoted object keys (``{headers: ...}`` -> ``{"headers": ...}``)
2. convert single-quoted scalars to double-quoted ones
3. drop trailing commas before ``]`` or ``}``

Array repair (list mode) rewrites single-quoted items at list start, mid-list
and list end.

Nothing in this module raises on malformed input except :func:`loads_tolerant`,
which raises ``ValueError`` once every repair has been tried.
"""
from __future__ import annotations
import json
import re
from typing import Any

_FENCE = re.compile(r"^```[a-zA-Z]*\n|```$")

_ARRAY_START_ITEM = re.compile(r"(^\s*\[\s*)'([^']*)'")
_ARRAY_MID_ITEM = re.compile(r",\s*'([^']*)'")
_ARRAY_END_ITEM = re.compile(r"'([^']*)'\s*\]")

# A key is only rewritten when a JSON value follows it, so "a: b" inside a
# string cell is left alone.
_OBJECT_KEY = re.compile(
    r"([{,]\s*)['\"]?([A-Za-z_][\w ]*?)['\"]?\s*:(?=\s*(?:[\[{\"'\-\d]|true\b|false\b|null\b))"
)
_SINGLE_QUOTED = re.compile(r"(^|[^\\])'(.*?)'(?=\s*[,\]}])")
_TRAILING_COMMA = re.compile(r",\s*([\]}])")


def strip_code_fence(text: str) -> str:
    """Remove a leading ```lang line and a trailing ``` marker."""
    return _FENCE.sub("", text.strip()).strip()


def repair_array(text: str) -> str:
    """Turn ``['a', 'b']`` into ``["a","b"]``; double-quoted arrays pass through."""
    out = _ARRAY_START_ITEM.sub(r'["\2"', text)
    out = _ARRAY_MID_ITEM.sub(r',"\1"', out)
    return _ARRAY_END_ITEM.sub(r'"\1"]', out)


def repair_object(text: str) -> str:
    out = _OBJECT_KEY.sub(r'\1"\2":', text)
    out = _SINGLE_QUOTED.sub(r'\1"\2"', out)
    return _TRAILING_COMMA.sub(r"\1", out)


def loads_tolerant(text: str) -> Any:
    """Parse JSON, retrying once after :func:`repair_object`.

    Raises:
        ValueError: if the text does not parse even after repair.
    """
    try:
        return json.loads(text)
    except ValueError:
        pass
    return json.loads(repair_object(text))


def stringify(value: Any) -> str:
    """Render a decoded JSON value the way a JS ``String()`` call would."""
    if isinstance(value, str):
        return value
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, list):
        return ",".join("" if v is None else stringify(v) for v in value)
    if isinstance(value, dict):
        return json.dumps(value)
    return str(value)
