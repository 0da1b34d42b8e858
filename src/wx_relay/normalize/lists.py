"""List-mode normalization: free text -> exactly ``count`` strings."""
from __future__ import annotations
import json
import re
from typing import Sequence

from wx_relay.normalize.json_repair import repair_array, stringify

_LIST_MARKER = re.compile(r"^[-*\d.)\s]+")
_DOUBLE_QUOTES = re.compile(r'^"|"$')
_SINGLE_QUOTES = re.compile(r"^'|'$")


def _unquote(item: str) -> str:
    return _SINGLE_QUOTES.sub("", _DOUBLE_QUOTES.sub("", item))


def _looks_like_array(text: str) -> bool:
    return text.startswith("[") and "]" in text


def normalize_to_list(text: str | None) -> list[str]:
    """
    Parse model output into a list of non-empty strings.

    Tries, in order: a (quote-repaired) JSON array, a single comma-separated
    line, then one item per line with list markers stripped.

    Args:
        text: Raw model text, possibly empty.
    """
    if not text:
        return []
    t = text.strip()

    if _looks_like_array(t):
        try:
            arr = json.loads(repair_array(t))
        except ValueError:
            arr = None
        if isinstance(arr, list):
            items = (stringify(x).strip() for x in arr)
            return [x for x in items if x]

    if "," in t and "\n" not in t:
        items = (_unquote(s.strip()) for s in t.split(","))
        return [x for x in items if x]

    items = (_unquote(_LIST_MARKER.sub("", line).strip()) for line in t.split("\n"))
    return [x for x in items if x]


def resize_list(values: Sequence[str], count: int) -> list[str]:
    """Cycle or truncate ``values`` to exactly ``count`` entries."""
    if count <= 0:
        return []
    if not values:
        return [""] * count
    return [values[i % len(values)] for i in range(count)]


def normalize_list(text: str | None, count: int) -> list[str]:
    return resize_list(normalize_to_list(text), count)
