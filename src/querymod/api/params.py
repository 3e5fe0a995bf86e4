# src/querymod/api/params.py
"""Turns a request's query string into the raw parameter map."""

import re
from typing import Any, Dict, Iterable, List, Tuple

from fastapi import Request

from ..core.errors import InvalidParameterError

MAX_DEPTH = 5

_KEY_PATTERN = re.compile(r"^([^\[\]]+)((?:\[[^\[\]]*\])*)$")
_SEGMENT_PATTERN = re.compile(r"\[([^\[\]]*)\]")


def split_key(key: str) -> List[str]:
    """
    Split a bracketed key into its path.

    `"has[comments][count]"` -> `["has", "comments", "count"]`,
    `"id[]"` -> `["id", ""]`. Keys that are not well-formed bracket
    expressions are used as-is.
    """
    match = _KEY_PATTERN.match(key)
    if not match:
        return [key]
    return [match.group(1), *_SEGMENT_PATTERN.findall(match.group(2))]


def parse_query_params(items: Iterable[Tuple[str, str]]) -> Dict[str, Any]:
    """
    Build the parameter map from `(key, value)` pairs in query-string order.

    - repeated plain keys collect into a list: `id=1&id=2`
    - `key[]` appends to a list: `id[]=1&id[]=2`
    - `key[a][b]` builds nested maps: `has[comments][count]=5`
    - numeric segments are ordinary map keys: `id[0]=1` -> `{"id": {"0": "1"}}`
    """
    params: Dict[str, Any] = {}
    for key, value in items:
        path = split_key(key)
        if len(path) > MAX_DEPTH:
            raise InvalidParameterError(key, value, "a key nested too deeply")
        _assign(params, path, value)
    return params


def _assign(container: Dict[str, Any], path: List[str], value: str) -> None:
    head, rest = path[0], path[1:]

    if not rest:
        existing = container.get(head)
        if isinstance(existing, list):
            existing.append(value)
        elif isinstance(existing, str):
            container[head] = [existing, value]
        else:
            container[head] = value
        return

    if rest[0] == "":
        existing = container.get(head)
        if isinstance(existing, list):
            existing.append(value)
        elif isinstance(existing, str):
            container[head] = [existing, value]
        else:
            container[head] = [value]
        return

    target = container.get(head)
    if not isinstance(target, dict):
        target = {}
        container[head] = target
    _assign(target, rest, value)


def query_params(request: Request) -> Dict[str, Any]:
    """FastAPI dependency: the current request's raw parameter map."""
    return parse_query_params(request.query_params.multi_items())
