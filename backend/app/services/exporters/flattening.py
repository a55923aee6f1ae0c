"""Flattening of nested extraction payloads into dotted-path fields.

Rules (applied per key, depth-first, in the source mapping's insertion order):
- None            -> "N/A"
- mapping         -> recurse with `prefix.key`; an empty mapping adds nothing
- list / tuple    -> ", "-joined text of the elements
- anything else   -> kept as-is (dates included); the renderer converts it

Arrays of objects are deliberately degraded to joined JSON text rather than
flattened into columns.
"""
from __future__ import annotations

import json
import re
from typing import Any, Dict, List, Mapping, Union

# JSON-like values as produced by json.loads (dates may appear when callers
# pass Python objects directly).
JsonScalar = Union[str, int, float, bool, None]
JsonValue = Union[JsonScalar, List[Any], Dict[str, Any]]

NOT_AVAILABLE = "N/A"

_INTERNAL_CAPITAL = re.compile(r"(?<=\S)([A-Z])")


def format_title(identifier: str) -> str:
    """Turn an identifier into a header: 'propertyAddress' -> 'Property Address'.

    Only inserts spaces before capitals and upper-cases the first character;
    'noi' becomes 'Noi', not 'NOI'. Capitals already preceded by whitespace are
    left alone, so formatting a formatted header is a no-op.
    """
    spaced = _INTERNAL_CAPITAL.sub(r" \1", str(identifier)).strip()
    return spaced[:1].upper() + spaced[1:]


def join_path(prefix: str, key: Any) -> str:
    return f"{prefix}.{key}" if prefix else str(key)


def stringify_element(item: Any) -> str:
    """Text for one array element when an array is rendered into a single cell."""
    if item is None:
        return NOT_AVAILABLE
    if isinstance(item, str):
        return item
    if isinstance(item, (dict, list, tuple)):
        return json.dumps(item, ensure_ascii=False, default=str)
    return str(item)


def _leaf(value: Any) -> Any:
    if value is None:
        return NOT_AVAILABLE
    if isinstance(value, (list, tuple)):
        return ", ".join(stringify_element(item) for item in value)
    return value


def flatten(value: JsonValue, prefix: str = "") -> Dict[str, Any]:
    """Flatten `value` into an ordered {dotted.path: renderable} mapping.

    A non-mapping root yields a single field at `prefix`, or nothing at all when
    there is no prefix to put it under.
    """
    if not isinstance(value, Mapping):
        if not prefix:
            return {}
        return {prefix: _leaf(value)}

    result: Dict[str, Any] = {}
    for key, child in value.items():
        path = join_path(prefix, key)
        if isinstance(child, Mapping):
            result.update(flatten(child, path))
        else:
            result[path] = _leaf(child)
    return result


__all__ = [
    "JsonValue",
    "NOT_AVAILABLE",
    "format_title",
    "flatten",
    "join_path",
    "stringify_element",
]
