"""Dot-path property mapping.

Reads values out of arbitrary objects (mappings, attribute holders,
sequences) and writes them into nested dicts, addressed by dot-separated
paths such as ``"params.id"`` or ``"data.user.name"``.

Usage::

    table = {"data.id": "params.id", "data.lang": "body.lang"}
    apply_mapping_table(table, request)
    # -> {"data": {"id": "42", "lang": "en"}}
"""

from collections.abc import Mapping, Sequence
from typing import Any

_MISSING = object()


def split_path(path: str) -> list[str]:
    """Split a dot path into its non-empty segments."""
    return [segment for segment in path.split(".") if segment]


def _step(value: Any, segment: str) -> Any:
    """Resolve one path segment against *value*, or return ``_MISSING``."""
    if isinstance(value, Mapping):
        return value.get(segment, _MISSING)
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        if segment.isdigit() and int(segment) < len(value):
            return value[int(segment)]
        return _MISSING
    if segment.startswith("_"):
        return _MISSING
    return getattr(value, segment, _MISSING)


def get_path(source: Any, path: str, default: Any = None) -> Any:
    """Return the value at *path* in *source*, or *default* if absent.

    Mapping keys are looked up first, then attributes; numeric segments
    index into lists and tuples. Private attributes are never read.
    """
    value = source
    for segment in split_path(path):
        if value is None:
            return default
        value = _step(value, segment)
        if value is _MISSING:
            return default
    return value


def set_path(target: dict[str, Any], path: str, value: Any) -> dict[str, Any]:
    """Write *value* at *path* in *target*, creating nested dicts as needed.

    Intermediate values that are not dicts are replaced. Returns *target*.
    """
    segments = split_path(path)
    if not segments:
        msg = f"Cannot set an empty property path: {path!r}"
        raise ValueError(msg)

    node = target
    for segment in segments[:-1]:
        child = node.get(segment)
        if not isinstance(child, dict):
            child = {}
            node[segment] = child
        node = child
    node[segments[-1]] = value
    return target


def apply_mapping_table(table: Mapping[str, str], source: Any) -> dict[str, Any]:
    """Build a fresh dict from ``{destination_path: source_path}`` entries.

    Every entry is applied, in table order; sources that do not resolve
    produce ``None`` at their destination.
    """
    result: dict[str, Any] = {}
    for destination, origin in table.items():
        set_path(result, destination, get_path(source, origin))
    return result
