"""
Dotted field-path access on records.

Option values such as ``lookup_field`` may name a nested field
(``"Account.Id"``).  Every read and write a joint makes goes through these
three functions so the path rules live in one place.

Examples:
    >>> rec = {"Account": {"Id": "EXT-1"}}
    >>> get_path(rec, "Account.Id")
    'EXT-1'
    >>> set_path(rec, "Owner.Name", "Ada")
    >>> rec["Owner"]
    {'Name': 'Ada'}
    >>> has_path(rec, "Owner.Email")
    False

Tags:
    field-path, records, joinery
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from typing import Any

_MISSING = object()


def split_path(path: str) -> list[str]:
    """Split a dotted path into its segments."""
    if not isinstance(path, str) or not path:
        raise ValueError(f"Invalid field path: {path!r}")
    return path.split(".")


def _walk(record: Mapping[str, Any], path: str) -> Any:
    node: Any = record
    for part in split_path(path):
        if not isinstance(node, Mapping) or part not in node:
            return _MISSING
        node = node[part]
    return node


def get_path(record: Mapping[str, Any], path: str, default: Any = None) -> Any:
    """Value at ``path``, or ``default`` when any segment is missing."""
    value = _walk(record, path)
    return default if value is _MISSING else value


def has_path(record: Mapping[str, Any], path: str) -> bool:
    """True when every segment of ``path`` exists (the value may be None)."""
    return _walk(record, path) is not _MISSING


def set_path(record: MutableMapping[str, Any], path: str, value: Any) -> None:
    """Set ``value`` at ``path``, creating intermediate dicts as needed.

    Raises:
        TypeError: an intermediate segment holds a non-mapping value.
    """
    *parents, leaf = split_path(path)
    node: Any = record
    for part in parents:
        child = node.get(part)
        if child is None:
            child = node[part] = {}
        elif not isinstance(child, MutableMapping):
            raise TypeError(f"Cannot set {path!r}: {part!r} holds {type(child).__name__}")
        node = child
    node[leaf] = value


__all__ = ["split_path", "get_path", "has_path", "set_path"]
