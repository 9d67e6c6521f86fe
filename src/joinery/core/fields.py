"""Field extraction for denormalized snapshots and summaries."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from joinery.core.fieldpath import get_path, has_path, set_path


def extract_named_fields(record: Mapping[str, Any], names: Iterable[str]) -> dict[str, Any]:
    """Copy of ``record`` restricted to ``names``.

    Names absent from the record are skipped rather than filled with None.
    Dotted names are read by path and written back nested, so
    ``["Owner.Name"]`` yields ``{"Owner": {"Name": ...}}``.
    """
    result: dict[str, Any] = {}
    for name in names:
        if has_path(record, name):
            set_path(result, name, get_path(record, name))
    return result


__all__ = ["extract_named_fields"]
