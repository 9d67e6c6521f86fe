"""
In-memory collection implementation.

Manifesto:
    Single-process deployments and test suites need a Collection that
    behaves like a document store without any external infrastructure.

Records are plain dicts held in a list.  Reads hand out deep copies, so a
caller mutating a returned record never changes stored state; writes go
through ``update`` and the embedded-list primitives only.

Tags:
    joinery, collection, in-memory, asyncio, testing, single-node
"""

from __future__ import annotations

import asyncio
import copy
import uuid
from collections.abc import Iterable, Mapping
from typing import Any

from joinery.core.errors import StorageError
from joinery.core.fieldpath import get_path, has_path, set_path
from joinery.core.logging import get_logger
from joinery.core.protocols import Query, Record

__all__ = ["InMemoryCollection"]

log = get_logger(__name__)


def _matches(record: Mapping[str, Any], query: Query) -> bool:
    for path, expected in query.items():
        if not has_path(record, path):
            if expected is not None:
                return False
            continue
        if get_path(record, path) != expected:
            return False
    return True


class InMemoryCollection:
    """In-process collection of dict records.

    A field that is absent matches a criterion of ``None``, the way a
    document store treats a null query against a missing field.

    Example::

        accounts = InMemoryCollection("Account", key_field="Id")
        await accounts.insert({"Id": "EXT-1", "Name": "Acme"})
        await accounts.get({"Id": "EXT-1"})
    """

    def __init__(
        self,
        name: str,
        *,
        key_field: str = "external_id",
        local_key_field: str = "_id",
        records: Iterable[Mapping[str, Any]] | None = None,
    ) -> None:
        self.name = name
        self._key_field = key_field
        self._local_key_field = local_key_field
        self._records: list[dict[str, Any]] = []
        self._lock = asyncio.Lock()
        for record in records or ():
            self._records.append(self._with_local_key(record))

    def get_key_field(self) -> str:
        return self._key_field

    def get_local_key_field(self) -> str:
        return self._local_key_field

    def _with_local_key(self, record: Mapping[str, Any]) -> dict[str, Any]:
        stored = copy.deepcopy(dict(record))
        if not stored.get(self._local_key_field):
            stored[self._local_key_field] = uuid.uuid4().hex
        return stored

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #

    async def get(self, query: Query) -> Record | None:
        for record in self._records:
            if _matches(record, query):
                return copy.deepcopy(record)
        return None

    async def find(self, query: Query) -> list[Record]:
        return [copy.deepcopy(r) for r in self._records if _matches(r, query)]

    def all(self) -> list[Record]:
        """Snapshot of every stored record."""
        return copy.deepcopy(self._records)

    def __len__(self) -> int:
        return len(self._records)

    # ------------------------------------------------------------------ #
    # Writes
    # ------------------------------------------------------------------ #

    async def insert(self, record: Mapping[str, Any]) -> Record:
        """Store a record, assigning a local key if it has none."""
        stored = self._with_local_key(record)
        async with self._lock:
            self._records.append(stored)
        return copy.deepcopy(stored)

    async def delete(self, query: Query) -> int:
        async with self._lock:
            before = len(self._records)
            self._records = [r for r in self._records if not _matches(r, query)]
            return before - len(self._records)

    async def update(self, match: Query, fields: Mapping[str, Any]) -> int:
        """Set ``fields`` on every matching record; returns the match count."""
        async with self._lock:
            count = 0
            for record in self._records:
                if _matches(record, match):
                    for path, value in fields.items():
                        set_path(record, path, copy.deepcopy(value))
                    count += 1
        log.debug("collection_updated", collection=self.name, matched=count)
        return count

    def _embedded_list(self, record: dict[str, Any], list_field: str) -> list[Any]:
        current = get_path(record, list_field)
        if current is None:
            current = []
            set_path(record, list_field, current)
        elif not isinstance(current, list):
            raise StorageError(
                f"Field {list_field} of {self.name} holds {type(current).__name__}, not a list"
            ).with_context(key=record.get(self._local_key_field), list_field=list_field)
        return current

    async def add_or_update_child_in_collection(
        self,
        match: Query,
        list_field: str,
        entry: Mapping[str, Any],
        entry_key_field: str,
    ) -> int:
        entry_key = get_path(entry, entry_key_field)
        async with self._lock:
            count = 0
            for record in self._records:
                if not _matches(record, match):
                    continue
                items = self._embedded_list(record, list_field)
                for i, item in enumerate(items):
                    if isinstance(item, Mapping) and get_path(item, entry_key_field) == entry_key:
                        items[i] = copy.deepcopy(dict(entry))
                        break
                else:
                    items.append(copy.deepcopy(dict(entry)))
                count += 1
        return count

    async def remove_child_from_collection(
        self,
        match: Query,
        list_field: str,
        entry_match: Query,
    ) -> int:
        async with self._lock:
            removed = 0
            for record in self._records:
                if not _matches(record, match):
                    continue
                items = get_path(record, list_field)
                if not isinstance(items, list) or not items:
                    continue
                kept = [i for i in items if not (isinstance(i, Mapping) and _matches(i, entry_match))]
                removed += len(items) - len(kept)
                set_path(record, list_field, kept)
        return removed
