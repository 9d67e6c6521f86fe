"""
Canonical protocol definitions for joinery.

A joint never owns storage.  It reads and writes parent and child records
through whatever collection the sync engine hands it, so the only contract
is the shape of that collection.

Manifesto:
    Protocols define contracts without inheritance:
    - **Decoupling:** Joints depend on shape, not on a storage driver
    - **Testability:** Any object matching the protocol works
      (see ``joinery.core.memory.InMemoryCollection``)
    - **Portability:** The same joint runs over Mongo-style document stores,
      SQL-backed repositories or in-process lists

Architecture:
    ::

        Collection Protocol:
        ┌────────────────────────────────────────────────────────────────────┐
        │ get_key_field()        → external identifier field (sync)          │
        │ get_local_key_field()  → internally assigned identifier (sync)     │
        │ get(query)             → record or None                  (async)   │
        │ find(query)            → list of records                 (async)   │
        │ update(match, fields)  → bulk partial update             (async)   │
        │ add_or_update_child_in_collection(match, list, entry, key) (async) │
        │ remove_child_from_collection(match, list, entry_match)     (async) │
        └────────────────────────────────────────────────────────────────────┘

Guardrails:
    ❌ DON'T: Let a joint reach into a driver-specific API
    ✅ DO: Add the capability here first, then implement it in adapters

Tags:
    protocol, collection, async, joinery, contracts
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping, MutableMapping, Sequence
from typing import Any, Protocol, Union, runtime_checkable

Record = MutableMapping[str, Any]
"""A parent or child record: field name to value, owned by its collection."""

Query = Mapping[str, Any]
"""Match criteria: dotted field path to expected value."""

CleanseTransform = Callable[[Record], Union[Record, Awaitable[Record]]]
"""Record → record, synchronous or asynchronous."""

PrepareTransform = Callable[[Record, Any], Union[Record, Awaitable[Record]]]
"""(record, action) → record, synchronous or asynchronous."""

Hook = Callable[[Record], Awaitable[Any]]


@runtime_checkable
class Collection(Protocol):
    """
    A record collection as seen by a joint.

    Records carry two identifiers: the external key (``get_key_field()``),
    assigned by the remote system and possibly unset for records that were
    never synchronized outward, and the local key
    (``get_local_key_field()``), assigned by the collection itself.

    Implementations:
        - :class:`joinery.core.memory.InMemoryCollection`
    """

    def get_key_field(self) -> str:
        """Name of the externally visible identifier field."""
        ...

    def get_local_key_field(self) -> str:
        """Name of the internally assigned identifier field."""
        ...

    async def get(self, query: Query) -> Record | None:
        """Point lookup; ``None`` when nothing matches."""
        ...

    async def find(self, query: Query) -> Sequence[Record]:
        """All records matching ``query``."""
        ...

    async def update(self, match: Query, fields: Mapping[str, Any]) -> Any:
        """Set ``fields`` on every record matching ``match``."""
        ...

    async def add_or_update_child_in_collection(
        self,
        match: Query,
        list_field: str,
        entry: Mapping[str, Any],
        entry_key_field: str,
    ) -> Any:
        """Upsert ``entry`` into the embedded list ``list_field`` of matching records.

        The entry whose ``entry_key_field`` equals ``entry[entry_key_field]``
        is replaced; if there is none, ``entry`` is appended.
        """
        ...

    async def remove_child_from_collection(
        self,
        match: Query,
        list_field: str,
        entry_match: Query,
    ) -> Any:
        """Remove entries matching ``entry_match`` from the embedded list."""
        ...


__all__ = [
    "Record",
    "Query",
    "CleanseTransform",
    "PrepareTransform",
    "Hook",
    "Collection",
]
