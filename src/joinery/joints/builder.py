"""
Relationship joints: hooks that keep a parent/child relationship in sync.

A joint connects a parent collection and a child collection through a
foreign key that holds the parent's *external* identifier.  It keeps two
denormalized copies consistent:

- on each child, a snapshot of selected parent fields (always including the
  parent's local key) under ``parent_field_name``;
- optionally, on each parent, a list of child summaries under
  ``related_list_name`` (one entry per child local key).

The sync engine calls the hooks; the joint decides nothing about timing and
holds no mutable state.  Every hook is a coroutine that awaits its
collection calls one after another.

Architecture:
    ::

        parent received  ──► on_parent_inserted / on_parent_updated
                               └─ child.update(children of parent,
                                               {fk, parent snapshot})
                               └─ (related list) parent.update(list := children)

        child cleansed   ──► enhance_cleanse(cleanse)
                               └─ parent.get({parent key: fk}) → snapshot
                                  (missing parent: warning, record passes)

        child prepared   ──► enhance_prepare(prepare)
                               └─ fk := snapshot ext id
                                  or parent.get({local key}) → ext id
                                  (missing parent / ext id: ResolutionError)

        child changed    ──► on_child_inserted / _updated / _removed
                               └─ parent.add_or_update_child_in_collection
                               └─ parent.remove_child_from_collection

Guardrails:
    - Reparenting is not handled: when a child's foreign key changes, the
      previous parent keeps its related-list entry.
    - Cleanse misses are advisory, prepare misses are fatal.  The two
      policies are deliberately different.

Tags:
    joint, relationship, denormalization, sync-hooks, joinery
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from joinery.core.errors import MissingExternalIdError, ParentNotFoundError
from joinery.core.fieldpath import get_path, set_path
from joinery.core.fields import extract_named_fields
from joinery.core.logging import get_logger
from joinery.core.protocols import CleanseTransform, Hook, PrepareTransform, Record
from joinery.joints.config import JointConfig, check_options

__all__ = ["Joint", "build_joint"]


def _is_unset(value: Any) -> bool:
    return value is None or value == ""


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


def _identity_cleanse(record: Record) -> Record:
    return record


def _identity_prepare(record: Record, action: Any = None) -> Record:
    return record


class Joint:
    """The hooks of one parent/child relationship.

    Build with :func:`build_joint`.  Hooks that do not apply to the
    configuration are ``None``: ``on_parent_updated`` when the snapshot holds
    only the parent's local key, the ``on_child_*`` hooks when no related
    list is configured.
    """

    __slots__ = (
        "_config",
        "_parent_key_field",
        "_parent_local_key_field",
        "_parent_fields",
        "_child_local_key_field",
        "_related_list_fields",
    )

    def __init__(self, config: JointConfig) -> None:
        self._config = config
        parent = config.parent_collection
        self._parent_key_field: str = parent.get_key_field()
        self._parent_local_key_field: str = parent.get_local_key_field()
        self._parent_fields: tuple[str, ...] = tuple(
            dict.fromkeys((*config.parent_fields, self._parent_local_key_field))
        )
        self._child_local_key_field: str | None = None
        self._related_list_fields: tuple[str, ...] = ()
        if config.tracks_related_list:
            self._child_local_key_field = config.child_collection.get_local_key_field()
            self._related_list_fields = tuple(
                dict.fromkeys((*config.related_list_fields, self._child_local_key_field))
            )

    def _logger(self) -> Any:
        return get_logger(
            __name__,
            parent_entity=self._config.parent_entity,
            child_entity=self._config.child_entity,
        )

    def __repr__(self) -> str:
        return (
            f"Joint({self._config.parent_entity!r} -> {self._config.child_entity!r}, "
            f"lookup_field={self._config.lookup_field!r})"
        )

    @property
    def config(self) -> JointConfig:
        return self._config

    @property
    def parent_entity(self) -> str:
        return self._config.parent_entity

    @property
    def child_entity(self) -> str:
        return self._config.child_entity

    @property
    def parent_key_field(self) -> str:
        """Parent field holding the external id (what the foreign key stores)."""
        return self._parent_key_field

    @property
    def parent_local_key_field(self) -> str:
        return self._parent_local_key_field

    @property
    def parent_fields(self) -> tuple[str, ...]:
        """Fields of the parent snapshot, ending with the parent's local key."""
        return self._parent_fields

    @property
    def child_local_key_field(self) -> str | None:
        return self._child_local_key_field

    @property
    def related_list_fields(self) -> tuple[str, ...]:
        """Fields of each related-list entry; empty without a related list."""
        return self._related_list_fields

    def parent_snapshot(self, parent: Mapping[str, Any]) -> dict[str, Any]:
        """Denormalized copy of ``parent`` as embedded on its children."""
        return extract_named_fields(parent, self.parent_fields)

    def child_summary(self, child: Mapping[str, Any]) -> dict[str, Any]:
        """Entry representing ``child`` in its parent's related list."""
        return extract_named_fields(child, self.related_list_fields)

    # ------------------------------------------------------------------ #
    # Parent propagation
    # ------------------------------------------------------------------ #

    async def _propagate_parent(self, parent: Record) -> None:
        cfg = self._config
        local_key = get_path(parent, self.parent_local_key_field)
        if _is_unset(local_key):
            self._logger().debug("parent_propagation_skipped", reason="no_local_key")
            return
        fields: dict[str, Any] = {cfg.parent_field_name: self.parent_snapshot(parent)}
        external_id = get_path(parent, self.parent_key_field)
        if not _is_unset(external_id):
            fields[cfg.lookup_field] = external_id
        matched = await cfg.child_collection.update(
            {f"{cfg.parent_field_name}.{self.parent_local_key_field}": local_key},
            fields,
        )
        self._logger().debug(
            "parent_propagated", parent_key=local_key, external_id=external_id, matched=matched
        )

    async def _resync_related_list(self, parent: Record) -> None:
        cfg = self._config
        external_id = get_path(parent, self.parent_key_field)
        if _is_unset(external_id):
            return
        children = await cfg.child_collection.find({cfg.lookup_field: external_id})
        if not children:
            return
        summaries = [self.child_summary(child) for child in children]
        await cfg.parent_collection.update(
            {self.parent_key_field: external_id},
            {cfg.related_list_name: summaries},
        )
        self._logger().debug("related_list_resynced", external_id=external_id, entries=len(summaries))

    async def on_parent_inserted(self, parent: Record) -> None:
        """Parent appeared: push it down to its children.

        With a related list configured, the parent's list is also rebuilt
        from every child currently pointing at it, which gives a baseline
        independent of incremental child events.
        """
        if not self._config.tracks_related_list:
            await self._propagate_parent(parent)
            return
        on_parent_updated = self.on_parent_updated
        if on_parent_updated is not None:
            await on_parent_updated(parent)
        await self._resync_related_list(parent)

    @property
    def on_parent_updated(self) -> Hook | None:
        # only the local key in the snapshot: nothing can go stale
        if len(self.parent_fields) > 1:
            return self._propagate_parent
        return None

    # ------------------------------------------------------------------ #
    # Cleanse / prepare enhancement
    # ------------------------------------------------------------------ #

    def enhance_cleanse(
        self, cleanse: CleanseTransform | None = None
    ) -> Callable[[Record], Awaitable[Record]]:
        """Wrap ``cleanse`` so the cleansed child gains its parent snapshot.

        A child whose parent cannot be found is returned without a snapshot
        and a ``parent_not_found`` warning is logged; parents and children may
        arrive in either order.
        """
        if cleanse is None:
            cleanse = _identity_cleanse
        cfg = self._config

        async def enhanced_cleanse(record: Record) -> Record:
            cleaned = await _resolve(cleanse(record))
            lookup_id = get_path(cleaned, cfg.lookup_field)
            if _is_unset(lookup_id):
                return cleaned
            parent = await cfg.parent_collection.get({self.parent_key_field: lookup_id})
            if parent is None:
                self._logger().warning("parent_not_found", lookup_id=lookup_id, hook="cleanse")
                return cleaned
            set_path(cleaned, cfg.parent_field_name, self.parent_snapshot(parent))
            return cleaned

        return enhanced_cleanse

    def enhance_prepare(
        self, prepare: PrepareTransform | None = None
    ) -> Callable[..., Awaitable[Record]]:
        """Wrap ``prepare`` so the outgoing child carries its parent's external id.

        Raises (from the returned coroutine):
            ParentNotFoundError: the snapshot's parent does not exist.
            MissingExternalIdError: the parent exists but was never synced out.
        """
        if prepare is None:
            prepare = _identity_prepare
        cfg = self._config

        async def enhanced_prepare(record: Record, action: Any = None) -> Record:
            prepared = await _resolve(prepare(record, action))
            snapshot = get_path(prepared, cfg.parent_field_name)
            if not snapshot:
                return prepared
            external_id = get_path(snapshot, self.parent_key_field)
            if not _is_unset(external_id):
                set_path(prepared, cfg.lookup_field, external_id)
                return prepared

            parent_key = get_path(snapshot, self.parent_local_key_field)
            parent = None
            if not _is_unset(parent_key):
                parent = await cfg.parent_collection.get({self.parent_local_key_field: parent_key})
            if parent is None:
                self._logger().error("prepare_unresolved", parent_key=parent_key, reason="parent_not_found")
                raise ParentNotFoundError(cfg.parent_entity, parent_key).with_context(
                    child_entity=cfg.child_entity, hook="prepare", lookup_field=cfg.lookup_field
                )
            external_id = get_path(parent, self.parent_key_field)
            if _is_unset(external_id):
                self._logger().error("prepare_unresolved", parent_key=parent_key, reason="no_external_id")
                raise MissingExternalIdError(cfg.parent_entity, parent_key).with_context(
                    child_entity=cfg.child_entity, hook="prepare", lookup_field=cfg.lookup_field
                )
            set_path(prepared, cfg.lookup_field, external_id)
            return prepared

        return enhanced_prepare

    # ------------------------------------------------------------------ #
    # Related list maintenance
    # ------------------------------------------------------------------ #

    async def _upsert_related_entry(self, child: Record) -> Any:
        cfg = self._config
        external_id = get_path(child, cfg.lookup_field)
        # a child without a parent is in no list; an old parent is not cleaned up
        if _is_unset(external_id):
            return None
        child_key = get_path(child, self.child_local_key_field)
        if _is_unset(child_key):
            self._logger().debug("related_entry_skipped", external_id=external_id, reason="no_child_key")
            return None
        result = await cfg.parent_collection.add_or_update_child_in_collection(
            {self.parent_key_field: external_id},
            cfg.related_list_name,
            self.child_summary(child),
            self.child_local_key_field,
        )
        self._logger().debug("related_entry_upserted", external_id=external_id, child_key=child_key)
        return result

    async def _remove_related_entry(self, child: Record) -> Any:
        cfg = self._config
        external_id = get_path(child, cfg.lookup_field)
        if _is_unset(external_id):
            return None
        child_key = get_path(child, self.child_local_key_field)
        # entries are matched by child key; a keyless child matches nothing
        if _is_unset(child_key):
            self._logger().debug("related_entry_skipped", external_id=external_id, reason="no_child_key")
            return None
        result = await cfg.parent_collection.remove_child_from_collection(
            {self.parent_key_field: external_id},
            cfg.related_list_name,
            {self.child_local_key_field: child_key},
        )
        self._logger().debug("related_entry_removed", external_id=external_id, child_key=child_key)
        return result

    @property
    def on_child_inserted(self) -> Hook | None:
        return self._upsert_related_entry if self._config.tracks_related_list else None

    @property
    def on_child_updated(self) -> Hook | None:
        return self._upsert_related_entry if self._config.tracks_related_list else None

    @property
    def on_child_removed(self) -> Hook | None:
        return self._remove_related_entry if self._config.tracks_related_list else None

    def hooks(self) -> dict[str, Hook]:
        """Event hooks that apply to this joint, by name."""
        candidates = {
            "on_parent_inserted": self.on_parent_inserted,
            "on_parent_updated": self.on_parent_updated,
            "on_child_inserted": self.on_child_inserted,
            "on_child_updated": self.on_child_updated,
            "on_child_removed": self.on_child_removed,
        }
        return {name: hook for name, hook in candidates.items() if hook is not None}


def build_joint(config: JointConfig | None = None, **options: Any) -> Joint:
    """Validate a relationship description and return its joint.

    Accepts either a ready ``JointConfig`` or the raw options that
    :meth:`JointConfig.from_options` takes.  Raises a ``ConfigError`` before
    anything is built; no collection is read or written.

    Example::

        joint = build_joint(
            parent_entity="Account",
            child_entity="Contact",
            lookup_field="AccountId",
            parent_field_name="account",
            parent_fields=["Name"],
            parent_collection=accounts,
            child_collection=contacts,
            related_list_name="contacts",
            related_list_fields=["LastName"],
        )
        cleanse = joint.enhance_cleanse(cleanse_contact)
    """
    if config is None:
        config = JointConfig.from_options(**options)
    else:
        if options:
            raise TypeError("build_joint() takes a JointConfig or options, not both")
        check_options(config.as_options())
    joint = Joint(config)
    get_logger(__name__).debug(
        "joint_built",
        parent_entity=config.parent_entity,
        child_entity=config.child_entity,
        hooks=sorted(joint.hooks()),
    )
    return joint
