"""
Joint configuration and option validation.

A joint is described by a ``JointConfig``: which two entities it connects,
which child field holds the foreign key, where the parent snapshot lives on
the child, and optionally where the list of child summaries lives on the
parent.  ``check_options`` validates a raw options mapping before anything
is built and fails fast with a ``ConfigError`` naming the offending option.

Examples:
    >>> config = JointConfig.from_options(
    ...     parent_entity="Account",
    ...     child_entity="Contact",
    ...     lookup_field="AccountId",
    ...     parent_field_name="account",
    ...     parent_fields=["Name"],
    ...     parent_collection=accounts,
    ...     child_collection=contacts,
    ... )

Options:
    parent_entity / child_entity: entity names (used in logs and errors)
    lookup_field: child field (dotted path allowed) holding the parent's
        external id
    parent_field_name: child field holding the parent snapshot; the snapshot
        always carries the parent's local key, so this is required even when
        only the related list is wanted
    parent_fields: parent fields copied into the snapshot (default: none)
    parent_collection / child_collection: ``Collection`` instances
    related_list_name: parent field holding child summaries (optional);
        reparenting is not handled, an old parent keeps its entry
    related_list_fields: child fields copied into each summary; required
        when related_list_name is given

Tags:
    configuration, validation, joinery
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from joinery.core.errors import InvalidConfigError, MissingConfigError
from joinery.core.protocols import Collection

_REQUIRED_STRINGS = ("child_entity", "parent_entity", "lookup_field")

_KNOWN_OPTIONS = frozenset({
    "parent_entity",
    "child_entity",
    "lookup_field",
    "parent_field_name",
    "parent_fields",
    "parent_collection",
    "child_collection",
    "related_list_name",
    "related_list_fields",
})


def _dedupe(names: Iterable[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(names))


def _check_field_names(key: str, value: Any) -> None:
    if not isinstance(value, (list, tuple, set, frozenset)):
        raise InvalidConfigError(key, value, f"Option {key} must be a list of field names")
    for name in value:
        if not isinstance(name, str) or not name:
            raise InvalidConfigError(key, value, f"Option {key} contains an invalid field name: {name!r}")


def check_options(options: Mapping[str, Any]) -> None:
    """Validate joint options, raising a ConfigError on the first problem.

    Type checks on the entity names and lookup field run first, so a
    misspelled or missing option is reported before any cross-field rule.
    """
    for key in _REQUIRED_STRINGS:
        if not isinstance(options.get(key), str):
            raise InvalidConfigError(key, options.get(key))
        if not options[key]:
            raise InvalidConfigError(key, options[key], f"Option {key} in joint config must not be empty")

    unknown = sorted(set(options) - _KNOWN_OPTIONS)
    if unknown:
        raise InvalidConfigError(unknown[0], options[unknown[0]], f"Unknown option {unknown[0]} in joint config")

    parent_field_name = options.get("parent_field_name")
    if parent_field_name is None:
        raise MissingConfigError("parent_field_name")
    if not isinstance(parent_field_name, str) or not parent_field_name:
        raise InvalidConfigError("parent_field_name", parent_field_name)

    for key in ("parent_collection", "child_collection"):
        collection = options.get(key)
        if collection is None:
            raise MissingConfigError(key)
        if not isinstance(collection, Collection):
            raise InvalidConfigError(
                key, collection, f"Option {key} does not implement the Collection protocol"
            )

    if options.get("parent_fields") is not None:
        _check_field_names("parent_fields", options["parent_fields"])

    related_list_name = options.get("related_list_name")
    if related_list_name is not None:
        if not isinstance(related_list_name, str) or not related_list_name:
            raise InvalidConfigError("related_list_name", related_list_name)
        related_list_fields = options.get("related_list_fields")
        if related_list_fields is None:
            raise MissingConfigError(
                "related_list_fields",
                "Option related_list_fields is required when related_list_name is given",
            )
        _check_field_names("related_list_fields", related_list_fields)
        if not list(related_list_fields):
            raise InvalidConfigError(
                "related_list_fields",
                related_list_fields,
                "Option related_list_fields must not be empty when related_list_name is given",
            )


@dataclass(frozen=True)
class JointConfig:
    """Immutable description of a one-to-many relationship.

    Field name sequences are stored as de-duplicated tuples in the order
    given; the caller's lists are never modified.
    """

    parent_entity: str
    child_entity: str
    lookup_field: str
    parent_field_name: str
    parent_collection: Collection = field(repr=False, compare=False)
    child_collection: Collection = field(repr=False, compare=False)
    parent_fields: tuple[str, ...] = ()
    related_list_name: str | None = None
    related_list_fields: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        # a bare string would otherwise be split into one-letter field names
        _check_field_names("parent_fields", self.parent_fields)
        _check_field_names("related_list_fields", self.related_list_fields)
        object.__setattr__(self, "parent_fields", _dedupe(self.parent_fields))
        object.__setattr__(self, "related_list_fields", _dedupe(self.related_list_fields))

    @classmethod
    def from_options(cls, **options: Any) -> JointConfig:
        """Validate raw options and build a config from them."""
        check_options(options)
        return cls(
            parent_entity=options["parent_entity"],
            child_entity=options["child_entity"],
            lookup_field=options["lookup_field"],
            parent_field_name=options["parent_field_name"],
            parent_collection=options["parent_collection"],
            child_collection=options["child_collection"],
            parent_fields=tuple(options.get("parent_fields") or ()),
            related_list_name=options.get("related_list_name"),
            related_list_fields=tuple(options.get("related_list_fields") or ()),
        )

    def as_options(self) -> dict[str, Any]:
        """The config as an options mapping accepted by ``from_options``."""
        options: dict[str, Any] = {
            "parent_entity": self.parent_entity,
            "child_entity": self.child_entity,
            "lookup_field": self.lookup_field,
            "parent_field_name": self.parent_field_name,
            "parent_collection": self.parent_collection,
            "child_collection": self.child_collection,
            "parent_fields": list(self.parent_fields),
        }
        if self.related_list_name is not None:
            options["related_list_name"] = self.related_list_name
            options["related_list_fields"] = list(self.related_list_fields)
        return options

    @property
    def tracks_related_list(self) -> bool:
        return self.related_list_name is not None


__all__ = ["JointConfig", "check_options"]
