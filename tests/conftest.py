"""
Shared pytest fixtures for joinery tests.

This module provides:
- Parent (Account) and child (Contact) collections, wrapped so every
  collection call is recorded
- Option sets for a plain joint and a joint with a related list
- structlog reset between tests

Collections use ``id`` as local key and ``extId`` as external key; the
child foreign key is ``fk`` and the parent snapshot lives under ``account``.
"""

from typing import Any, Generator

import pytest
import structlog

from joinery.core.memory import InMemoryCollection

from tests._support.recording import RecordingCollection


@pytest.fixture(autouse=True)
def reset_structlog() -> Generator[None, None, None]:
    """Undo any configure_logging() a test performed."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def accounts() -> RecordingCollection:
    return RecordingCollection(
        InMemoryCollection("Account", key_field="extId", local_key_field="id")
    )


@pytest.fixture
def contacts() -> RecordingCollection:
    return RecordingCollection(
        InMemoryCollection("Contact", key_field="extId", local_key_field="id")
    )


@pytest.fixture
def joint_options(accounts, contacts) -> dict[str, Any]:
    return {
        "parent_entity": "Account",
        "child_entity": "Contact",
        "lookup_field": "fk",
        "parent_field_name": "account",
        "parent_fields": ["name"],
        "parent_collection": accounts,
        "child_collection": contacts,
    }


@pytest.fixture
def related_options(joint_options) -> dict[str, Any]:
    return {
        **joint_options,
        "related_list_name": "contacts",
        "related_list_fields": ["lastName"],
    }
