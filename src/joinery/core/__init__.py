"""Joinery Core -- primitives shared by every joint.

Architecture::

    errors.py       Structured error hierarchy (JoineryError, ResolutionError)
    logging.py      Structured logging (structlog)
    settings.py     JoinerySettings (pydantic-settings)
    protocols.py    Collection protocol + transform/hook aliases
    fieldpath.py    Dotted field-path get/set
    fields.py       extract_named_fields
    memory.py       InMemoryCollection
"""

from joinery.core.errors import (
    ConfigError,
    ErrorCategory,
    ErrorContext,
    InvalidConfigError,
    JoineryError,
    MissingConfigError,
    MissingExternalIdError,
    ParentNotFoundError,
    ResolutionError,
    StorageError,
    categorize_error,
    is_retryable,
)
from joinery.core.fieldpath import get_path, has_path, set_path
from joinery.core.fields import extract_named_fields
from joinery.core.logging import configure_logging, get_logger
from joinery.core.memory import InMemoryCollection
from joinery.core.protocols import CleanseTransform, Collection, Hook, PrepareTransform, Record

__all__ = [
    "ConfigError",
    "ErrorCategory",
    "ErrorContext",
    "InvalidConfigError",
    "JoineryError",
    "MissingConfigError",
    "MissingExternalIdError",
    "ParentNotFoundError",
    "ResolutionError",
    "StorageError",
    "categorize_error",
    "is_retryable",
    "get_path",
    "has_path",
    "set_path",
    "extract_named_fields",
    "configure_logging",
    "get_logger",
    "InMemoryCollection",
    "CleanseTransform",
    "Collection",
    "Hook",
    "PrepareTransform",
    "Record",
]
