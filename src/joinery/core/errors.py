"""
Structured error types for joinery.

Every failure a joint can surface is a JoineryError carrying a category,
an explicit retry flag, structured context (which relationship, which hook,
which key) and an optional chained cause.

Manifesto:
    - **Typed Error Hierarchy:** Configuration, resolution and storage
      failures are different types, routed differently by the caller
    - **Explicit Retry Semantics:** Joints never retry; each error states
      whether the calling engine may
    - **Rich Context:** Errors carry the entity names and keys involved
    - **Error Chaining:** Original exceptions are preserved as cause

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                       JoineryError                           │
        │  (category, retryable, context, cause)                       │
        ├─────────────────────────────────────────────────────────────┤
        │                                                              │
        │  ConfigError         ResolutionError      StorageError       │
        │  (CONFIG)            (LOOKUP)             (STORAGE)          │
        │     │                   │                                    │
        │  MissingConfigError  ParentNotFoundError                     │
        │  InvalidConfigError  MissingExternalIdError                  │
        └─────────────────────────────────────────────────────────────┘

Examples:
    >>> error = ParentNotFoundError("Account", "P1")
    >>> error.category
    <ErrorCategory.LOOKUP: 'LOOKUP'>
    >>> error.retryable
    False

    >>> error = MissingExternalIdError("Account", "P1").with_context(hook="prepare")
    >>> error.context.hook
    'prepare'

Guardrails:
    ❌ DON'T: Raise generic Exception from a hook
    ✅ DO: Use the matching JoineryError subclass

    ❌ DON'T: Swallow a ResolutionError raised by an enhanced prepare
    ✅ DO: Let it reject the hook so the record is not sent outward

Tags:
    error-handling, exception-hierarchy, error-context, joinery
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Standard error categories for classification and routing.

    Attributes:
        CONFIG: Missing or invalid joint options
        LOOKUP: A relationship could not be resolved
        STORAGE: A collection rejected a read or write
        INTERNAL: Bugs, unexpected state
        UNKNOWN: Uncategorized errors
    """

    CONFIG = "CONFIG"             # Missing option, invalid option
    LOOKUP = "LOOKUP"             # Parent missing, external id missing
    STORAGE = "STORAGE"           # Collection read/write failures
    INTERNAL = "INTERNAL"         # Bugs, unexpected state
    UNKNOWN = "UNKNOWN"           # Uncategorized errors


@dataclass
class ErrorContext:
    """
    Structured metadata context for errors.

    Only fields that are set end up in ``to_dict()``; anything without a
    dedicated field goes into ``metadata``.

    Attributes:
        parent_entity: Name of the parent entity of the joint
        child_entity: Name of the child entity of the joint
        hook: Hook that was running (``prepare``, ``cleanse``, ...)
        lookup_field: Foreign-key field of the joint
        key: Identifier being resolved when the error happened
        metadata: Additional key-value pairs
    """

    parent_entity: str | None = None
    child_entity: str | None = None
    hook: str | None = None
    lookup_field: str | None = None
    key: Any | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["parent_entity", "child_entity", "hook", "lookup_field", "key"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class JoineryError(Exception):
    """
    Base exception for all joinery errors.

    Subclasses set ``default_category`` and ``default_retryable``; both can be
    overridden per instance.

    Examples:
        >>> error = JoineryError("boom")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.to_dict()["error_type"]
        'JoineryError'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> JoineryError:
        """
        Add context to this error (fluent API).

        Usage:
            raise ParentNotFoundError("Account", key).with_context(
                child_entity="Contact",
                hook="prepare",
            )
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIGURATION ERRORS (Never Retryable)
# =============================================================================


class ConfigError(JoineryError):
    """
    Configuration error.

    Raised synchronously while a joint is being built. No joint is returned.
    """

    default_category = ErrorCategory.CONFIG
    default_retryable = False


class MissingConfigError(ConfigError):
    """Required option is missing."""

    def __init__(self, key: str, message: str | None = None):
        self.key = key
        super().__init__(message or f"Missing required option {key} in joint config")


class InvalidConfigError(ConfigError):
    """Option value is invalid."""

    def __init__(self, key: str, value: Any, message: str | None = None):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid option {key} in joint config: {value!r}")


# =============================================================================
# RESOLUTION ERRORS
# =============================================================================


class ResolutionError(JoineryError):
    """
    A relationship could not be resolved.

    The enhanced prepare transform raises these when a child record cannot be
    given its parent's external identifier. Not retryable by the joint; the
    engine may retry once the parent has been synchronized.
    """

    default_category = ErrorCategory.LOOKUP
    default_retryable = False

    def __init__(self, message: str, *, entity: str, key: Any, **kwargs: Any):
        self.entity = entity
        self.key = key
        super().__init__(message, **kwargs)
        self.context.parent_entity = entity
        self.context.key = key


class ParentNotFoundError(ResolutionError):
    """No parent record exists for the local key held in the snapshot."""

    def __init__(self, entity: str, key: Any, **kwargs: Any):
        super().__init__(
            f"Unable to locate parent id {entity} {key!s}",
            entity=entity,
            key=key,
            **kwargs,
        )


class MissingExternalIdError(ResolutionError):
    """The parent exists but has not been assigned an external identifier."""

    def __init__(self, entity: str, key: Any, **kwargs: Any):
        super().__init__(
            f"Parent {entity} {key!s} does not have an external id yet",
            entity=entity,
            key=key,
            **kwargs,
        )


# =============================================================================
# STORAGE ERRORS
# =============================================================================


class StorageError(JoineryError):
    """A collection could not carry out a read or write."""

    default_category = ErrorCategory.STORAGE
    default_retryable = False


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def is_retryable(error: Exception) -> bool:
    """Check if an error is retryable."""
    if isinstance(error, JoineryError):
        return error.retryable
    return isinstance(error, (ConnectionError, TimeoutError))


def categorize_error(error: Exception) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, JoineryError):
        return error.category
    if isinstance(error, (TypeError, ValueError)):
        return ErrorCategory.CONFIG
    if isinstance(error, (ConnectionError, OSError)):
        return ErrorCategory.STORAGE
    return ErrorCategory.UNKNOWN


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "JoineryError",
    "ConfigError",
    "MissingConfigError",
    "InvalidConfigError",
    "ResolutionError",
    "ParentNotFoundError",
    "MissingExternalIdError",
    "StorageError",
    "is_retryable",
    "categorize_error",
]
