"""
Joinery - relationship joints for record synchronization.

A joint keeps denormalized copies of fields consistent across a parent and a
child collection linked by a foreign key:

- joinery.core: errors, logging, settings, the Collection protocol,
  field-path helpers and an in-memory collection
- joinery.joints: JointConfig, option validation and the Joint hooks
"""

__version__ = "0.1.0"

from joinery.core import (  # noqa: F401
    Collection,
    ConfigError,
    InMemoryCollection,
    JoineryError,
    MissingExternalIdError,
    ParentNotFoundError,
    ResolutionError,
)
from joinery.joints import Joint, JointConfig, build_joint, check_options  # noqa: F401

__all__ = [
    "__version__",
    "Collection",
    "ConfigError",
    "InMemoryCollection",
    "JoineryError",
    "MissingExternalIdError",
    "ParentNotFoundError",
    "ResolutionError",
    "Joint",
    "JointConfig",
    "build_joint",
    "check_options",
]
