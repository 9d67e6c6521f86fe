"""
Structured logging for joinery.

Joints log through structlog with snake_case event names and key/value
fields, so a sync engine's log aggregation can filter on ``parent_entity``,
``hook`` or ``lookup_id`` without parsing messages.

Architecture:
    ::

        configure_logging(level="INFO", json_format=True, service="joinery")
            ↓
        structlog processor chain:
          1. merge_contextvars (whatever the host process bound)
          2. TimeStamper (iso)
          3. add_log_level
          4. service metadata
          5. ECS field names (JSON only)
          6. JSONRenderer (or ConsoleRenderer for dev)

        log = get_logger(__name__, parent_entity="Account")
        log.warning("parent_not_found", lookup_id="EXT-1")

Loggers are lazy: ``get_logger`` binds nothing until the first log call, so a
module-level logger follows later ``configure_logging`` or ``capture_logs``.

Examples:
    >>> from joinery.core.logging import configure_logging, get_logger
    >>> configure_logging(level="DEBUG", json_format=False)
    >>> log = get_logger(__name__)
    >>> log.debug("joint_built", parent_entity="Account", child_entity="Contact")

Tags:
    logging, structlog, observability, json-logging, joinery
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

# event key -> Elastic Common Schema name
_ECS_FIELDS = {
    "timestamp": "@timestamp",
    "level": "log.level",
    "logger_name": "log.logger",
}


def _service_metadata(service: str) -> Processor:
    def add_service(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service.name", service)
        return event_dict

    return add_service


def _ecs_field_names(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    for key, ecs_key in _ECS_FIELDS.items():
        if key in event_dict:
            event_dict[ecs_key] = event_dict.pop(key)
    return event_dict


def _level_number(level: str) -> int:
    number = logging.getLevelName(level.upper())
    if not isinstance(number, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return number


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    service: str = "joinery",
) -> None:
    """Install the joinery processor chain as the global structlog config.

    Args:
        level: Minimum level emitted (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: True for JSON, False for console, None for JSON when
            stdout is not a tty
        service: Value of ``service.name`` on every event
    """
    if json_format is None:
        json_format = not sys.stdout.isatty()

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        _service_metadata(service),
    ]
    if json_format:
        processors += [_ecs_field_names, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(_level_number(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None, **initial_values: Any) -> Any:
    """Get a lazy structlog logger.

    Args:
        name: Logger name (usually ``__name__``), logged as ``logger_name``
        **initial_values: Fields carried on every event of this logger
    """
    if name is not None:
        initial_values["logger_name"] = name
    return structlog.get_logger(**initial_values)


__all__ = ["configure_logging", "get_logger"]
