# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: errata
"""
Structured logging support for errata errors.

This module provides a structlog processor that expands errata errors found
in log events into their merged data and multi-line trace, and a helper to
configure structlog with it. errata itself only logs through the standard
``logging`` module, at debug level, under the ``errata`` logger.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from typing import Any

from structlog.types import EventDict, Processor

from errata import hidden
from errata.config import get_settings

ERROR_KEYS = ("error", "exc_info", "exception")


def _find_error(event_dict: EventDict) -> BaseException | None:
    for key in ERROR_KEYS:
        value = event_dict.get(key)
        # exc_info=True, as passed by logger.exception()
        if value is True:
            value = sys.exc_info()[1]
        if isinstance(value, BaseException):
            return value
        if isinstance(value, tuple) and len(value) == 3 and isinstance(value[1], BaseException):
            return value[1]
    return None


def add_error_fields(_: Any, __: str, event_dict: EventDict) -> EventDict:
    """Add the data and trace of an errata error to log entries.

    Args:
        _: The logger instance
        __: The log method name
        event_dict: The event dictionary to modify

    Returns:
        The modified event dictionary
    """
    from errata.base import StructuredError
    from errata.printer import format_trace

    error = _find_error(event_dict)
    if not isinstance(error, StructuredError):
        return event_dict

    fields: dict[str, Any] = {}
    error.fill(fields)
    for key, value in fields.items():
        value = hidden.display(value)
        if isinstance(value, str):
            value = hidden.clean(value)
        # Values explicitly passed to the log call take precedence
        event_dict.setdefault(key, value)
    if event_dict.get("error") is error:
        event_dict["error"] = error.data["error_text"]
    event_dict["error_trace"] = format_trace(error, masked=True)
    return event_dict


def configure_logging(level: str | None = None) -> logging.Logger:
    """Set up errata's own standard library logger.

    Args:
        level: The log level (settings default if None)

    Returns:
        The configured logger
    """
    logger = logging.getLogger("errata")
    logger.setLevel(level or get_settings().log_level)
    if not logger.handlers:
        logger.addHandler(logging.NullHandler())
    return logger


def configure_structured_logging(
    level: int = logging.INFO, json_format: bool = True, **processors: Processor
) -> dict[str, Callable[..., Any]]:
    """Configure structlog to render errata errors.

    Args:
        level: The logging level
        json_format: Whether to use JSON format
        **processors: Additional log processors

    Returns:
        Dictionary of configured processors
    """
    from structlog import configure
    from structlog.processors import JSONRenderer, TimeStamper, format_exc_info
    from structlog.stdlib import (
        BoundLogger,
        LoggerFactory,
        add_log_level,
        filter_by_level,
    )

    default_processors: list[Processor] = [
        filter_by_level,
        add_log_level,
        add_error_fields,
        TimeStamper(fmt="iso"),
        format_exc_info,
    ]

    # Additional processors run before rendering
    if processors:
        default_processors.extend(processors.values())

    if json_format:
        default_processors.append(JSONRenderer(default=str))
    else:
        from structlog.dev import ConsoleRenderer

        default_processors.append(ConsoleRenderer())

    configure(
        processors=default_processors,
        wrapper_class=BoundLogger,
        context_class=dict,
        logger_factory=LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Configure standard library logging
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[logging.StreamHandler()],
    )

    return {"add_error_fields": add_error_fields}
