# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: errata

"""
Structured errors with context, call stacks and causal chains.
"""

from __future__ import annotations

from errata import hidden, ops
from errata.base import (
    RootError,
    StructuredError,
    WrappingError,
    new,
    new_offset,
    wrap,
)
from errata.chain import as_error, is_error, iter_chain, root_cause, unwrap
from errata.context import ContextMap
from errata.hidden import Sensitive, hide
from errata.logging import configure_logging
from errata.printer import MultiLinePrinter, format_trace, iter_trace

configure_logging()

__all__ = [
    # Error types
    "StructuredError",
    "RootError",
    "WrappingError",
    # Construction
    "new",
    "new_offset",
    "wrap",
    # Chain helpers
    "unwrap",
    "iter_chain",
    "root_cause",
    "is_error",
    "as_error",
    # Rendering
    "MultiLinePrinter",
    "iter_trace",
    "format_trace",
    # Collaborators
    "ContextMap",
    "Sensitive",
    "hide",
    "hidden",
    "ops",
]
