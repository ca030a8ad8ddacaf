# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: errata
"""
Recovery of errata errors from inside foreign exceptions.

Application code often passes an errata error through code that knows
nothing about it, which either chains it (``raise Other(...) from err``) or
interpolates it into a new message (``Other(f"failed: {err}")``). Chaining
keeps the object reachable; interpolation keeps only the invisible marker
embedded in the error's text. Either way, the error can be recovered while
the registry still holds it.
"""

from __future__ import annotations

import logging

from errata import hidden
from errata.base import StructuredError, safe_str
from errata.chain import iter_chain
from errata.registry import ErrorRegistry, registry

logger = logging.getLogger(__name__)


def recover(
    err: BaseException, errors: ErrorRegistry | None = None
) -> StructuredError | None:
    """Find a registered errata error inside ``err``.

    Each link of the chain is checked in order: first by identity against the
    registry, then by the markers in its text.

    Args:
        err: The foreign exception to search
        errors: Registry to consult (the process-wide one if None)

    Returns:
        The recovered error, or None when nothing registered was found
    """
    if errors is None:
        errors = registry
    for link in iter_chain(err):
        if isinstance(link, StructuredError) and errors.holds(link):
            return link
        for ident in hidden.extract(safe_str(link)):
            found = errors.get(ident)
            if found is not None:
                return found
    logger.debug("No registered error found inside %s", type(err).__name__)
    return None
