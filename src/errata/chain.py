# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: errata
"""
Causal chain traversal.

The chain of an error is the sequence reached by repeatedly unwrapping it.
errata errors unwrap to their cause, and only wrapping errors have one.
Any other exception unwraps the way Python's tracebacks chain it: to its
explicit ``__cause__``, or else to its implicit ``__context__`` unless that
was suppressed with ``raise ... from None``.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TypeVar

from errata.base import StructuredError

E = TypeVar("E", bound=BaseException)


def unwrap(err: BaseException | None) -> BaseException | None:
    """Return the next link of the chain after ``err``, if any."""
    if err is None:
        return None
    if isinstance(err, StructuredError):
        method = getattr(err, "unwrap", None)
        return method() if method is not None else None
    if err.__cause__ is not None:
        return err.__cause__
    if not err.__suppress_context__:
        return err.__context__
    return None


def iter_chain(err: BaseException | None) -> Iterator[BaseException]:
    """Yield ``err`` and every link below it, each at most once."""
    seen: set[int] = set()
    while err is not None and id(err) not in seen:
        seen.add(id(err))
        yield err
        err = unwrap(err)


def root_cause(err: BaseException | None) -> BaseException | None:
    """Return the last link of the chain starting at ``err``."""
    last = None
    for last in iter_chain(err):
        pass
    return last


def is_error(err: BaseException | None, target: BaseException) -> bool:
    """Check whether ``target`` is ``err`` or appears anywhere in its chain."""
    return any(link is target or link == target for link in iter_chain(err))


def as_error(err: BaseException | None, error_type: type[E]) -> E | None:
    """Return the first link of the chain that is an instance of ``error_type``."""
    for link in iter_chain(err):
        if isinstance(link, error_type):
            return link
    return None
