# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: errata
"""
Operation context for errata.

An operation is a named scope carrying key/value pairs. Scopes nest: values
set on an outer operation are inherited by inner ones, and inner values win
on collision. Errors snapshot the active values when they are constructed.

Scopes are tracked in a context variable, so each thread and each asyncio
task sees its own stack, and tasks inherit the stack of the code that
created them.

Example:
    ```python
    with ops.begin("charge_card").set("customer", customer_id):
        ...
        raise errata.new("card declined: %s", reason)
    ```
"""

from __future__ import annotations

import threading
from contextvars import ContextVar
from types import TracebackType
from typing import Any

# Process-wide values, lowest precedence
_GLOBAL_CONTEXT: dict[str, Any] = {}
_GLOBAL_LOCK = threading.Lock()

# Innermost scope last
_SCOPES: ContextVar[tuple[dict[str, Any], ...]] = ContextVar(
    "errata_op_scopes", default=()
)


class Op:
    """A running operation. Create with ``begin``."""

    def __init__(self, name: str) -> None:
        self.name = name
        parents = _SCOPES.get()
        self._values: dict[str, Any] = {"op": name}
        root = _root_op(parents)
        if root is not None:
            self._values["root_op"] = root
        _SCOPES.set(parents + (self._values,))

    def set(self, key: str, value: Any) -> Op:
        """Set a value on this operation and return self for chaining."""
        self._values[key] = value
        return self

    def end(self) -> None:
        """Leave the operation, removing its scope from the active stack.

        Scopes are matched by identity, so ending out of order leaves the
        other scopes in place. Ending a scope the current context does not
        hold is a no-op.
        """
        scopes = _SCOPES.get()
        remaining = tuple(scope for scope in scopes if scope is not self._values)
        if len(remaining) != len(scopes):
            _SCOPES.set(remaining)

    def __enter__(self) -> Op:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.end()


def _root_op(scopes: tuple[dict[str, Any], ...]) -> str | None:
    for scope in scopes:
        if "op" in scope:
            return scope.get("root_op", scope["op"])
    return None


def begin(name: str) -> Op:
    """Begin a named operation nested in the currently active one."""
    return Op(name)


def set_global(key: str, value: Any) -> None:
    """Set a value visible to every operation in the process."""
    with _GLOBAL_LOCK:
        _GLOBAL_CONTEXT[key] = value


def clear_global(key: str | None = None) -> None:
    """Remove one global value, or all of them when ``key`` is None."""
    with _GLOBAL_LOCK:
        if key is None:
            _GLOBAL_CONTEXT.clear()
        else:
            _GLOBAL_CONTEXT.pop(key, None)


def as_map() -> dict[str, Any]:
    """Flatten global values and the active scopes into a new dict.

    Precedence increases from global values through the outermost scope to
    the innermost one.
    """
    with _GLOBAL_LOCK:
        result = dict(_GLOBAL_CONTEXT)
    for scope in _SCOPES.get():
        result.update(scope)
    return result
