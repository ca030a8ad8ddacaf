# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: errata
"""
Structured error values.

This module provides the two concrete error types, ``RootError`` (no cause)
and ``WrappingError`` (always has a cause), and the ``new``/``wrap`` entry
points that build them. Every error carries its formatted text, the clean
template it was formatted from, explicit key/value data, a snapshot of the
operation context at construction, and the call stack of the code that
built it.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from errata import hidden
from errata.config import get_settings
from errata.context import ContextMap, normalize_key, snapshot
from errata.registry import registry
from errata.stack import Frame, capture

if TYPE_CHECKING:
    from errata.printer import MultiLinePrinter


def safe_str(obj: object) -> str:
    """``str(obj)``, or a placeholder when rendering it fails."""
    try:
        return str(obj)
    except Exception:
        return f"<unprintable {type(obj).__name__}>"


class StructuredError(Exception):
    """
    Base class for errata errors.
    Not instantiated directly: build errors with ``new`` and ``wrap``.
    """

    text: str
    template: str
    data: ContextMap
    context: Mapping[str, Any]
    stack: tuple[Frame, ...]
    id: int

    def __new__(cls, *args: Any, **kwargs: Any) -> StructuredError:
        if cls is StructuredError:
            raise TypeError(
                "Do not instantiate StructuredError directly; use new() or wrap()."
            )
        return super().__new__(cls)

    def __init__(
        self,
        text: str,
        template: str,
        *,
        stack: tuple[Frame, ...] = (),
        display_text: str | None = None,
    ) -> None:
        """Initialize and register a new error.

        Args:
            text: Fully formatted message
            template: Message before argument substitution
            stack: Frames captured at the construction site
            display_text: Formatted message safe for display (defaults to text)
        """
        super().__init__(text)
        self.text = text
        self.template = template
        self.stack = stack
        self.context = MappingProxyType(snapshot())
        self.data = {
            "error": hidden.clean(template),
            "error_text": hidden.clean(display_text if display_text is not None else text),
            "error_type": f"errata.{type(self).__qualname__}",
        }
        if stack:
            self.data["error_location"] = stack[0].location
        self.id = registry.claim(self)
        self._marker = hidden.to_marker(self.id) if get_settings().embed_marker else ""

    def op(self, name: str) -> StructuredError:
        """Set the operation name and return self for chaining."""
        self.data["error_op"] = name
        return self

    def with_data(self, key: str, value: Any) -> StructuredError:
        """Add a key/value pair to the error's data and return self for chaining.

        Keys are normalized (see ``errata.context.normalize_key``). Values
        tagged with ``hidden.hide`` are stored tagged.
        """
        self.data[normalize_key(key)] = value
        return self

    def error_clean(self) -> str:
        """The message template, without any arguments substituted."""
        return self.template

    def fill(self, mapping: dict[str, Any]) -> None:
        """Write the merged data of this error and its causes into ``mapping``.

        Closer to the top wins: this error's data, then its context, then
        the data and context of each cause further down the chain.
        """
        from errata.chain import iter_chain

        layers: list[Mapping[str, Any]] = []
        for link in iter_chain(self):
            if isinstance(link, StructuredError):
                layers.append(link.data)
                layers.append(link.context)
        merged: dict[str, Any] = {}
        for layer in reversed(layers):
            merged.update(layer)
        mapping.update(merged)

    def root_cause(self) -> BaseException:
        """The last link of this error's causal chain."""
        from errata.chain import root_cause

        return root_cause(self) or self

    def multi_line_printer(self) -> MultiLinePrinter:
        """A printer writing this error's trace one line per call."""
        from errata.printer import MultiLinePrinter

        return MultiLinePrinter(self)

    def __reduce__(self) -> tuple[Any, ...]:
        # Copies keep the original's id and are not registered again
        state = dict(self.__dict__)
        state["data"] = dict(self.data)
        state["context"] = dict(self.context)
        return _restore, (type(self), state)

    def __str__(self) -> str:
        return self.text + self._marker

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.text!r})"


class RootError(StructuredError):
    """An error with no cause. Deliberately has no ``unwrap`` method."""


class WrappingError(StructuredError):
    """An error caused by another error, errata's or foreign."""

    def __init__(
        self,
        text: str,
        template: str,
        cause: BaseException,
        *,
        stack: tuple[Frame, ...] = (),
        display_text: str | None = None,
    ) -> None:
        if cause is None:
            raise ValueError("WrappingError requires a cause")
        self.cause = cause
        super().__init__(text, template, stack=stack, display_text=display_text)
        self.__cause__ = cause

    def unwrap(self) -> BaseException:
        return self.cause


def _restore(cls: type[StructuredError], state: dict[str, Any]) -> StructuredError:
    err = Exception.__new__(cls)
    Exception.__init__(err, state["text"])
    state["context"] = MappingProxyType(state["context"])
    err.__dict__.update(state)
    if "cause" in state:
        err.__cause__ = state["cause"]
    return err


def _format(template: str, args: tuple[Any, ...]) -> str:
    if not args:
        return template
    # Same convention as logging: a lone mapping supplies named arguments
    values: Any = args
    if len(args) == 1 and isinstance(args[0], Mapping) and args[0]:
        values = args[0]
    try:
        return template % values
    except Exception:
        return f"{template} {' '.join(safe_str(arg) for arg in args)}"


def _build(template: str, args: tuple[Any, ...], skip: int) -> StructuredError:
    stack = capture(skip=skip)
    revealed = tuple(
        arg.reveal() if isinstance(arg, hidden.Sensitive) else arg for arg in args
    )
    text = hidden.clean(_format(template, revealed))
    # Nested errata errors contribute their own masked text
    masked = tuple(
        arg.data.get("error_text", arg.text) if isinstance(arg, StructuredError) else arg
        for arg in args
    )
    display_text = _format(template, masked)
    for arg in args:
        if isinstance(arg, BaseException):
            return WrappingError(
                text, template, arg, stack=stack, display_text=display_text
            )
    return RootError(text, template, stack=stack, display_text=display_text)


def new(template: str, *args: Any) -> StructuredError:
    """Build an error from a printf-style template and its arguments.

    If any argument is an exception the result is a ``WrappingError`` caused
    by the first one; otherwise it is a ``RootError``.

    Example:
        ```python
        raise errata.new("unable to dial %s: %s", addr, exc).op("dial")
        ```
    """
    return _build(template, args, skip=0)


def new_offset(offset: int, template: str, *args: Any) -> StructuredError:
    """Like ``new``, but the stack starts ``offset`` frames above the caller.

    Useful for helpers that build errors on behalf of their own callers.
    """
    return _build(template, args, skip=offset)


def wrap(err: BaseException | None) -> StructuredError | None:
    """Wrap an arbitrary exception into a structured error.

    - ``None`` gives ``None``.
    - errata errors are returned unchanged.
    - Otherwise, if an errata error that is still registered can be found
      inside ``err`` (through its chain or markers in its text), that error
      becomes the cause; if not, ``err`` itself is the cause.
    """
    if err is None:
        return None
    if isinstance(err, StructuredError):
        return err

    from errata.bridge import recover

    stack = capture()
    text = hidden.clean(safe_str(err))
    cause = recover(err)
    return WrappingError(text, text, cause if cause is not None else err, stack=stack)
