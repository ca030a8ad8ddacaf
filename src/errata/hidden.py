# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: errata
"""
Hidden values and invisible markers.

Two related tools live here:

- ``Sensitive`` tags a value so that it is masked whenever it is displayed,
  unless the active viewer is allowed to see cleartext (see ``revealing``).
- Markers are sequences of private-use unicode characters that encode an
  integer inside a piece of text. They are invisible in most terminals and
  are stripped by ``clean``. Errors embed their registry id in their text this
  way so that the id survives string interpolation by foreign code.
"""

from __future__ import annotations

import contextlib
import re
from collections.abc import Generator
from contextvars import ContextVar
from typing import Any, Generic, TypeVar

T = TypeVar("T")

MASK = "******"

_BEGIN = "\ue010"
_END = "\ue011"
_DIGIT_BASE = 0xE000  # sixteen digits: U+E000..U+E00F

_MARKER_RE = re.compile(f"{_BEGIN}([\ue000-\ue00f]+){_END}")

_reveal: ContextVar[bool] = ContextVar("errata_reveal_sensitive", default=False)


class Sensitive(Generic[T]):
    """Marker for a value that must not be shown in cleartext by default.

    The wrapped value is kept as-is. ``str`` and ``repr`` are always masked;
    use ``reveal`` or ``display`` inside ``revealing()`` to obtain it.
    """

    __slots__ = ("_value",)

    def __init__(self, value: T) -> None:
        self._value = value

    def reveal(self) -> T:
        return self._value

    def __str__(self) -> str:
        return MASK

    def __repr__(self) -> str:
        return f"Sensitive({MASK})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Sensitive):
            return NotImplemented
        return self._value == other._value

    def __hash__(self) -> int:
        return hash((Sensitive, self._value))


def hide(value: T) -> Sensitive[T]:
    """Tag ``value`` as sensitive. Already tagged values are returned unchanged."""
    if isinstance(value, Sensitive):
        return value
    return Sensitive(value)


def is_revealing() -> bool:
    """Whether the current viewer may see sensitive values in cleartext."""
    return _reveal.get()


@contextlib.contextmanager
def revealing(enabled: bool = True) -> Generator[None, None, None]:
    """Switch the active viewer for the enclosed block.

    Example:
        ```python
        with revealing():
            logger.info("login failed", password=display(err.data["password"]))
        ```
    """
    token = _reveal.set(enabled)
    try:
        yield
    finally:
        _reveal.reset(token)


def display(value: Any) -> Any:
    """Resolve a possibly sensitive value for display to the active viewer."""
    if isinstance(value, Sensitive):
        return value.reveal() if _reveal.get() else MASK
    return value


def to_marker(ident: int) -> str:
    """Encode a non-negative integer as an invisible marker."""
    if ident < 0:
        raise ValueError(f"Marker ids must be non-negative, got {ident}")
    digits = "".join(chr(_DIGIT_BASE + int(d, 16)) for d in format(ident, "x"))
    return f"{_BEGIN}{digits}{_END}"


def extract(text: str) -> list[int]:
    """Return the ids of every marker in ``text``, in order of appearance."""
    ids = []
    for match in _MARKER_RE.finditer(text):
        hex_digits = "".join(format(ord(c) - _DIGIT_BASE, "x") for c in match.group(1))
        ids.append(int(hex_digits, 16))
    return ids


def clean(text: str) -> str:
    """Strip every marker from ``text``."""
    return _MARKER_RE.sub("", text)
