# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: errata
"""
Multi-line rendering of error chains.

The trace of an error lists its message and the frames where it was built,
then each cause in turn:

    connection refused
      at app.client.connect (client.py:42)
      at app.main.run (main.py:10)
    Caused by: [Errno 111] Connection refused

Foreign exceptions in the chain contribute only their message, since errata
captured no stack for them.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Protocol

from errata import hidden
from errata.base import StructuredError, safe_str
from errata.chain import iter_chain

CAUSED_BY = "Caused by: "
FRAME_PREFIX = "  at "


class TextSink(Protocol):
    def write(self, text: str, /) -> object: ...


def _message(err: BaseException, masked: bool) -> str:
    if isinstance(err, StructuredError):
        if masked and not hidden.is_revealing():
            return hidden.clean(safe_str(err.data.get("error_text", err.text)))
        return err.text
    return hidden.clean(safe_str(err))


def iter_trace(err: BaseException, masked: bool = False) -> Iterator[str]:
    """Lazily yield the lines of the trace of ``err``.

    With ``masked``, errata messages show sensitive arguments masked unless
    the active viewer is revealing (see ``hidden.revealing``).
    """
    for depth, link in enumerate(iter_chain(err)):
        message = _message(link, masked)
        yield message if depth == 0 else CAUSED_BY + message
        if isinstance(link, StructuredError):
            for frame in link.stack:
                yield FRAME_PREFIX + frame.location


def format_trace(err: BaseException, masked: bool = False) -> str:
    """Render the whole trace of ``err`` as a single string."""
    return "\n".join(iter_trace(err, masked=masked))


class MultiLinePrinter:
    """Writes the trace of an error one line per call.

    Each call writes the next line (without a newline) to the sink and
    reports whether more lines remain. Once exhausted, further calls write
    nothing and return False.

    Example:
        ```python
        printer = err.multi_line_printer()
        while True:
            more = printer(buf)
            buf.write("\\n")
            if not more:
                break
        ```
    """

    def __init__(self, err: BaseException) -> None:
        self._lines = iter_trace(err)
        self._pending = next(self._lines, None)

    def __call__(self, sink: TextSink) -> bool:
        if self._pending is None:
            return False
        sink.write(self._pending)
        self._pending = next(self._lines, None)
        return self._pending is not None
