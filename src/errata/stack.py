# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: errata
"""
Call stack capture.

Errors record where they were built, not where they were raised: the stack is
taken at construction, starting with the code that called into errata.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from types import FrameType

from errata.config import get_settings

_PACKAGE = __name__.partition(".")[0]


@dataclass(frozen=True, slots=True)
class Frame:
    """A single captured call site."""

    function: str
    module: str
    filename: str
    lineno: int

    @property
    def location(self) -> str:
        return f"{self.module}.{self.function} ({self.filename}:{self.lineno})"

    def __str__(self) -> str:
        return self.location

    @classmethod
    def from_frame(cls, frame: FrameType) -> Frame:
        code = frame.f_code
        return cls(
            function=code.co_qualname,
            module=frame.f_globals.get("__name__", "?"),
            filename=os.path.basename(code.co_filename),
            lineno=frame.f_lineno,
        )


def _is_internal(frame: FrameType) -> bool:
    name = frame.f_globals.get("__name__", "")
    return name == _PACKAGE or name.startswith(_PACKAGE + ".")


def capture(skip: int = 0, limit: int | None = None) -> tuple[Frame, ...]:
    """Capture the stack of the code calling into errata.

    Frames are ordered most recent call first. errata's own frames at the top
    of the stack are dropped, then ``skip`` further frames.

    Args:
        skip: Number of caller frames to drop after errata's own frames
        limit: Maximum number of frames to keep (settings default if None)

    Returns:
        The captured frames
    """
    if limit is None:
        limit = get_settings().stack_limit

    frame: FrameType | None = sys._getframe(1)
    while frame is not None and _is_internal(frame):
        frame = frame.f_back
    while frame is not None and skip > 0:
        frame = frame.f_back
        skip -= 1

    frames: list[Frame] = []
    while frame is not None and len(frames) < limit:
        frames.append(Frame.from_frame(frame))
        frame = frame.f_back
    return tuple(frames)
