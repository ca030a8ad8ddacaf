# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: errata
"""
Context snapshots for errata errors.

A snapshot is the flattened key/value view of everything known about the
circumstances of an error when it was built: process-wide values, the
active operation scopes, and (at the highest precedence) data supplied
explicitly. Keys are normalized so that ``"UserId"``, ``"user-id"`` and
``"user_id"`` land on the same entry.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, TypeAlias

from errata import ops

ContextMap: TypeAlias = dict[str, Any]

# Anything but a Unicode letter or digit
_SEPARATORS = re.compile(r"[\W_]+")


def normalize_key(key: str) -> str:
    """Case-fold ``key`` and collapse separators into single underscores."""
    normalized = _SEPARATORS.sub("_", str(key).casefold()).strip("_")
    return normalized or "_"


def merge(*layers: Mapping[str, Any] | None) -> ContextMap:
    """Flatten ``layers`` into a new map, later layers winning on collision."""
    merged: ContextMap = {}
    for layer in layers:
        if not layer:
            continue
        for key, value in layer.items():
            merged[normalize_key(key)] = value
    return merged


def snapshot(data: Mapping[str, Any] | None = None) -> ContextMap:
    """Capture the active operation context, overlaid with ``data``.

    The result is a copy: later changes to operations do not affect it.
    """
    return merge(ops.as_map(), data)
