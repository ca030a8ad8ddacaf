# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: errata
"""Bounded registry of recently constructed errors."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from errata.config import get_settings

if TYPE_CHECKING:
    from errata.base import StructuredError

logger = logging.getLogger(__name__)


class ErrorRegistry:
    """Fixed-size ring of the most recently constructed errors.

    Each error claims a sequence id; the id modulo the capacity selects the
    slot, so a new error silently evicts whatever occupied its slot before.
    Lookups only succeed while the error is still in its slot.
    """

    def __init__(self, capacity: int) -> None:
        """Initialize the ring.

        Args:
            capacity: Number of slots, must be positive

        Raises:
            ValueError: If capacity is not positive
        """
        self._lock = threading.Lock()
        self._next_id = 0
        self._capacity = 0
        self._slots: list[tuple[int, StructuredError] | None] = []
        self._resize(capacity)

    def _resize(self, capacity: int) -> None:
        if capacity <= 0:
            raise ValueError(f"Registry capacity must be positive, got {capacity}")
        self._capacity = capacity
        self._slots = [None] * capacity

    @property
    def capacity(self) -> int:
        return self._capacity

    def claim(self, error: StructuredError) -> int:
        """Assign the next sequence id to ``error`` and store it in its slot.

        Args:
            error: The newly constructed error

        Returns:
            The sequence id claimed for the error
        """
        with self._lock:
            ident = self._next_id
            self._next_id += 1
            slot = ident % self._capacity
            evicted = self._slots[slot]
            self._slots[slot] = (ident, error)
        if evicted is not None:
            logger.debug("Evicted error %d from registry slot %d", evicted[0], slot)
        return ident

    def get(self, ident: int) -> StructuredError | None:
        """Return the error that claimed ``ident`` if it has not been evicted."""
        with self._lock:
            entry = self._slots[ident % self._capacity]
        if entry is not None and entry[0] == ident:
            return entry[1]
        return None

    def holds(self, error: StructuredError) -> bool:
        """Check whether ``error`` itself still occupies its slot."""
        ident = getattr(error, "id", None)
        if ident is None:
            return False
        return self.get(ident) is error

    def reset(self, capacity: int | None = None) -> None:
        """Empty every slot, optionally changing the capacity.

        Sequence ids keep increasing across resets so that stale ids never
        resolve to newer errors.
        """
        with self._lock:
            self._resize(capacity or self._capacity)

    def __len__(self) -> int:
        with self._lock:
            return sum(1 for entry in self._slots if entry is not None)


# Create a single instance for use throughout the process
registry = ErrorRegistry(get_settings().registry_capacity)
