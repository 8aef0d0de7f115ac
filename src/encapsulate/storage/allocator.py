"""Slot key allocation service.

SlotKeyAllocator is a stateful service that hands out process-wide unique
slot keys, one per behavior application.
"""

from __future__ import annotations

import itertools
import logging
import threading

from encapsulate.core.errors import DuplicateApplicationKeyError
from encapsulate.core.identity import SlotKey

logger = logging.getLogger(__name__)


class SlotKeyAllocator:
    """Allocates slot keys from a monotonic counter.

    Issued indices always form the contiguous range [start, last], so the
    allocator only remembers the range bounds. An index at or below the
    last issued one is reported instead of silently letting two
    applications share a slot.

    Args:
        start: First index to hand out.
    """

    def __init__(self, start: int = 0):
        """Initialize the allocator.

        Args:
            start: First index to hand out.
        """
        self._counter = itertools.count(start)
        self._start = start
        self._last = start - 1
        self._lock = threading.Lock()

    def _next_index(self) -> int:
        return next(self._counter)

    def allocate(self, label: str = "") -> SlotKey:
        """Allocate a fresh slot key.

        Args:
            label: Informational label, usually the behavior name.

        Returns:
            Newly allocated SlotKey.

        Raises:
            DuplicateApplicationKeyError: If the counter yields an index that
                was already issued.
        """
        with self._lock:
            index = self._next_index()
            if index <= self._last:
                raise DuplicateApplicationKeyError(
                    f"Slot key index {index} was already issued (label={label!r})"
                )
            self._last = index
        key = SlotKey(index=index, label=label)
        logger.debug("Allocated slot key %s", key)
        return key

    def is_issued(self, key: SlotKey) -> bool:
        """Check whether a key was handed out by this allocator.

        Args:
            key: Slot key to check.

        Returns:
            True if the key's index was issued here, False otherwise.
        """
        return self._start <= key.index <= self._last

    @property
    def issued_count(self) -> int:
        """Number of keys handed out so far."""
        return self._last - self._start + 1


# Module-level allocator instance
_allocator = SlotKeyAllocator()


def get_allocator() -> SlotKeyAllocator:
    """Access the process-wide slot key allocator.

    Returns:
        The process-local SlotKeyAllocator instance.
    """
    return _allocator
