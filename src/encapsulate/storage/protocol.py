"""Context store protocol for swappable safekeeping backends.

Usage:
    store = SafekeepingStore()
    apply(Person, HasName, store=store)
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any, Protocol, runtime_checkable

from encapsulate.core.identity import SlotKey


@runtime_checkable
class ContextStore(Protocol):
    """Abstract safekeeping interface. Implementations hold private contexts."""

    def get_or_create(
        self,
        receiver: object,
        slot_key: SlotKey,
        factory: Callable[[object], Any] = ...,
    ) -> Any:
        """Return the context for (receiver, slot_key), building it on first use."""
        ...

    def has_context(self, receiver: object, slot_key: SlotKey) -> bool:
        """Check if a context was materialized for (receiver, slot_key)."""
        ...

    def slot_keys(self, receiver: object) -> Iterator[SlotKey]:
        """Iterate slot keys with a materialized context on receiver."""
        ...

    def clear(self) -> None:
        """Forget every stored context."""
        ...
