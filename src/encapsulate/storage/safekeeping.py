"""Safekeeping store: lazily created private contexts per receiver.

Contexts are kept on the receiver itself, in one hidden attribute
(``_encapsulate_slots``) holding a table per store. The leading underscore
keeps it out of the public surface: proxies never mirror it and installed
methods never see it. Because the table lives on the receiver, contexts
are collected together with it, even when a behavior's private state
refers back to its own receiver or to another one.

Receivers without an instance ``__dict__`` (slotted objects, classes) fall
back to a side table keyed by identity and guarded by weak references.
A context in that table that refers back to its receiver keeps it alive.

Usage:
    store = SafekeepingStore()
    key = get_allocator().allocate("HasName")

    ctx = store.get_or_create(person, key)
    assert store.get_or_create(person, key) is ctx
"""

from __future__ import annotations

import contextlib
import itertools
import logging
import threading
import weakref
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Any

from encapsulate.config import get_settings
from encapsulate.core.errors import InvalidReceiverError
from encapsulate.core.identity import SlotKey
from encapsulate.core.proxy import build_proxy

logger = logging.getLogger(__name__)

SLOT_ATTRIBUTE = "_encapsulate_slots"
"""Hidden receiver attribute holding an _Attached record."""

_store_tokens = itertools.count()


def _instance_namespace(receiver: object) -> dict[str, Any] | None:
    """Return the receiver's own attribute dict, or None if it has none."""
    try:
        namespace = object.__getattribute__(receiver, "__dict__")
    except AttributeError:
        return None
    # Classes expose a read-only mappingproxy
    if not isinstance(namespace, dict):
        return None
    return namespace


@dataclass(slots=True)
class _Attached:
    """Slot tables carried by one receiver, one table per store.

    ``owner`` is the id of the receiver the tables were attached to, so a
    shallow copy of the receiver's __dict__ does not share its contexts.
    Copies and pickles come back detached.
    """

    owner: int
    tables: dict[int, dict[SlotKey, Any]] = field(default_factory=dict)

    def __reduce__(self) -> tuple[Any, ...]:
        return (_Attached, (-1,))


@dataclass(slots=True)
class _Entry:
    """Contexts stored for one live receiver without a __dict__."""

    ref: weakref.ReferenceType[Any]
    slots: dict[SlotKey, Any] = field(default_factory=dict)


class SafekeepingStore:
    """Per-receiver tables of private contexts.

    Structure:
        receiver._encapsulate_slots.tables[store token] = {slot_key: context}
        _entries[id(receiver)] = _Entry(weakref(receiver), {slot_key: context})

    The second form is only used for receivers without an instance __dict__.
    Stores never share tables: each store owns a token, and clear() moves
    the store to a fresh token.

    Get-or-create is a critical section: when thread_safe is on, racing
    first calls for the same (receiver, slot_key) build exactly one context.

    Args:
        thread_safe: Guard context creation with a lock. Defaults to the
            configured thread_safe setting.
    """

    def __init__(self, thread_safe: bool | None = None):
        """Initialize an empty store.

        Args:
            thread_safe: Guard context creation with a lock. Defaults to the
                configured thread_safe setting.
        """
        if thread_safe is None:
            thread_safe = get_settings().thread_safe
        self._thread_safe = thread_safe
        self._lock: threading.RLock | None = threading.RLock() if thread_safe else None
        self._token = next(_store_tokens)
        self._entries: dict[int, _Entry] = {}

    @property
    def thread_safe(self) -> bool:
        """Whether context creation is guarded by a lock."""
        return self._thread_safe

    def _guard(self) -> contextlib.AbstractContextManager[Any]:
        if self._lock is None:
            return contextlib.nullcontext()
        return self._lock

    def _evict(self, key: int, ref: weakref.ReferenceType[Any]) -> None:
        """Weakref callback: drop the entry of a collected receiver."""
        with self._guard():
            entry = self._entries.get(key)
            # The id may already belong to a newer receiver
            if entry is not None and entry.ref is ref:
                del self._entries[key]
                logger.debug("Evicted %d context(s) of collected receiver", len(entry.slots))

    def _lookup(self, receiver: object) -> _Entry | None:
        entry = self._entries.get(id(receiver))
        if entry is None or entry.ref() is not receiver:
            return None
        return entry

    def _entry_for(self, receiver: object) -> _Entry:
        entry = self._lookup(receiver)
        if entry is not None:
            return entry
        key = id(receiver)
        try:
            ref = weakref.ref(receiver, lambda r, key=key: self._evict(key, r))
        except TypeError as e:
            raise InvalidReceiverError(
                f"{type(receiver).__name__} object has no __dict__, cannot be weakly "
                f"referenced and cannot hold private contexts"
            ) from e
        entry = _Entry(ref=ref)
        self._entries[key] = entry
        return entry

    def _slots(self, receiver: object, create: bool) -> dict[SlotKey, Any] | None:
        """Find (or create) the slot table of this store on a receiver."""
        namespace = _instance_namespace(receiver)
        if namespace is None:
            if create:
                return self._entry_for(receiver).slots
            entry = self._lookup(receiver)
            return entry.slots if entry is not None else None

        attached = namespace.get(SLOT_ATTRIBUTE)
        if not isinstance(attached, _Attached) or attached.owner != id(receiver):
            if not create:
                return None
            attached = namespace[SLOT_ATTRIBUTE] = _Attached(owner=id(receiver))
        slots = attached.tables.get(self._token)
        if slots is None and create:
            slots = attached.tables[self._token] = {}
        return slots

    def get_or_create(
        self,
        receiver: object,
        slot_key: SlotKey,
        factory: Callable[[object], Any] = build_proxy,
    ) -> Any:
        """Return the context for (receiver, slot_key), building it on first use.

        Args:
            receiver: Calling context of an installed method.
            slot_key: Slot key of the application the method belongs to.
            factory: Builds a new context from the receiver.

        Returns:
            The stored context. The same object on every call for the pair.

        Raises:
            InvalidReceiverError: If receiver is None, or has no __dict__ and
                cannot be weakly referenced.
        """
        if receiver is None:
            raise InvalidReceiverError("Cannot hold a private context for None")

        slots = self._slots(receiver, create=False)
        if slots is not None:
            context = slots.get(slot_key)
            if context is not None:
                return context

        with self._guard():
            slots = self._slots(receiver, create=True)
            assert slots is not None
            context = slots.get(slot_key)
            if context is None:
                context = factory(receiver)
                slots[slot_key] = context
                logger.debug(
                    "Materialized context %s for %s at %#x",
                    slot_key,
                    type(receiver).__name__,
                    id(receiver),
                )
            return context

    def has_context(self, receiver: object, slot_key: SlotKey) -> bool:
        """Check if a context was materialized for (receiver, slot_key).

        Args:
            receiver: Object to check.
            slot_key: Slot key to check.

        Returns:
            True if get_or_create() already built the context, False otherwise.
        """
        slots = self._slots(receiver, create=False)
        return slots is not None and slot_key in slots

    def slot_keys(self, receiver: object) -> Iterator[SlotKey]:
        """Iterate slot keys with a materialized context on receiver.

        Args:
            receiver: Object to inspect.

        Yields:
            SlotKey for each materialized context, in creation order.
        """
        slots = self._slots(receiver, create=False)
        if slots is None:
            return
        yield from list(slots)

    def clear(self) -> None:
        """Forget every stored context.

        Tables already attached to receivers are orphaned and go away with
        their receivers.
        """
        with self._guard():
            self._token = next(_store_tokens)
            self._entries.clear()


_store: SafekeepingStore | None = None
_store_lock = threading.Lock()


def get_store() -> SafekeepingStore:
    """Access the process-wide safekeeping store, creating it on first use.

    Returns:
        The process-local SafekeepingStore instance.
    """
    global _store
    if _store is None:
        with _store_lock:
            if _store is None:
                _store = SafekeepingStore()
    return _store
