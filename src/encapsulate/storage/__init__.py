"""Stateful services: slot key allocation and private context safekeeping."""

from encapsulate.storage.allocator import SlotKeyAllocator, get_allocator
from encapsulate.storage.protocol import ContextStore
from encapsulate.storage.safekeeping import SafekeepingStore, get_store

__all__ = [
    "ContextStore",
    "SafekeepingStore",
    "get_store",
    "SlotKeyAllocator",
    "get_allocator",
]
