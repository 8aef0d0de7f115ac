"""Tests for the safekeeping store.

Critical Invariants:
- Contexts are created lazily and exactly once per (receiver, slot key)
- Receivers keep their public surface and are never kept alive by the store
- Racing first calls build a single context
"""

import copy
import gc
import pickle
import threading
import time
import weakref

import pytest

from encapsulate import InvalidReceiverError, Proxy, SafekeepingStore, apply, behavior, get_store
from encapsulate.core.proxy import enumerate_methods, proxy_target
from encapsulate.storage import ContextStore
from encapsulate.storage.safekeeping import SLOT_ATTRIBUTE


class Receiver:
    def greet(self):
        return "hi"


def test_store_satisfies_protocol(store):
    assert isinstance(store, ContextStore)


def test_context_created_lazily(store, allocator):
    receiver = Receiver()
    key = allocator.allocate()

    assert not store.has_context(receiver, key)

    context = store.get_or_create(receiver, key)

    assert store.has_context(receiver, key)
    assert isinstance(context, Proxy)
    assert proxy_target(context) is receiver


def test_context_creation_is_idempotent(store, allocator):
    """CRITICAL: The same pair always yields the identical context."""
    receiver = Receiver()
    key = allocator.allocate()

    first = store.get_or_create(receiver, key)
    second = store.get_or_create(receiver, key)

    assert first is second


def test_slot_keys_partition_contexts(store, allocator):
    receiver = Receiver()
    key_a = allocator.allocate("A")
    key_b = allocator.allocate("B")

    ctx_a = store.get_or_create(receiver, key_a)
    ctx_b = store.get_or_create(receiver, key_b)

    assert ctx_a is not ctx_b
    assert list(store.slot_keys(receiver)) == [key_a, key_b]


def test_receivers_partition_contexts(store, allocator):
    key = allocator.allocate()
    r1, r2 = Receiver(), Receiver()

    assert store.get_or_create(r1, key) is not store.get_or_create(r2, key)


def test_receiver_public_surface_is_not_altered(store, allocator):
    """CRITICAL: Safekeeping never changes the receiver's public surface.

    Why: The only trace on the receiver is one underscore attribute, which
    proxies and installed methods never enumerate.
    """
    receiver = Receiver()
    receiver.label = "r"
    before_methods = enumerate_methods(receiver)

    store.get_or_create(receiver, allocator.allocate())

    assert enumerate_methods(receiver) == before_methods
    public = {k: v for k, v in vars(receiver).items() if not k.startswith("_")}
    assert public == {"label": "r"}
    assert set(vars(receiver)) == {"label", SLOT_ATTRIBUTE}


def test_stores_keep_separate_tables_on_one_receiver(allocator):
    first, second = SafekeepingStore(), SafekeepingStore()
    receiver = Receiver()
    key = allocator.allocate()

    ctx_first = first.get_or_create(receiver, key)

    assert not second.has_context(receiver, key)
    assert second.get_or_create(receiver, key) is not ctx_first
    assert first.get_or_create(receiver, key) is ctx_first


def test_custom_factory(store, allocator):
    receiver = Receiver()
    key = allocator.allocate()
    calls = []

    def factory(obj):
        calls.append(obj)
        return {"owner": obj}

    context = store.get_or_create(receiver, key, factory)
    store.get_or_create(receiver, key, factory)

    assert context == {"owner": receiver}
    assert calls == [receiver]


def test_none_receiver_rejected(store, allocator):
    with pytest.raises(InvalidReceiverError, match="None"):
        store.get_or_create(None, allocator.allocate())


def test_non_weakrefable_receiver_rejected(store, allocator):
    with pytest.raises(InvalidReceiverError, match="weakly referenced"):
        store.get_or_create(object(), allocator.allocate())


def test_store_does_not_keep_receivers_alive(store, allocator):
    """CRITICAL: Collected receivers drop out of the store.

    Why: Slots live exactly as long as their receiver.
    """
    key = allocator.allocate()
    receiver = Receiver()
    context = store.get_or_create(receiver, key)
    receiver_ref = weakref.ref(receiver)
    context_ref = weakref.ref(context)

    del receiver, context
    gc.collect()

    assert receiver_ref() is None
    assert context_ref() is None


@behavior
class HasFriend:
    def befriend(self, other):
        self._friend = other
        return self

    def friend(self):
        return self._friend


def test_cross_referencing_receivers_are_collected(store):
    """CRITICAL: Private state pointing at other receivers does not leak them.

    Why: A context that refers to a receiver must not pin that receiver
    (or itself) in memory once user code drops every reference.
    """

    class Person:
        pass

    apply(Person, HasFriend, store=store)
    a, b = Person(), Person()
    a.befriend(b)
    b.befriend(a)
    assert a.friend() is b

    refs = [weakref.ref(a), weakref.ref(b)]
    del a, b
    gc.collect()

    assert all(ref() is None for ref in refs)


def test_self_referencing_receiver_is_collected(store):
    class Person:
        pass

    apply(Person, HasFriend, store=store)
    narcissus = Person()
    narcissus.befriend(narcissus)
    assert narcissus.friend() is narcissus

    ref = weakref.ref(narcissus)
    del narcissus
    gc.collect()

    assert ref() is None


def test_copies_start_with_fresh_contexts(store, allocator):
    """Copied or unpickled receivers never share the original's contexts."""
    key = allocator.allocate()
    receiver = Receiver()
    context = store.get_or_create(receiver, key)

    shallow = copy.copy(receiver)
    deep = copy.deepcopy(receiver)
    restored = pickle.loads(pickle.dumps(receiver))

    for clone in (shallow, deep, restored):
        assert not store.has_context(clone, key)
        assert store.get_or_create(clone, key) is not context
        assert proxy_target(store.get_or_create(clone, key)) is clone
    assert store.get_or_create(receiver, key) is context


class SlottedReceiver:
    __slots__ = ("__weakref__",)

    def greet(self):
        return "hi"


def test_slotted_receivers_use_weak_side_table(store, allocator):
    """Receivers without a __dict__ are tracked weakly and evicted on collection."""
    key = allocator.allocate()
    receiver = SlottedReceiver()

    context = store.get_or_create(receiver, key)

    assert store.get_or_create(receiver, key) is context
    assert list(store.slot_keys(receiver)) == [key]
    assert len(store._entries) == 1

    del receiver, context
    gc.collect()

    assert store._entries == {}


def test_recycled_id_does_not_see_old_contexts(store, allocator):
    key = allocator.allocate()
    receiver = SlottedReceiver()
    old_context = store.get_or_create(receiver, key)
    old_id = id(receiver)

    del receiver
    gc.collect()

    # CPython may hand the same address to the next object
    newcomer = SlottedReceiver()
    context = store.get_or_create(newcomer, key)

    assert context is not old_context
    assert proxy_target(context) is newcomer
    if id(newcomer) == old_id:
        assert len(store._entries) == 1


def test_clear(store, allocator):
    receiver = Receiver()
    key = allocator.allocate()
    store.get_or_create(receiver, key)

    store.clear()

    assert not store.has_context(receiver, key)


def test_racing_first_calls_build_one_context(store, allocator):
    """CRITICAL: Concurrent first calls for one pair build exactly one context.

    Why: Two contexts would split the receiver's private state.
    """
    receiver = Receiver()
    key = allocator.allocate()
    calls = []
    results = []
    results_lock = threading.Lock()
    barrier = threading.Barrier(8)

    def slow_factory(obj):
        calls.append(obj)
        time.sleep(0.01)
        return object.__new__(Receiver)

    def worker():
        barrier.wait()
        ctx = store.get_or_create(receiver, key, slow_factory)
        with results_lock:
            results.append(ctx)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(calls) == 1
    assert len(results) == 8
    assert all(ctx is results[0] for ctx in results)


def test_unlocked_store_works_single_threaded(allocator):
    store = SafekeepingStore(thread_safe=False)
    receiver = Receiver()
    key = allocator.allocate()

    assert not store.thread_safe
    assert store.get_or_create(receiver, key) is store.get_or_create(receiver, key)


def test_process_wide_store_is_shared():
    assert get_store() is get_store()
