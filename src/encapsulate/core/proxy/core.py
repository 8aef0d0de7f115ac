"""Proxy factory: forwarding surfaces over a receiver's public methods.

Usage:
    class Counter:
        def __init__(self):
            self.count = 0

        def increment(self):
            self.count += 1
            return self

    counter = Counter()
    proxy = build_proxy(counter)
    assert proxy.increment() is proxy  # self identity rewritten to the proxy
    assert counter.count == 1          # side effects land on the base
    assert not hasattr(proxy, "count")  # only callables are mirrored

A proxy is also the private context a behavior method runs against: its
own ``__dict__`` holds the behavior's state, while every public method of
the receiver stays reachable through the forwarders.

Forwarders and behavior state share that ``__dict__``. Assigning a public
name such as ``self.name = ...`` inside a behavior replaces the ``name``
forwarder for that context; keep private state under underscore names.
The ``_proxy_ref`` and ``_proxy_names`` attributes are reserved.
"""

from __future__ import annotations

import inspect
import weakref
from collections.abc import Callable
from typing import Any

from encapsulate.core.errors import InvalidReceiverError


def _is_method_like(value: Any) -> bool:
    # classmethod objects are not callable when resolved statically
    return callable(value) or isinstance(value, (staticmethod, classmethod))


def enumerate_methods(base: object) -> list[str]:
    """List the public callable attribute names of an object.

    Own and inherited attributes are both considered. Names starting with an
    underscore are private by convention and never enumerated. Attributes are
    resolved statically, so properties are not evaluated.

    Args:
        base: Object to inspect.

    Returns:
        Sorted list of method names.
    """
    names = []
    for name in dir(base):
        if name.startswith("_"):
            continue
        try:
            value = inspect.getattr_static(base, name)
        except AttributeError:
            continue
        if _is_method_like(value):
            names.append(name)
    return names


class Proxy:
    """Forwarding surface over another object's public methods.

    Instances are created by build_proxy(); the class itself carries no
    public methods so it never shadows a forwarded name.
    """

    def __init__(self, ref: weakref.ReferenceType[Any], names: tuple[str, ...]) -> None:
        self._proxy_ref = ref
        self._proxy_names = names

    def __repr__(self) -> str:
        base = self._proxy_ref()
        if base is None:
            return f"<Proxy of collected receiver at {id(self):#x}>"
        return f"<Proxy of {type(base).__name__} at {id(self):#x}>"


def _weak_target(base: object) -> weakref.ReferenceType[Any]:
    if base is None:
        raise InvalidReceiverError("Cannot build a proxy over None")
    try:
        return weakref.ref(base)
    except TypeError as e:
        raise InvalidReceiverError(
            f"{type(base).__name__} object cannot be weakly referenced and cannot receive behaviors"
        ) from e


def proxy_target(proxy: Proxy) -> Any | None:
    """Return the object a proxy forwards to.

    Args:
        proxy: Proxy built by build_proxy().

    Returns:
        The base object, or None if it has been garbage collected.
    """
    return proxy._proxy_ref()


def forwarded_names(proxy: Proxy) -> tuple[str, ...]:
    """Return the method names a proxy mirrors.

    Args:
        proxy: Proxy built by build_proxy().

    Returns:
        Names snapshotted when the proxy was built.
    """
    return proxy._proxy_names


def _resolve(proxy: Proxy, name: str) -> Any:
    base = proxy_target(proxy)
    if base is None:
        raise InvalidReceiverError(f"Cannot call {name}(): the proxied receiver was collected")
    return base


def _make_forwarder(proxy: Proxy, name: str) -> Callable[..., Any]:
    def forward(*args: Any, **kwargs: Any) -> Any:
        base = _resolve(proxy, name)
        result = getattr(base, name)(*args, **kwargs)
        if result is base:
            return proxy
        return result

    forward.__name__ = name
    forward.__qualname__ = f"Proxy.{name}"
    return forward


def build_proxy(base: object) -> Proxy:
    """Build a forwarding proxy over the public methods of ``base``.

    Each forwarder looks the method up on ``base`` at call time and calls it
    with the forwarder's arguments. A result that is ``base`` itself comes
    back as the proxy. The set of forwarded names is fixed when the proxy is
    built; methods added to ``base`` afterwards are not mirrored.

    Args:
        base: Object to build the proxy over.

    Returns:
        New Proxy. An object without public methods gives an empty proxy.

    Raises:
        InvalidReceiverError: If ``base`` is None or cannot be weakly referenced.
    """
    ref = _weak_target(base)
    names = tuple(enumerate_methods(base))
    proxy = Proxy(ref, names)
    for name in names:
        setattr(proxy, name, _make_forwarder(proxy, name))
    return proxy
