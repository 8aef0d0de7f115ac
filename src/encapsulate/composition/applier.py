"""Behavior applier: install behavior methods onto receivers.

Usage:
    @behavior
    class HasName:
        def name(self):
            return self._name

        def set_name(self, name):
            self._name = name
            return self

    class Person:
        pass

    apply(Person, HasName)
    ada = Person().set_name("Ada")  # set_name returned its context, caller sees ada
    assert ada.name() == "Ada"
    assert "_name" not in vars(ada)  # state lives in ada's private context

A class receiver is a shared prototype: each instance calling an installed
method gets its own private context. Any other object is a single receiver
and its methods are bound to it directly.

If two applications install the same method name, the later one wins.
The earlier method is unreachable by name; its contexts stay allocated and
inert.
"""

from __future__ import annotations

import functools
import inspect
import logging
import types
import warnings
from collections.abc import Callable, Mapping
from typing import Any, TypeVar

from encapsulate.composition.models import Application
from encapsulate.config import CompositionSettings, get_settings
from encapsulate.core.behavior import BehaviorModule, as_behavior
from encapsulate.core.errors import InvalidReceiverError
from encapsulate.core.identity import SlotKey
from encapsulate.core.proxy import Proxy, build_proxy
from encapsulate.core.types import Method
from encapsulate.storage import ContextStore, SlotKeyAllocator, get_allocator, get_store

logger = logging.getLogger(__name__)

R = TypeVar("R")


def application_of(method: Any) -> Application | None:
    """Return the application record of an installed method.

    Args:
        method: Function or bound method, as found on a receiver.

    Returns:
        Application if method was installed by apply(), None otherwise.
    """
    return getattr(method, "__application__", None)


def _context_factory(private: dict[str, Method]) -> Callable[[object], Proxy]:
    """Build contexts with the behavior's private methods bound onto them."""
    if not private:
        return build_proxy

    def factory(receiver: object) -> Proxy:
        context = build_proxy(receiver)
        for name, fn in private.items():
            setattr(context, name, types.MethodType(fn, context))
        return context

    return factory


def _make_stub(
    name: str,
    method: Method,
    slot_key: SlotKey,
    store: ContextStore,
    factory: Callable[[object], Any],
    application: Application,
) -> Callable[..., Any]:
    @functools.wraps(method)
    def installed(*args: Any, **kwargs: Any) -> Any:
        if not args or args[0] is None:
            raise InvalidReceiverError(
                f"{application.behavior}.{name}() must be called on a receiver object"
            )
        caller = args[0]
        context = store.get_or_create(caller, slot_key, factory)
        result = method(context, *args[1:], **kwargs)
        if result is context:
            return caller
        return result

    installed.__name__ = name
    installed.__qualname__ = f"{application.behavior}.{name}"
    installed.__application__ = application  # type: ignore[attr-defined]
    return installed


def _install(
    receiver: object,
    name: str,
    stub: Callable[..., Any],
    settings: CompositionSettings,
) -> None:
    is_prototype = isinstance(receiver, type)

    if settings.warn_on_shadow:
        previous = application_of(inspect.getattr_static(receiver, name, None))
        if previous is not None:
            warnings.warn(
                f"{stub.__qualname__} shadows {previous.behavior}.{name} "
                f"on {_describe(receiver)}. Only the last one will be reachable.",
                stacklevel=3,
            )

    try:
        if is_prototype:
            setattr(receiver, name, stub)
        else:
            object.__setattr__(receiver, name, types.MethodType(stub, receiver))
    except (AttributeError, TypeError) as e:
        raise InvalidReceiverError(
            f"Cannot install {name}() on {_describe(receiver)}: {e}"
        ) from e


def _describe(receiver: object) -> str:
    if isinstance(receiver, type):
        return f"class {receiver.__qualname__}"
    return f"{type(receiver).__name__} object"


def apply(
    receiver: R,
    module: BehaviorModule | Mapping[str, Method],
    *,
    store: ContextStore | None = None,
    allocator: SlotKeyAllocator | None = None,
    settings: CompositionSettings | None = None,
) -> R:
    """Install a behavior's methods onto a receiver.

    Mints one slot key shared by every method installed in this call. Each
    installed method, called on the receiver (or an instance of it when the
    receiver is a class), runs the behavior's method against the caller's
    private context for that slot, creating the context on first use. A
    result that is the context itself is returned as the caller.

    Nothing runs at application time; contexts are created lazily.

    Args:
        receiver: Class (shared prototype) or object to install onto.
        module: BehaviorModule or mapping from method name to callable.
        store: Context store. Defaults to the process-wide store.
        allocator: Slot key allocator. Defaults to the process-wide allocator.
        settings: Composition settings. Defaults to the loaded settings.

    Returns:
        The receiver, for chaining.

    Raises:
        InvalidReceiverError: If receiver is None or refuses new attributes.
        DuplicateApplicationKeyError: If the slot key source repeats a key.
        TypeError: If module is not a behavior or mapping of callables.
    """
    if receiver is None:
        raise InvalidReceiverError("Cannot apply a behavior to None")
    behavior_module = as_behavior(module)
    settings = settings if settings is not None else get_settings()
    store = store if store is not None else get_store()
    allocator = allocator or get_allocator()

    slot_key = allocator.allocate(behavior_module.name)
    public = behavior_module.public_methods()
    private = behavior_module.private_methods()
    application = Application(
        slot_key=slot_key,
        behavior=behavior_module.name,
        methods=tuple(public),
        private_methods=tuple(private),
    )
    factory = _context_factory(private)

    for name, method in public.items():
        stub = _make_stub(name, method, slot_key, store, factory, application)
        _install(receiver, name, stub, settings)

    logger.debug(
        "Applied %s to %s under %s (%d methods)",
        behavior_module.name,
        _describe(receiver),
        slot_key,
        len(public),
    )
    return receiver


def with_behaviors(
    *modules: BehaviorModule | Mapping[str, Method],
    store: ContextStore | None = None,
    allocator: SlotKeyAllocator | None = None,
    settings: CompositionSettings | None = None,
) -> Callable[[type[R]], type[R]]:
    """Class decorator applying behaviors in order.

    Usage:
        @with_behaviors(HasName, HasCareer, IsSelfDescribing)
        class Person:
            pass

    Args:
        modules: Behaviors to apply, first to last.
        store: Context store passed to apply().
        allocator: Slot key allocator passed to apply().
        settings: Composition settings passed to apply().

    Returns:
        Decorator that applies the behaviors and returns the class.
    """

    def decorator(cls: type[R]) -> type[R]:
        for module in modules:
            apply(cls, module, store=store, allocator=allocator, settings=settings)
        return cls

    return decorator
