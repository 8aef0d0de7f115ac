"""Behavior decorator and normalization.

Usage:
    @behavior
    class HasName:
        def name(self):
            return self._name

        def set_name(self, name):
            self._name = name
            return self

    # Or from a mapping:
    HasCareer = behavior(
        {
            "career": lambda self: self._career,
            "set_career": set_career,
        },
        name="HasCareer",
    )

The class form never instantiates the class. Its body is only a
convenient place to write the method bodies; ``self`` inside them is the
private context the behavior gets on each receiver.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, overload

from encapsulate.core.behavior.models import BehaviorModule
from encapsulate.core.types import Method


def _collect_methods(cls: type) -> dict[str, Method]:
    """Collect method bodies defined directly in a class body.

    Dunder names are skipped. staticmethod and classmethod wrappers are
    unwrapped to their functions, which then receive the private context
    like any other method.

    Args:
        cls: Class whose body defines the behavior.

    Returns:
        Mapping of method name to function, in definition order.
    """
    methods: dict[str, Method] = {}
    for name, value in vars(cls).items():
        if name.startswith("__") and name.endswith("__"):
            continue
        if isinstance(value, (staticmethod, classmethod)):
            value = value.__func__
        if callable(value):
            methods[name] = value
    return methods


@overload
def behavior(source: type | Mapping[str, Method], *, name: str | None = None) -> BehaviorModule: ...


@overload
def behavior(
    source: None = None, *, name: str | None = None
) -> Callable[[type | Mapping[str, Method]], BehaviorModule]: ...


def behavior(
    source: type | Mapping[str, Method] | None = None, *, name: str | None = None
) -> BehaviorModule | Callable[[type | Mapping[str, Method]], BehaviorModule]:
    """Define a behavior module from a class body or a mapping.

    Supports three forms:
        @behavior                     # bare decorator on a class
        @behavior(name="Named")       # factory with args
        behavior({"m": fn}, name="M") # direct call on a mapping

    Args:
        source: Class or mapping holding the method bodies, or None if
            called with arguments only.
        name: Behavior name. Defaults to the class name, or "behavior" for
            an unnamed mapping.

    Returns:
        BehaviorModule, or a decorator producing one.

    Raises:
        TypeError: If source is neither a class nor a mapping, or holds a
            non-callable method.
    """

    def decorator(s: type | Mapping[str, Method]) -> BehaviorModule:
        if isinstance(s, type):
            return BehaviorModule(name=name or s.__name__, methods=_collect_methods(s))
        if isinstance(s, Mapping):
            return BehaviorModule(name=name or "behavior", methods=dict(s))
        raise TypeError(
            f"behavior() expects a class or a mapping of methods, got {type(s).__name__}"
        )

    if source is None:
        return decorator
    return decorator(source)


def as_behavior(value: BehaviorModule | Mapping[str, Method] | Any) -> BehaviorModule:
    """Normalize a behavior module or a plain mapping of methods.

    Args:
        value: BehaviorModule or mapping from method name to callable.

    Returns:
        The BehaviorModule itself, or a new unnamed one built from the mapping.

    Raises:
        TypeError: If value is neither.
    """
    if isinstance(value, BehaviorModule):
        return value
    if isinstance(value, Mapping):
        return BehaviorModule(name="behavior", methods=dict(value))
    raise TypeError(f"Expected a BehaviorModule or a mapping of methods, got {type(value).__name__}")
