"""Behavior module models."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from encapsulate.core.types import Method


def is_private_name(name: str) -> bool:
    """Check whether a method name is private to its behavior."""
    return name.startswith("_")


@dataclass(frozen=True, slots=True, eq=False)
class BehaviorModule:
    """Named, immutable set of method bodies.

    A behavior holds no per-instance state. Its methods are called with a
    private context as their first argument once the behavior is applied
    to a receiver. Names starting with an underscore are private: they are
    reachable from the behavior's own methods but never installed on the
    receiver.
    """

    name: str
    methods: Mapping[str, Method] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for key, fn in self.methods.items():
            if not isinstance(key, str):
                raise TypeError(f"Behavior {self.name!r} has non-string method name {key!r}")
            if not callable(fn):
                raise TypeError(
                    f"Behavior {self.name!r} method {key!r} is not callable: {type(fn).__name__}"
                )
        object.__setattr__(self, "methods", MappingProxyType(dict(self.methods)))

    def public_methods(self) -> dict[str, Method]:
        """Methods installed on receivers, in definition order."""
        return {k: v for k, v in self.methods.items() if not is_private_name(k)}

    def private_methods(self) -> dict[str, Method]:
        """Methods bound onto private contexts only."""
        return {k: v for k, v in self.methods.items() if is_private_name(k)}

    def __contains__(self, name: object) -> bool:
        return name in self.methods

    def __iter__(self) -> Iterator[str]:
        return iter(self.methods)

    def __len__(self) -> int:
        return len(self.methods)
