"""Composition models: application records."""

from __future__ import annotations

from dataclasses import dataclass

from encapsulate.core.identity import SlotKey


@dataclass(frozen=True, slots=True)
class Application:
    """Record of one apply() call.

    Every stub installed by the call carries the same record, so sibling
    methods can be traced back to the slot they share.
    """

    slot_key: SlotKey
    behavior: str
    methods: tuple[str, ...]
    private_methods: tuple[str, ...] = ()
