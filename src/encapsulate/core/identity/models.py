"""Slot key models.

Usage:
    key = SlotKey(index=7, label="HasName")
    store.get_or_create(receiver, key)
"""

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class SlotKey:
    """Process-wide unique token naming one safekeeping slot.

    A slot key is minted once per behavior application and shared by every
    method installed during that application. The label is informational
    and does not take part in equality.
    """

    index: int
    label: str = field(default="", compare=False)

    def __str__(self) -> str:
        if self.label:
            return f"__safekeeping_{self.index}_{self.label}__"
        return f"__safekeeping_{self.index}__"
