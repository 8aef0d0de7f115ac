"""Slot key identity: unique tokens for safekeeping slots."""

from encapsulate.core.identity.models import SlotKey

__all__ = [
    "SlotKey",
]
